from decimal import Decimal

import pytest

from domain.errors import InvalidInputError, OrderingError
from domain.movements import MovementType
from domain.ordering import ensure_chronological, require_finite, safe_average, sort_chronologically
from tests.constants import JAN_1, JAN_2
from tests.helpers.time_utils import make_movement


def test_sort_uses_sequence_to_break_timestamp_ties() -> None:
    late = make_movement(MovementType.SALE, 1, timestamp=JAN_2, sequence=0)
    tie_second = make_movement(MovementType.SALE, 1, timestamp=JAN_1, sequence=9)
    tie_first = make_movement(MovementType.PURCHASE, 1, 1, timestamp=JAN_1, sequence=3)

    assert sort_chronologically([late, tie_second, tie_first]) == [tie_first, tie_second, late]


def test_sort_is_stable_for_full_ties() -> None:
    first = make_movement(MovementType.PURCHASE, 1, 1, timestamp=JAN_1, sequence=0)
    second = make_movement(MovementType.PURCHASE, 2, 1, timestamp=JAN_1, sequence=0)

    assert sort_chronologically([first, second]) == [first, second]
    assert sort_chronologically([second, first]) == [second, first]


def test_ensure_chronological_accepts_equal_timestamps() -> None:
    ensure_chronological(
        [
            make_movement(MovementType.PURCHASE, 1, 1, timestamp=JAN_1),
            make_movement(MovementType.SALE, 1, timestamp=JAN_1),
            make_movement(MovementType.SALE, 1, timestamp=JAN_2),
        ]
    )


def test_ensure_chronological_reports_position() -> None:
    with pytest.raises(OrderingError) as excinfo:
        ensure_chronological(
            [
                make_movement(MovementType.PURCHASE, 1, 1, timestamp=JAN_2),
                make_movement(MovementType.SALE, 1, timestamp=JAN_1),
            ]
        )

    assert excinfo.value.index == 1
    assert excinfo.value.previous == JAN_2
    assert excinfo.value.current == JAN_1


def test_safe_average() -> None:
    assert safe_average(Decimal(10), Decimal(4)) == Decimal("2.5")
    assert safe_average(Decimal(10), Decimal(0)) == Decimal(0)
    assert safe_average(Decimal(-10), Decimal(-4)) == Decimal(0)


def test_require_finite() -> None:
    assert require_finite(Decimal("1.5"), name="x") == Decimal("1.5")
    with pytest.raises(InvalidInputError):
        require_finite(Decimal("-Infinity"), name="x")


def test_require_finite_converts_ints_but_not_floats_or_bools() -> None:
    assert require_finite(500_000, name="x") == Decimal(500_000)
    with pytest.raises(InvalidInputError):
        require_finite(0.1, name="x")  # type: ignore[arg-type]
    with pytest.raises(InvalidInputError):
        require_finite(False, name="x")
