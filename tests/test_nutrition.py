"""Tests for nutrition arithmetic."""

from datetime import UTC, datetime

from meal_snap.domain.nutrition import MacroTotals, PfcRatio, pfc_ratio, sum_macros
from tests.conftest import make_record


def test_pfc_ratio_weights_fat_by_nine() -> None:
    ratio = pfc_ratio(carbs=80, protein=20, fat=18)

    assert ratio == PfcRatio(carbs=57, protein=14, fat=29)
    assert str(ratio) == "57:14:29"


def test_pfc_ratio_of_nothing_is_zero() -> None:
    assert str(pfc_ratio(0, 0, 0)) == "0:0:0"


def test_pfc_ratio_rounds_half_up() -> None:
    # 4 of 32 kcal from carbs is exactly 12.5%.
    assert pfc_ratio(carbs=1, protein=7, fat=0) == PfcRatio(13, 88, 0)
    assert pfc_ratio(carbs=1, protein=1, fat=0) == PfcRatio(50, 50, 0)


def test_sum_macros_adds_every_record() -> None:
    timestamp = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)
    records = [
        make_record("a", timestamp, calories=650, carbs=80, protein=20, fat=18),
        make_record("b", timestamp, calories=200, carbs=30, protein=5, fat=6.5),
    ]

    assert sum_macros(records) == MacroTotals(
        calories=850, carbs=110, protein=25, fat=24.5
    )


def test_sum_macros_of_empty_is_zero() -> None:
    assert sum_macros([]) == MacroTotals(0.0, 0.0, 0.0, 0.0)
