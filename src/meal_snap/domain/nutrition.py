"""Nutrition arithmetic over meal records."""

import math
from collections.abc import Iterable
from dataclasses import dataclass

from meal_snap.domain.meals import MealRecord

CARBS_KCAL_PER_G = 4
PROTEIN_KCAL_PER_G = 4
FAT_KCAL_PER_G = 9


@dataclass(frozen=True)
class MacroTotals:
    """Summed calories and macros."""

    calories: float
    carbs: float
    protein: float
    fat: float


@dataclass(frozen=True)
class PfcRatio:
    """Calorie-weighted percentage split of carbs, protein and fat."""

    carbs: int
    protein: int
    fat: int

    def __str__(self) -> str:
        return f"{self.carbs}:{self.protein}:{self.fat}"


def sum_macros(records: Iterable[MealRecord]) -> MacroTotals:
    """Sum calories and macros across records."""
    total = MacroTotals(0.0, 0.0, 0.0, 0.0)
    for record in records:
        total = MacroTotals(
            calories=total.calories + record.calories,
            carbs=total.carbs + record.carbs,
            protein=total.protein + record.protein,
            fat=total.fat + record.fat,
        )
    return total


def pfc_ratio(carbs: float, protein: float, fat: float) -> PfcRatio:
    """Return each macro's share of macro-derived calories, in percent.

    Shares are rounded half up independently, so they may not sum to 100.
    """
    carbs_kcal = carbs * CARBS_KCAL_PER_G
    protein_kcal = protein * PROTEIN_KCAL_PER_G
    fat_kcal = fat * FAT_KCAL_PER_G
    total = carbs_kcal + protein_kcal + fat_kcal
    if total <= 0:
        return PfcRatio(0, 0, 0)
    return PfcRatio(
        carbs=_round_half_up(carbs_kcal / total * 100),
        protein=_round_half_up(protein_kcal / total * 100),
        fat=_round_half_up(fat_kcal / total * 100),
    )


def totals_ratio(totals: MacroTotals) -> PfcRatio:
    """Return the PFC ratio for summed totals."""
    return pfc_ratio(totals.carbs, totals.protein, totals.fat)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
