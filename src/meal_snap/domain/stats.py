"""Domain models for daily summaries."""

from dataclasses import dataclass

from meal_snap.domain.meals import MealRecord
from meal_snap.domain.nutrition import MacroTotals, PfcRatio


@dataclass(frozen=True)
class DaySummary:
    """Meals of one calendar day with their totals."""

    day: str
    meals: list[MealRecord]
    totals: MacroTotals
    pfc: PfcRatio
