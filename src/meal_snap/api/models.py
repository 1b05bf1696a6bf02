"""Request and response models for the HTTP API."""

from pydantic import AwareDatetime, BaseModel

from meal_snap.domain.estimation import NutritionEstimate
from meal_snap.domain.meals import MealRecord


class AnalyzeMealRequest(BaseModel):
    """Body of an analyze request carrying an encoded image."""

    image: str | None = None


class SaveMealRequest(NutritionEstimate):
    """Confirmed estimate to persist as a meal record."""

    id: str | None = None
    image: str | None = None
    captured_at: AwareDatetime | None = None


class MacroTotalsResponse(BaseModel):
    calories: float
    carbs: float
    protein: float
    fat: float


class DaySummaryResponse(BaseModel):
    """Meals of one day with totals and PFC ratio."""

    date: str
    meal_count: int
    totals: MacroTotalsResponse
    pfc_ratio: str
    meals: list[MealRecord]
