"""Models for nutrition estimates returned by the vision model."""

from pydantic import BaseModel, Field


class NutritionEstimate(BaseModel):
    """Structured output for a single analyzed meal photo."""

    name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    confidence: float = Field(ge=0.0, le=1.0)
