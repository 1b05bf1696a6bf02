"""Domain models for saved meals."""

from dataclasses import dataclass
from datetime import date as calendar_date
from typing import Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator

MealChangeKind = Literal["saved", "deleted", "cleared"]


class MealRecord(BaseModel):
    """One analyzed and confirmed meal."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    timestamp: AwareDatetime
    name: str = Field(min_length=1)
    calories: float = Field(ge=0.0)
    carbs: float = Field(ge=0.0)
    protein: float = Field(ge=0.0)
    fat: float = Field(ge=0.0)
    confidence: float = Field(ge=0.0, le=1.0)
    image: str | None = None

    @field_validator("date")
    @classmethod
    def _check_calendar_date(cls, value: str) -> str:
        calendar_date.fromisoformat(value)
        return value


@dataclass(frozen=True)
class MealChange:
    """Notification emitted after the meal collection changes."""

    kind: MealChangeKind
    meal_id: str | None = None
