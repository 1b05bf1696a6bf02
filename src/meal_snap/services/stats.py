"""Daily and historical summaries over saved meals."""

from dataclasses import dataclass

from meal_snap.domain.meals import MealRecord
from meal_snap.domain.nutrition import sum_macros, totals_ratio
from meal_snap.domain.stats import DaySummary
from meal_snap.services.meals import MealStore


@dataclass
class StatsService:
    """Service building the today and history views."""

    store: MealStore

    def get_today_summary(self) -> DaySummary:
        """Return today's meals in timestamp order with totals."""
        today = self.store.clock().astimezone(self.store.timezone).date().isoformat()
        meals = sorted(
            (record for record in self.store.get_all() if record.date == today),
            key=lambda record: record.timestamp,
        )
        return _summarize(today, meals)

    def get_history(self) -> list[DaySummary]:
        """Return one summary per recorded day, most recent day first."""
        grouped = self.store.get_grouped_by_date()
        return [_summarize(day, grouped[day]) for day in sorted(grouped, reverse=True)]


def _summarize(day: str, meals: list[MealRecord]) -> DaySummary:
    totals = sum_macros(meals)
    return DaySummary(day=day, meals=meals, totals=totals, pfc=totals_ratio(totals))
