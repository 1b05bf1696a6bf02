"""Tests for stats service."""

from datetime import UTC, datetime

from meal_snap.services.meals import MealStore, encode_records
from meal_snap.services.stats import StatsService
from tests.conftest import FIXED_NOW, make_record


def test_get_today_summary_totals_todays_meals(meal_store: MealStore) -> None:
    meal_store.save(make_record("yesterday", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)))
    meal_store.save(make_record("lunch", FIXED_NOW))
    meal_store.save(
        make_record(
            "breakfast",
            datetime(2024, 1, 2, 7, 0, tzinfo=UTC),
            calories=300,
            carbs=40,
            protein=10,
            fat=10,
        )
    )

    summary = StatsService(meal_store).get_today_summary()

    assert summary.day == "2024-01-02"
    assert [meal.id for meal in summary.meals] == ["breakfast", "lunch"]
    assert summary.totals.calories == 950
    assert summary.totals.carbs == 120
    assert str(summary.pfc) == "56:14:30"


def test_get_today_summary_without_meals(meal_store: MealStore) -> None:
    summary = StatsService(meal_store).get_today_summary()

    assert summary.day == "2024-01-02"
    assert summary.meals == []
    assert summary.totals.calories == 0
    assert str(summary.pfc) == "0:0:0"


def test_get_history_lists_most_recent_day_first(meal_store: MealStore) -> None:
    meal_store.save(make_record("jan-1", datetime(2024, 1, 1, 9, 0, tzinfo=UTC)))
    meal_store.save(make_record("dec-31", datetime(2023, 12, 31, 9, 0, tzinfo=UTC)))
    meal_store.save(make_record("jan-2", FIXED_NOW))
    meal_store.save(make_record("jan-1-late", datetime(2024, 1, 1, 20, 0, tzinfo=UTC)))

    history = StatsService(meal_store).get_history()

    assert [summary.day for summary in history] == [
        "2024-01-02",
        "2024-01-01",
        "2023-12-31",
    ]
    assert [meal.id for meal in history[1].meals] == ["jan-1", "jan-1-late"]
    assert history[1].totals.calories == 1300


def test_today_summary_reads_clock_once(storage) -> None:
    ticks = iter(
        [
            datetime(2024, 1, 1, 23, 59, 59, tzinfo=UTC),
            datetime(2024, 1, 2, 0, 0, 1, tzinfo=UTC),
        ]
    )
    store = MealStore(storage=storage, timezone=UTC, clock=lambda: next(ticks))
    storage.values["meal_records"] = encode_records(
        [make_record("late-dinner", datetime(2024, 1, 1, 22, 0, tzinfo=UTC))]
    )

    summary = StatsService(store).get_today_summary()

    assert summary.day == "2024-01-01"
    assert [meal.id for meal in summary.meals] == ["late-dinner"]
