"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse

from meal_snap.api.models import (
    AnalyzeMealRequest,
    DaySummaryResponse,
    MacroTotalsResponse,
    SaveMealRequest,
)
from meal_snap.app_logging import configure_logging
from meal_snap.containers import AppContainer
from meal_snap.domain.errors import MealSnapError
from meal_snap.domain.estimation import NutritionEstimate
from meal_snap.domain.meals import MealChange, MealRecord
from meal_snap.domain.stats import DaySummary
from meal_snap.services.meals import build_meal_record


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    def log_change(change: MealChange) -> None:
        logger.info("Meal data changed: %s %s", change.kind, change.meal_id or "")

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        unsubscribe = app.state.container.meal_store.subscribe(log_change)
        yield
        unsubscribe()
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(MealSnapError)
    async def meal_snap_error_handler(
        request: Request, exc: MealSnapError
    ) -> JSONResponse:
        state_container: AppContainer = request.app.state.container
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_payload(state_container.settings.include_debug),
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/analyze-meal")
    async def analyze_meal(
        body: AnalyzeMealRequest, request: Request
    ) -> NutritionEstimate:
        """Estimate nutrition for an uploaded meal photo."""
        state_container: AppContainer = request.app.state.container
        return await state_container.estimation_service.analyze(body.image)

    @app.get("/api/meals")
    async def list_meals(request: Request) -> list[MealRecord]:
        """Return every saved meal in insertion order."""
        state_container: AppContainer = request.app.state.container
        return state_container.meal_store.get_all()

    @app.post("/api/meals", status_code=status.HTTP_201_CREATED)
    async def save_meal(body: SaveMealRequest, request: Request) -> MealRecord:
        """Persist a confirmed estimate as a meal record."""
        state_container: AppContainer = request.app.state.container
        settings = state_container.settings
        record = build_meal_record(
            estimate=NutritionEstimate.model_validate(
                body.model_dump(include=set(NutritionEstimate.model_fields))
            ),
            captured_at=body.captured_at or datetime.now(tz=UTC),
            timezone=settings.tzinfo,
            image=body.image if settings.retain_images else None,
            meal_id=body.id,
        )
        state_container.meal_store.save(record)
        return record

    @app.get("/api/meals/today")
    async def today(request: Request) -> DaySummaryResponse:
        """Return today's meals with totals."""
        state_container: AppContainer = request.app.state.container
        return _day_summary_response(state_container.stats_service.get_today_summary())

    @app.get("/api/meals/history")
    async def history(request: Request) -> list[DaySummaryResponse]:
        """Return per-day summaries, most recent day first."""
        state_container: AppContainer = request.app.state.container
        return [
            _day_summary_response(summary)
            for summary in state_container.stats_service.get_history()
        ]

    @app.get("/api/meals/{meal_id}")
    async def get_meal(meal_id: str, request: Request) -> MealRecord:
        """Return a single meal by id."""
        state_container: AppContainer = request.app.state.container
        record = state_container.meal_store.get_by_id(meal_id)
        if record is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
        return record

    @app.delete("/api/meals/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_meal(meal_id: str, request: Request) -> Response:
        """Delete a meal; unknown ids are ignored."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_store.delete_by_id(meal_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    @app.delete("/api/meals", status_code=status.HTTP_204_NO_CONTENT)
    async def clear_meals(request: Request) -> Response:
        """Delete every saved meal."""
        state_container: AppContainer = request.app.state.container
        state_container.meal_store.clear_all()
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


def _day_summary_response(summary: DaySummary) -> DaySummaryResponse:
    return DaySummaryResponse(
        date=summary.day,
        meal_count=len(summary.meals),
        totals=MacroTotalsResponse(
            calories=summary.totals.calories,
            carbs=summary.totals.carbs,
            protein=summary.totals.protein,
            fat=summary.totals.fat,
        ),
        pfc_ratio=str(summary.pfc),
        meals=summary.meals,
    )
