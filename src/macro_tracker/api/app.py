"""FastAPI application factory."""

import base64
import binascii
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from macro_tracker.api.models import (
    ExerciseRequest,
    ImageEstimateRequest,
    MealRequest,
    NameEstimateRequest,
    ProfileRequest,
    SettingsRequest,
    WaterRequest,
    WeightRequest,
)
from macro_tracker.app_logging import configure_logging
from macro_tracker.containers import AppContainer
from macro_tracker.errors import (
    EstimationFailedError,
    NotConfiguredError,
    ProfileMissingError,
    TrackerError,
    ValidationError,
)
from macro_tracker.services.tracker import TrackerService

_ERROR_STATUS: dict[type[TrackerError], int] = {
    ValidationError: 422,
    ProfileMissingError: 409,
    NotConfiguredError: 409,
    EstimationFailedError: 502,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(
        request: Request, exc: TrackerError
    ) -> JSONResponse:
        status_code = _ERROR_STATUS.get(type(exc), 400)
        logger.info("Command rejected (%s): %s", type(exc).__name__, exc)
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/state")
    async def get_state(request: Request) -> dict[str, object]:
        """Return the profile, targets and the selected day's progress."""
        return _state_payload(_tracker(request))

    @app.post("/profile")
    async def create_profile(
        payload: ProfileRequest, request: Request
    ) -> dict[str, object]:
        """Create or replace the profile."""
        tracker = _tracker(request)
        tracker.create_profile(**payload.model_dump())
        return _state_payload(tracker)

    @app.post("/date/previous")
    async def previous_day(request: Request) -> dict[str, object]:
        """Select the previous day."""
        tracker = _tracker(request)
        tracker.select_previous_day()
        return _state_payload(tracker)

    @app.post("/date/next")
    async def next_day(request: Request) -> dict[str, object]:
        """Select the next day, stopping at today."""
        tracker = _tracker(request)
        tracker.select_next_day()
        return _state_payload(tracker)

    @app.post("/date/today")
    async def today(request: Request) -> dict[str, object]:
        """Select today."""
        tracker = _tracker(request)
        tracker.select_today()
        return _state_payload(tracker)

    @app.post("/meals")
    async def add_meal(payload: MealRequest, request: Request) -> dict[str, object]:
        """Log a meal on the selected date."""
        tracker = _tracker(request)
        meal = tracker.add_meal(**payload.model_dump())
        return {"meal": asdict(meal), "state": _state_payload(tracker)}

    @app.delete("/meals/{meal_id}")
    async def delete_meal(meal_id: int, request: Request) -> dict[str, object]:
        """Delete a meal from the selected date."""
        tracker = _tracker(request)
        removed = tracker.delete_meal(meal_id)
        return {"removed": removed, "state": _state_payload(tracker)}

    @app.post("/meals/estimate/name")
    async def estimate_meal_from_name(
        payload: NameEstimateRequest, request: Request
    ) -> dict[str, object]:
        """Estimate macros for a described food."""
        estimate = await _tracker(request).estimate_meal_from_name(
            payload.description
        )
        return estimate.model_dump()

    @app.post("/meals/estimate/image")
    async def estimate_meal_from_image(
        payload: ImageEstimateRequest, request: Request
    ) -> dict[str, object]:
        """Estimate a meal from a base64-encoded photo."""
        image_bytes = _decode_image(payload.image_base64)
        estimate = await _tracker(request).estimate_meal_from_image(
            image_bytes, payload.mime_type
        )
        return estimate.model_dump()

    @app.post("/exercises")
    async def add_exercise(
        payload: ExerciseRequest, request: Request
    ) -> dict[str, object]:
        """Estimate and log an exercise on the selected date."""
        tracker = _tracker(request)
        exercise = await tracker.add_exercise_by_description(payload.description)
        return {
            "exercise": asdict(exercise) if exercise else None,
            "state": _state_payload(tracker),
        }

    @app.delete("/exercises/{exercise_id}")
    async def delete_exercise(exercise_id: int, request: Request) -> dict[str, object]:
        """Delete an exercise from the selected date."""
        tracker = _tracker(request)
        removed = tracker.delete_exercise(exercise_id)
        return {"removed": removed, "state": _state_payload(tracker)}

    @app.post("/water")
    async def adjust_water(
        payload: WaterRequest, request: Request
    ) -> dict[str, object]:
        """Add or remove one glass of water."""
        tracker = _tracker(request)
        tracker.adjust_water(payload.delta)
        return _state_payload(tracker)

    @app.post("/weight")
    async def log_weight(payload: WeightRequest, request: Request) -> dict[str, object]:
        """Log today's weight and refresh targets."""
        tracker = _tracker(request)
        tracker.log_weight(payload.weight)
        return _state_payload(tracker)

    @app.get("/weight")
    async def weight_trend(request: Request) -> dict[str, object]:
        """Return the weight history ordered by date."""
        entries = _tracker(request).weight_trend()
        return {"entries": [asdict(entry) for entry in entries]}

    @app.put("/settings")
    async def update_settings(
        payload: SettingsRequest, request: Request
    ) -> dict[str, object]:
        """Update the AI API key."""
        tracker = _tracker(request)
        tracker.update_settings(payload.ai_api_key)
        return {"ai_configured": tracker.state.settings.ai_api_key is not None}

    return app


def _tracker(request: Request) -> TrackerService:
    container: AppContainer = request.app.state.container
    return container.tracker_service


def _state_payload(tracker: TrackerService) -> dict[str, object]:
    return tracker.snapshot()


def _decode_image(encoded: str) -> bytes:
    if "," in encoded and encoded.startswith("data:"):
        encoded = encoded.split(",", 1)[1]
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("The image is not valid base64.") from exc
