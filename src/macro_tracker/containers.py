"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from macro_tracker.adapters.file_state_store import FileStateStore
from macro_tracker.adapters.gemini_client import GeminiClient
from macro_tracker.adapters.openai_estimator_client import OpenAIEstimatorClient
from macro_tracker.config import Settings, resolve_provider
from macro_tracker.services.estimation import EstimationService
from macro_tracker.services.tracker import TrackerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    estimation_service: EstimationService
    tracker_service: TrackerService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = FileStateStore(resolved_settings.data_dir)
    if resolve_provider(resolved_settings.estimator_provider) == "openai":
        client: GeminiClient | OpenAIEstimatorClient = OpenAIEstimatorClient(
            timeout_seconds=resolved_settings.request_timeout_seconds
        )
        model = resolved_settings.openai_model
    else:
        client = GeminiClient.create(
            base_url=resolved_settings.gemini_base_url,
            timeout_seconds=resolved_settings.request_timeout_seconds,
        )
        model = resolved_settings.gemini_model
    estimation_service = EstimationService(client=client, model=model)
    tracker_service = TrackerService(
        store=store,
        estimation_service=estimation_service,
        state_key=resolved_settings.state_key,
    )

    async def close_resources() -> None:
        await client.close()

    return AppContainer(
        settings=resolved_settings,
        estimation_service=estimation_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
