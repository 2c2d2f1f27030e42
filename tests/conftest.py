"""Shared test fixtures."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import pytest

from macro_tracker.config import Settings
from macro_tracker.containers import AppContainer
from macro_tracker.services.estimation import (
    EstimationService,
    EstimatorClient,
    InlineImage,
)
from macro_tracker.services.tracker import StateStore, TrackerService

FIXED_MS = 1_700_000_000_000

DEFAULT_PROFILE: dict[str, object] = {
    "name": "Ana",
    "age": 25,
    "weight": 70,
    "height": 175,
    "gender": "male",
    "activity": 1.55,
    "goal": "maintain",
}


@dataclass
class InMemoryStateStore(StateStore):
    """In-memory key-value store for tests."""

    values: dict[str, bytes] = field(default_factory=dict)
    writes: int = 0

    def get(self, key: str) -> bytes | None:
        return self.values.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.values[key] = value
        self.writes += 1


@dataclass
class FakeEstimatorClient(EstimatorClient):
    """Fake estimator returning queued replies and recording prompts."""

    replies: list[str] = field(default_factory=list)
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)
    before_reply: Callable[[], None] | None = None

    async def generate(
        self,
        *,
        api_key: str,
        model: str,
        prompt: str,
        image: InlineImage | None = None,
    ) -> str:
        self.calls.append(
            {"api_key": api_key, "model": model, "prompt": prompt, "image": image}
        )
        if self.before_reply is not None:
            self.before_reply()
        if self.error is not None:
            raise self.error
        if self.replies:
            return self.replies.pop(0)
        return "{}"


@dataclass
class FakeClock:
    """Controllable replacement for date.today."""

    current: date = date(2026, 3, 10)

    def __call__(self) -> date:
        return self.current


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def estimator_client() -> FakeEstimatorClient:
    return FakeEstimatorClient()


@pytest.fixture
def estimation_service(estimator_client: FakeEstimatorClient) -> EstimationService:
    return EstimationService(client=estimator_client, model="test-model")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(
    store: InMemoryStateStore,
    estimation_service: EstimationService,
    clock: FakeClock,
) -> TrackerService:
    return TrackerService(
        store=store,
        estimation_service=estimation_service,
        today=clock,
        clock_ms=lambda: FIXED_MS,
    )


@pytest.fixture
def onboarded_tracker(tracker: TrackerService) -> TrackerService:
    tracker.create_profile(**DEFAULT_PROFILE, reset_history=True)
    tracker.update_settings("test-key")
    return tracker


@pytest.fixture
def container(settings: Settings, tracker: TrackerService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        estimation_service=tracker.estimation_service,
        tracker_service=tracker,
        close_resources=close_resources,
    )
