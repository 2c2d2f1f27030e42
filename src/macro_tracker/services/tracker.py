"""Application controller: user commands against the tracker state."""

import json
import logging
import math
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field, replace
from datetime import date, timedelta
from typing import Protocol

from macro_tracker.domain.estimates import MealEstimate, NutritionEstimate
from macro_tracker.domain.ledger import (
    DailyRecord,
    DailyStatus,
    Exercise,
    Meal,
    WeightEntry,
)
from macro_tracker.domain.profile import GENDERS, GOALS, Profile, Targets
from macro_tracker.domain.state import AppState
from macro_tracker.errors import (
    NotConfiguredError,
    ProfileMissingError,
    ValidationError,
)
from macro_tracker.services.estimation import EstimationService
from macro_tracker.services.goals import compute_targets
from macro_tracker.services.ledger import LedgerStore, compute_daily_status
from macro_tracker.services.migration import migrate_state
from macro_tracker.services.serialization import state_from_dict, state_to_dict

_logger = logging.getLogger(__name__)

DEFAULT_STATE_KEY = "macroTrackerState"


class StateStore(Protocol):
    """Key-value byte store holding the serialized state."""

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes for a key, if present."""

    def set(self, key: str, value: bytes) -> None:
        """Overwrite the value for a key."""


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class TrackerService:
    """Owns the application state and applies every user command to it.

    State is loaded once on construction and written back in full after each
    command that changes it.
    """

    store: StateStore
    estimation_service: EstimationService
    state_key: str = DEFAULT_STATE_KEY
    today: Callable[[], date] = date.today
    clock_ms: Callable[[], int] = _now_ms
    state: AppState = field(init=False)
    ledger: LedgerStore = field(init=False)
    _last_id: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.load()

    def load(self) -> AppState:
        """Load, migrate and normalize the persisted state."""
        today = self._today_str()
        data = migrate_state(self._read_blob(), today)
        state = state_from_dict(data, selected_date=today)
        if state.profile is not None:
            state.targets = compute_targets(state.profile)
        self.state = state
        self.ledger = LedgerStore(state.ledger)
        self.ledger.get_or_create(today)
        self._last_id = self.ledger.max_entry_id()
        return state

    def save(self) -> None:
        """Write the full state back to the store."""
        blob = json.dumps(state_to_dict(self.state)).encode("utf-8")
        self.store.set(self.state_key, blob)

    # Profile and settings

    def create_profile(  # noqa: PLR0913
        self,
        *,
        name: object,
        age: object,
        weight: object,
        height: object,
        gender: object,
        activity: object,
        goal: object,
        reset_history: bool,
    ) -> Targets:
        """Create or replace the profile and derive new targets.

        ``reset_history`` decides whether the existing ledger and weight
        history are discarded; when kept, today's weight is upserted.
        """
        profile = Profile(
            name=_parse_name(name),
            age=_parse_positive_int(age, "age"),
            weight=_parse_positive_float(weight, "weight"),
            height=_parse_positive_int(height, "height"),
            gender=_parse_choice(gender, GENDERS, "gender"),
            activity=_parse_positive_float(activity, "activity"),
            goal=_parse_choice(goal, GOALS, "goal"),
        )
        today = self._today_str()
        self.state.profile = profile
        self.state.targets = compute_targets(profile)
        if reset_history:
            _logger.info("Profile re-created; clearing ledger and weight history")
            self.ledger.records.clear()
            self.state.weight_history = [WeightEntry(date=today, weight=profile.weight)]
        else:
            self.state.weight_history = _upsert_weight(
                self.state.weight_history, today, profile.weight
            )
        self.state.selected_date = today
        self.ledger.get_or_create(today)
        self.save()
        return self.state.targets

    def update_settings(self, ai_api_key: str | None) -> None:
        """Store the AI API key; a blank value clears it."""
        cleaned = ai_api_key.strip() if ai_api_key else ""
        self.state.settings.ai_api_key = cleaned or None
        self.save()

    def log_weight(self, value: object) -> Targets:
        """Record today's weight, update the profile and re-derive targets."""
        weight = _parse_positive_float(value, "weight")
        profile = self._require_profile()
        today = self._today_str()
        self.state.weight_history = _upsert_weight(
            self.state.weight_history, today, weight
        )
        self.state.profile = replace(profile, weight=weight)
        self.state.targets = compute_targets(self.state.profile)
        self.save()
        return self.state.targets

    # Date navigation

    def select_previous_day(self) -> str:
        """Move the selected date one day back."""
        return self._select(self._selected() - timedelta(days=1))

    def select_next_day(self) -> str:
        """Move the selected date one day forward, never past today."""
        candidate = self._selected() + timedelta(days=1)
        if candidate > self.today():
            return self.state.selected_date
        return self._select(candidate)

    def select_today(self) -> str:
        """Jump back to today."""
        return self._select(self.today())

    # Ledger commands

    def add_meal(  # noqa: PLR0913
        self,
        name: str,
        calories: object = 0,
        protein: object = 0,
        carbs: object = 0,
        fats: object = 0,
    ) -> Meal:
        """Log a meal on the selected date."""
        meal = Meal(
            id=self._next_id(),
            name=name.strip(),
            calories=_parse_amount(calories, "calories"),
            protein=_parse_amount(protein, "protein"),
            carbs=_parse_amount(carbs, "carbs"),
            fats=_parse_amount(fats, "fats"),
        )
        self.ledger.add_meal(self.state.selected_date, meal)
        self.save()
        return meal

    def delete_meal(self, meal_id: int) -> bool:
        """Delete a meal from the selected date; unknown ids are ignored."""
        removed = self.ledger.remove_meal(self.state.selected_date, meal_id)
        if removed:
            self.save()
        return removed

    async def add_exercise_by_description(self, description: str) -> Exercise | None:
        """Estimate an activity's burn and log it on the selected date.

        The date is captured before the estimate is requested so a late reply
        lands on the day the user asked from. Nothing is logged when the
        estimate is zero.
        """
        cleaned = description.strip()
        if not cleaned:
            raise ValidationError("Describe the activity first.")
        api_key = self._require_api_key()
        profile = self._require_profile()
        target_date = self.state.selected_date
        estimate = await self.estimation_service.estimate_exercise_burn(
            api_key, profile, cleaned
        )
        if estimate.burned_calories <= 0:
            _logger.info("Exercise estimate was zero; nothing logged")
            return None
        exercise = Exercise(
            id=self._next_id(), name=cleaned, calories=estimate.burned_calories
        )
        self.ledger.add_exercise(target_date, exercise)
        self.save()
        return exercise

    def delete_exercise(self, exercise_id: int) -> bool:
        """Delete an exercise from the selected date; unknown ids are ignored."""
        removed = self.ledger.remove_exercise(self.state.selected_date, exercise_id)
        if removed:
            self.save()
        return removed

    def adjust_water(self, delta: int) -> int:
        """Add or remove glasses of water on the selected date."""
        water = self.ledger.set_water(self.state.selected_date, delta)
        self.save()
        return water

    # Estimation pass-through

    async def estimate_meal_from_image(
        self, image_bytes: bytes, mime_type: str | None = None
    ) -> MealEstimate:
        """Estimate a meal from a photo without logging it."""
        return await self.estimation_service.estimate_meal_from_image(
            self._require_api_key(), image_bytes, mime_type
        )

    async def estimate_meal_from_name(self, description: str) -> NutritionEstimate:
        """Estimate a food's macros by name without logging it."""
        return await self.estimation_service.estimate_meal_from_name(
            self._require_api_key(), description
        )

    # Read views

    def selected_record(self) -> DailyRecord:
        """Return the record for the selected date."""
        return self.ledger.get_or_create(self.state.selected_date)

    def daily_status(self) -> DailyStatus:
        """Return progress for the selected date against the targets."""
        return compute_daily_status(self.selected_record(), self.state.targets)

    def weight_trend(self) -> list[WeightEntry]:
        """Return logged weights ordered by date."""
        return sorted(self.state.weight_history, key=lambda entry: entry.date)

    def is_today_selected(self) -> bool:
        """Return True when the selected date is today."""
        return self.state.selected_date == self._today_str()

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-ready view of the selected day and its context."""
        state = self.state
        return {
            "profile": asdict(state.profile) if state.profile else None,
            "targets": asdict(state.targets),
            "selected_date": state.selected_date,
            "is_today": self.is_today_selected(),
            "record": asdict(self.selected_record()),
            "status": asdict(self.daily_status()),
            "ai_configured": state.settings.ai_api_key is not None,
        }

    # Helpers

    def _select(self, day: date) -> str:
        self.state.selected_date = day.isoformat()
        self.ledger.get_or_create(self.state.selected_date)
        self.save()
        return self.state.selected_date

    def _selected(self) -> date:
        return date.fromisoformat(self.state.selected_date)

    def _today_str(self) -> str:
        return self.today().isoformat()

    def _next_id(self) -> int:
        candidate = self.clock_ms()
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    def _require_profile(self) -> Profile:
        if self.state.profile is None:
            raise ProfileMissingError("Complete your profile first.")
        return self.state.profile

    def _require_api_key(self) -> str:
        api_key = self.state.settings.ai_api_key
        if not api_key:
            raise NotConfiguredError("Set your AI API key in settings first.")
        return api_key

    def _read_blob(self) -> object:
        raw = self.store.get(self.state_key)
        if raw is None:
            return None
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            _logger.warning("Stored state is malformed; starting from defaults")
            return None


def _upsert_weight(
    entries: list[WeightEntry], day: str, weight: float
) -> list[WeightEntry]:
    updated = [entry for entry in entries if entry.date != day]
    updated.append(WeightEntry(date=day, weight=weight))
    return updated


def _parse_name(value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Enter your name.")
    return value.strip()


def _parse_number(value: object, label: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {label}.")
    if isinstance(value, str):
        value = value.strip()
    elif not isinstance(value, int | float):
        raise ValidationError(f"Invalid {label}.")
    try:
        number = float(value)
    except (OverflowError, ValueError) as exc:
        raise ValidationError(f"Invalid {label}.") from exc
    if not math.isfinite(number):
        raise ValidationError(f"Invalid {label}.")
    return number


def _parse_positive_float(value: object, label: str) -> float:
    number = _parse_number(value, label)
    if number <= 0:
        raise ValidationError(f"{label.capitalize()} must be greater than zero.")
    return number


def _parse_positive_int(value: object, label: str) -> int:
    number = int(_parse_positive_float(value, label))
    if number <= 0:
        raise ValidationError(f"{label.capitalize()} must be greater than zero.")
    return number


def _parse_amount(value: object, label: str) -> int:
    if value is None or (isinstance(value, str) and not value.strip()):
        return 0
    number = _parse_number(value, label)
    if number < 0:
        raise ValidationError(f"{label.capitalize()} cannot be negative.")
    return int(number)


def _parse_choice(value: object, choices: set[str], label: str) -> str:
    cleaned = value.strip().lower() if isinstance(value, str) else ""
    if cleaned not in choices:
        raise ValidationError(f"Invalid {label}.")
    return cleaned
