"""Conversion between AppState and its persisted JSON form."""

import logging
import math

from macro_tracker.domain.ledger import (
    DailyRecord,
    Exercise,
    MacroTotals,
    Meal,
    WeightEntry,
)
from macro_tracker.domain.profile import (
    DEFAULT_WATER_GOAL,
    MacroTargets,
    Profile,
    Targets,
)
from macro_tracker.domain.state import AppSettings, AppState

_logger = logging.getLogger(__name__)


def state_to_dict(state: AppState) -> dict[str, object]:
    """Serialize application state using the persisted field names."""
    return {
        "profile": _profile_to_dict(state.profile) if state.profile else None,
        "dailyGoal": state.targets.daily_calorie_goal,
        "dailyWaterGoal": state.targets.daily_water_goal,
        "macros": {
            "protein": state.targets.macros.protein,
            "carbs": state.targets.macros.carbs,
            "fats": state.targets.macros.fats,
        },
        "currentDate": state.selected_date,
        "history": {
            day: record_to_dict(record) for day, record in state.ledger.items()
        },
        "weightHistory": [
            {"date": entry.date, "weight": entry.weight}
            for entry in state.weight_history
        ],
        "settings": {"aiApiKey": state.settings.ai_api_key or ""},
    }


def state_from_dict(data: dict[str, object], selected_date: str) -> AppState:
    """Build application state from a migrated payload."""
    history = data.get("history")
    ledger = {
        str(day): record_from_dict(record)
        for day, record in (history.items() if isinstance(history, dict) else [])
        if isinstance(record, dict)
    }
    settings = data.get("settings")
    api_key = settings.get("aiApiKey") if isinstance(settings, dict) else None
    return AppState(
        selected_date=selected_date,
        profile=profile_from_dict(data.get("profile")),
        targets=_targets_from_dict(data),
        ledger=ledger,
        weight_history=_weight_history_from_list(data.get("weightHistory")),
        settings=AppSettings(
            ai_api_key=api_key if isinstance(api_key, str) and api_key else None
        ),
    )


def record_to_dict(record: DailyRecord) -> dict[str, object]:
    """Serialize a daily record."""
    return {
        "consumed": {
            "calories": record.consumed.calories,
            "protein": record.consumed.protein,
            "carbs": record.consumed.carbs,
            "fats": record.consumed.fats,
        },
        "meals": [
            {
                "id": meal.id,
                "name": meal.name,
                "calories": meal.calories,
                "protein": meal.protein,
                "carbs": meal.carbs,
                "fats": meal.fats,
            }
            for meal in record.meals
        ],
        "water": record.water,
        "burnedCalories": record.burned_calories,
        "exercises": [
            {"id": exercise.id, "name": exercise.name, "calories": exercise.calories}
            for exercise in record.exercises
        ],
    }


def record_from_dict(payload: dict[str, object]) -> DailyRecord:
    """Parse a serialized daily record, tolerating missing fields."""
    consumed = payload.get("consumed")
    consumed = consumed if isinstance(consumed, dict) else {}
    meals = payload.get("meals")
    exercises = payload.get("exercises")
    return DailyRecord(
        consumed=MacroTotals(
            calories=_to_int(consumed.get("calories")),
            protein=_to_int(consumed.get("protein")),
            carbs=_to_int(consumed.get("carbs")),
            fats=_to_int(consumed.get("fats")),
        ),
        meals=[
            Meal(
                id=_to_int(item.get("id")),
                name=str(item.get("name") or ""),
                calories=_to_int(item.get("calories")),
                protein=_to_int(item.get("protein")),
                carbs=_to_int(item.get("carbs")),
                fats=_to_int(item.get("fats")),
            )
            for item in (meals if isinstance(meals, list) else [])
            if isinstance(item, dict)
        ],
        water=_to_int(payload.get("water")),
        burned_calories=_to_number(payload.get("burnedCalories")),
        exercises=[
            Exercise(
                id=_to_int(item.get("id")),
                name=str(item.get("name") or ""),
                calories=_to_int(item.get("calories")),
            )
            for item in (exercises if isinstance(exercises, list) else [])
            if isinstance(item, dict)
        ],
    )


def profile_from_dict(payload: object) -> Profile | None:
    """Parse a stored profile; malformed profiles are dropped."""
    if not isinstance(payload, dict):
        return None
    try:
        return Profile(
            name=str(payload.get("name") or ""),
            age=int(payload["age"]),
            weight=float(payload["weight"]),
            height=int(payload["height"]),
            gender=str(payload.get("gender") or "other"),
            activity=float(payload["activity"]),
            goal=str(payload.get("goal") or "maintain"),
        )
    except (KeyError, TypeError, ValueError):
        _logger.warning("Ignoring malformed stored profile")
        return None


def _profile_to_dict(profile: Profile) -> dict[str, object]:
    return {
        "name": profile.name,
        "age": profile.age,
        "weight": profile.weight,
        "height": profile.height,
        "gender": profile.gender,
        "activity": profile.activity,
        "goal": profile.goal,
    }


def _targets_from_dict(data: dict[str, object]) -> Targets:
    macros = data.get("macros")
    macros = macros if isinstance(macros, dict) else {}
    water_goal = _to_int(data.get("dailyWaterGoal")) or DEFAULT_WATER_GOAL
    return Targets(
        daily_calorie_goal=_to_int(data.get("dailyGoal")),
        daily_water_goal=water_goal,
        macros=MacroTargets(
            protein=_to_int(macros.get("protein")),
            carbs=_to_int(macros.get("carbs")),
            fats=_to_int(macros.get("fats")),
        ),
    )


def _weight_history_from_list(raw: object) -> list[WeightEntry]:
    entries: list[WeightEntry] = []
    for item in raw if isinstance(raw, list) else []:
        if not isinstance(item, dict) or not isinstance(item.get("date"), str):
            continue
        weight = _to_number(item.get("weight"))
        if weight > 0:
            entries.append(WeightEntry(date=item["date"], weight=weight))
    return entries


def _to_number(value: object) -> float:
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return 0
    if isinstance(value, int | float) and math.isfinite(value):
        return max(0, value)
    return 0


def _to_int(value: object) -> int:
    return int(_to_number(value))
