"""Upgrade persisted state blobs to the current ledger shape."""

import copy

from macro_tracker.domain.profile import DEFAULT_WATER_GOAL

_MACRO_KEYS = ("calories", "protein", "carbs", "fats")


def empty_record_payload() -> dict[str, object]:
    """Return the serialized form of an empty daily record."""
    return {
        "consumed": dict.fromkeys(_MACRO_KEYS, 0),
        "meals": [],
        "water": 0,
        "burnedCalories": 0,
        "exercises": [],
    }


def migrate_state(raw: object, today: str) -> dict[str, object]:
    """Return a copy of a persisted blob upgraded to the current schema.

    Running the migration on its own output returns an equal payload. The
    input is never mutated. Anything that is not a JSON object is treated as
    absent state.
    """
    data: dict[str, object] = copy.deepcopy(raw) if isinstance(raw, dict) else {}

    history = data.get("history")
    if not isinstance(history, dict):
        history = {}
    data["history"] = history

    legacy_consumed = data.pop("consumed", None)
    legacy_meals = data.pop("meals", None)
    if (legacy_consumed is not None or legacy_meals is not None) and (
        today not in history
    ):
        record = empty_record_payload()
        if isinstance(legacy_consumed, dict):
            record["consumed"] = legacy_consumed
        if isinstance(legacy_meals, list):
            record["meals"] = legacy_meals
        history[today] = record

    for day, record in list(history.items()):
        if not isinstance(record, dict):
            history[day] = empty_record_payload()
            continue
        _backfill_record(record)

    if data.get("dailyWaterGoal") is None:
        data["dailyWaterGoal"] = DEFAULT_WATER_GOAL
    if data.get("dailyGoal") is None:
        data["dailyGoal"] = 0
    if not isinstance(data.get("macros"), dict):
        data["macros"] = {"protein": 0, "carbs": 0, "fats": 0}
    if not isinstance(data.get("weightHistory"), list):
        data["weightHistory"] = []
    data.setdefault("profile", None)
    data["settings"] = _migrate_settings(data.get("settings"))
    return data


def _backfill_record(record: dict[str, object]) -> None:
    consumed = record.get("consumed")
    if not isinstance(consumed, dict):
        consumed = {}
        record["consumed"] = consumed
    for key in _MACRO_KEYS:
        if consumed.get(key) is None:
            consumed[key] = 0
    if not isinstance(record.get("meals"), list):
        record["meals"] = []
    if record.get("water") is None:
        record["water"] = 0
    if record.get("burnedCalories") is None:
        record["burnedCalories"] = 0
    if not isinstance(record.get("exercises"), list):
        record["exercises"] = []


def _migrate_settings(raw: object) -> dict[str, object]:
    settings = dict(raw) if isinstance(raw, dict) else {}
    legacy_key = settings.pop("geminiApiKey", None)
    if settings.get("aiApiKey") is None:
        settings["aiApiKey"] = legacy_key or ""
    return settings
