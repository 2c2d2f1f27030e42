"""Models for estimates returned by the AI gateway.

The estimator is untrusted: any numeric field may be missing, non-numeric or
out of range. Every field is coalesced to a non-negative integer, with 0 as the
fallback, before it reaches the ledger.
"""

import math
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_MEAL_NAME = "Detected meal"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def coerce_amount(value: object) -> int:
    """Coerce an untrusted numeric value to a non-negative integer."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, str):
        # "350 kcal" and "12.5" keep their leading integer
        match = _LEADING_INT.match(value)
        return max(0, int(match.group(1))) if match else 0
    if isinstance(value, float) and not math.isfinite(value):
        return 0
    if isinstance(value, int | float):
        return max(0, int(value))
    return 0


class NutritionEstimate(BaseModel):
    """Calories and macros for a described food."""

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0

    @field_validator("calories", "protein", "carbs", "fats", mode="before")
    @classmethod
    def coerce_amount_field(cls, value: object) -> int:
        return coerce_amount(value)


class MealEstimate(NutritionEstimate):
    """Nutrition estimate for a photographed meal, with a dish name."""

    name: str = DEFAULT_MEAL_NAME

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, value: object) -> str:
        if isinstance(value, str) and value.strip():
            return value.strip()
        return DEFAULT_MEAL_NAME


class ExerciseEstimate(BaseModel):
    """Estimated calories burned by an activity."""

    model_config = ConfigDict(populate_by_name=True)

    burned_calories: int = Field(default=0, alias="burnedCalories")

    @field_validator("burned_calories", mode="before")
    @classmethod
    def coerce_amount_field(cls, value: object) -> int:
        return coerce_amount(value)
