"""Domain models for the user profile and derived targets."""

from dataclasses import dataclass

GENDERS = {"male", "female", "other"}
GOALS = {"lose", "maintain", "gain"}
DEFAULT_WATER_GOAL = 8


@dataclass(frozen=True)
class Profile:
    """Body metrics and goal collected during onboarding."""

    name: str
    age: int
    weight: float
    height: int
    gender: str
    activity: float
    goal: str


@dataclass(frozen=True)
class MacroTargets:
    """Daily macronutrient targets in grams."""

    protein: int
    carbs: int
    fats: int


@dataclass(frozen=True)
class Targets:
    """Daily targets derived from a profile."""

    daily_calorie_goal: int
    daily_water_goal: int
    macros: MacroTargets


EMPTY_TARGETS = Targets(
    daily_calorie_goal=0,
    daily_water_goal=DEFAULT_WATER_GOAL,
    macros=MacroTargets(protein=0, carbs=0, fats=0),
)
