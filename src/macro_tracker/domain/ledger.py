"""Domain models for the daily ledger."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MacroTotals:
    """Calories and macronutrients for a meal or a day."""

    calories: int = 0
    protein: int = 0
    carbs: int = 0
    fats: int = 0

    def plus(self, other: "MacroTotals") -> "MacroTotals":
        """Return the elementwise sum."""
        return MacroTotals(
            calories=self.calories + other.calories,
            protein=self.protein + other.protein,
            carbs=self.carbs + other.carbs,
            fats=self.fats + other.fats,
        )

    def minus_floored(self, other: "MacroTotals") -> "MacroTotals":
        """Return the elementwise difference with each field floored at 0."""
        return MacroTotals(
            calories=max(0, self.calories - other.calories),
            protein=max(0, self.protein - other.protein),
            carbs=max(0, self.carbs - other.carbs),
            fats=max(0, self.fats - other.fats),
        )


@dataclass(frozen=True)
class Meal:
    """A logged meal."""

    id: int
    name: str
    calories: int
    protein: int
    carbs: int
    fats: int

    @property
    def totals(self) -> MacroTotals:
        return MacroTotals(
            calories=self.calories,
            protein=self.protein,
            carbs=self.carbs,
            fats=self.fats,
        )


@dataclass(frozen=True)
class Exercise:
    """A logged exercise session with its estimated burn."""

    id: int
    name: str
    calories: int


@dataclass
class DailyRecord:
    """Everything logged for one calendar day."""

    consumed: MacroTotals = field(default_factory=MacroTotals)
    meals: list[Meal] = field(default_factory=list)
    water: int = 0
    burned_calories: float = 0
    exercises: list[Exercise] = field(default_factory=list)


@dataclass(frozen=True)
class DailyStatus:
    """Derived progress view of a day against the targets."""

    net_calories: float
    remaining: float
    progress_fraction: float
    protein_fraction: float
    carbs_fraction: float
    fats_fraction: float


@dataclass(frozen=True)
class WeightEntry:
    """Body weight logged on a date."""

    date: str
    weight: float
