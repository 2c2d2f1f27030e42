"""Date-keyed ledger of meals, exercise and water."""

from dataclasses import dataclass, field

from macro_tracker.domain.ledger import DailyRecord, DailyStatus, Exercise, Meal
from macro_tracker.domain.profile import Targets


@dataclass
class LedgerStore:
    """Mutation primitives over the date -> DailyRecord map.

    Every mutation keeps ``consumed`` equal to the sum of ``meals`` and
    ``burned_calories`` equal to the sum of ``exercises``, updating the totals
    incrementally.
    """

    records: dict[str, DailyRecord] = field(default_factory=dict)

    def get_or_create(self, day: str) -> DailyRecord:
        """Return the record for a day, creating an empty one on first access."""
        record = self.records.get(day)
        if record is None:
            record = DailyRecord()
            self.records[day] = record
        return record

    def add_meal(self, day: str, meal: Meal) -> DailyRecord:
        """Append a meal and add its macros to the day's totals."""
        record = self.get_or_create(day)
        record.meals.append(meal)
        record.consumed = record.consumed.plus(meal.totals)
        return record

    def remove_meal(self, day: str, meal_id: int) -> bool:
        """Remove a meal by id. Returns False when the id is unknown."""
        record = self.get_or_create(day)
        index = _find_index(record.meals, meal_id)
        if index is None:
            return False
        meal = record.meals.pop(index)
        record.consumed = record.consumed.minus_floored(meal.totals)
        return True

    def add_exercise(self, day: str, exercise: Exercise) -> DailyRecord:
        """Append an exercise and add its burn to the day's total."""
        record = self.get_or_create(day)
        record.exercises.append(exercise)
        record.burned_calories += exercise.calories
        return record

    def remove_exercise(self, day: str, exercise_id: int) -> bool:
        """Remove an exercise by id. Returns False when the id is unknown."""
        record = self.get_or_create(day)
        index = _find_index(record.exercises, exercise_id)
        if index is None:
            return False
        exercise = record.exercises.pop(index)
        record.burned_calories = max(0, record.burned_calories - exercise.calories)
        return True

    def set_water(self, day: str, delta: int) -> int:
        """Adjust the water count by delta, never going below zero."""
        record = self.get_or_create(day)
        record.water = max(0, record.water + delta)
        return record.water

    def max_entry_id(self) -> int:
        """Return the largest meal or exercise id in the ledger, or 0."""
        ids = [
            entry.id
            for record in self.records.values()
            for entry in (*record.meals, *record.exercises)
        ]
        return max(ids, default=0)


def compute_daily_status(record: DailyRecord, targets: Targets) -> DailyStatus:
    """Compute net calories and progress fractions for a day."""
    consumed = record.consumed
    net_calories = max(0, consumed.calories - record.burned_calories)
    remaining = targets.daily_calorie_goal - consumed.calories + record.burned_calories
    return DailyStatus(
        net_calories=net_calories,
        remaining=remaining,
        progress_fraction=_fraction(net_calories, targets.daily_calorie_goal),
        protein_fraction=_fraction(consumed.protein, targets.macros.protein),
        carbs_fraction=_fraction(consumed.carbs, targets.macros.carbs),
        fats_fraction=_fraction(consumed.fats, targets.macros.fats),
    )


def _fraction(value: float, target: float) -> float:
    if target <= 0:
        return 0.0
    return min(value / target, 1.0)


def _find_index(entries: list[Meal] | list[Exercise], entry_id: int) -> int | None:
    for index, entry in enumerate(entries):
        if entry.id == entry_id:
            return index
    return None
