"""Daily target calculation (Mifflin-St Jeor)."""

import math

from macro_tracker.domain.profile import MacroTargets, Profile, Targets

MIN_DAILY_CALORIES = 1200
LOSE_ADJUSTMENT = -500
GAIN_ADJUSTMENT = 300
PROTEIN_G_PER_KG = 2
FAT_SHARE = 0.25
KCAL_PER_G_FAT = 9
KCAL_PER_G_PROTEIN = 4
KCAL_PER_G_CARBS = 4
WATER_ML_PER_KG = 35
ML_PER_GLASS = 250


def compute_targets(profile: Profile) -> Targets:
    """Derive daily calorie, macro and water targets from a profile."""
    bmr = 10 * profile.weight + 6.25 * profile.height - 5 * profile.age
    bmr += 5 if profile.gender == "male" else -161
    goal_calories = bmr * profile.activity
    if profile.goal == "lose":
        goal_calories += LOSE_ADJUSTMENT
    elif profile.goal == "gain":
        goal_calories += GAIN_ADJUSTMENT
    daily_calorie_goal = max(round_half_up(goal_calories), MIN_DAILY_CALORIES)

    protein = round_half_up(profile.weight * PROTEIN_G_PER_KG)
    fats = round_half_up(daily_calorie_goal * FAT_SHARE / KCAL_PER_G_FAT)
    carbs = max(
        round_half_up(
            (
                daily_calorie_goal
                - protein * KCAL_PER_G_PROTEIN
                - fats * KCAL_PER_G_FAT
            )
            / KCAL_PER_G_CARBS
        ),
        0,
    )
    water_glasses = math.ceil(profile.weight * WATER_ML_PER_KG / ML_PER_GLASS)

    return Targets(
        daily_calorie_goal=daily_calorie_goal,
        daily_water_goal=water_glasses,
        macros=MacroTargets(protein=protein, carbs=carbs, fats=fats),
    )


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)
