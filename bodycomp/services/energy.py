"""
Energy & Macro Target Service
===============================
Derives daily calorie and macro targets from a measurement.

  1. Basal metabolic rate (Mifflin-St Jeor, 1990):
       BMR = 10 × weight_kg + 6.25 × height_cm - 5 × age + s
       s = +5 (male) / -161 (female)
  2. Maintenance = BMR × activity factor
  3. Target      = Maintenance × (1 + objective offset)
       loss: -20%   maintain: 0%   gain: +15%   (configurable)
  4. Macros from the target:
       protein_g = g/kg × lean mass
       fat_g     = target × fat fraction / 9
       carbs_g   = (target - protein_g × 4 - fat_g × 9) / 4

Example:
  78.4 kg, 178 cm, 25 y, male -> BMR = 784 + 1112.5 - 125 + 5 = 1776.5 kcal
"""

from dataclasses import dataclass

from bodycomp.core.config import Settings
from bodycomp.schemas import ActivityLevel, Objective, Sex
from bodycomp.services.coefficients import (
    ACTIVITY_FACTORS,
    KCAL_PER_G_CARBS,
    KCAL_PER_G_FAT,
    KCAL_PER_G_PROTEIN,
    MIFFLIN_SEX_CONSTANT,
)


@dataclass(frozen=True)
class MacroTargets:
    protein_g: float | None
    carbs_g: float | None
    fat_g: float | None
    carbs_clamped: bool = False


def calculate_bmr_mifflin(
    weight_kg: float | None,
    height_cm: float | None,
    age_years: int,
    sex: Sex,
) -> float | None:
    if weight_kg is None or height_cm is None:
        return None
    return 10.0 * weight_kg + 6.25 * height_cm - 5.0 * age_years + MIFFLIN_SEX_CONSTANT[sex]


def calculate_maintenance_calories(
    bmr_kcal: float | None,
    activity_level: ActivityLevel,
) -> float | None:
    if bmr_kcal is None:
        return None
    return bmr_kcal * ACTIVITY_FACTORS[activity_level]


def objective_offset(objective: Objective | None, settings: Settings) -> float:
    """Fractional change applied to maintenance calories. No objective means maintain."""
    if objective == Objective.LOSS:
        return settings.LOSS_CALORIE_OFFSET
    if objective == Objective.GAIN:
        return settings.GAIN_CALORIE_OFFSET
    return 0.0


def calculate_target_calories(
    maintenance_kcal: float | None,
    objective: Objective | None,
    settings: Settings,
) -> float | None:
    if maintenance_kcal is None:
        return None
    offset = objective_offset(objective, settings)
    if offset == 0.0:
        return maintenance_kcal
    return maintenance_kcal * (1.0 + offset)


def calculate_macros(
    target_kcal: float | None,
    lean_mass_kg: float | None,
    settings: Settings,
) -> MacroTargets:
    """
    Split target calories into grams of protein, fat and carbs.

    Fat only needs the calorie target. Protein is anchored to lean mass, and
    carbs fill what is left, so both are None without a lean mass estimate.
    If protein and fat already exceed the target, carbs are floored at zero
    and `carbs_clamped` is set.
    """
    if target_kcal is None:
        return MacroTargets(protein_g=None, carbs_g=None, fat_g=None)

    fat_g = target_kcal * settings.FAT_CALORIE_FRACTION / KCAL_PER_G_FAT
    if lean_mass_kg is None:
        return MacroTargets(protein_g=None, carbs_g=None, fat_g=fat_g)

    protein_g = settings.PROTEIN_G_PER_KG_LEAN * lean_mass_kg
    remaining_kcal = target_kcal - protein_g * KCAL_PER_G_PROTEIN - fat_g * KCAL_PER_G_FAT
    carbs_g = remaining_kcal / KCAL_PER_G_CARBS

    clamped = carbs_g < 0
    if clamped:
        carbs_g = 0.0

    return MacroTargets(protein_g=protein_g, carbs_g=carbs_g, fat_g=fat_g, carbs_clamped=clamped)
