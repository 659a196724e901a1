"""
Body-Composition Calculator
=============================
Single entry point that turns one measurement into a CalculationResult.

Stages, applied in order:
  1. Skinfold sums (3, 4 and 6 sites)
  2. Body density (Durnin & Womersley)
  3. Body fat % (Siri), clamped to a plausible range
  4. Fat / lean mass split
  5. Five-component fractionation (Kerr 1988)
  6. Somatotype (Heath-Carter)
  7. Energy and macro targets (Mifflin-St Jeor)
  8. General indices (BMI, waist-hip ratio, Z-scores)

ERROR POLICY:
  - Missing input       -> the affected fields are None, no exception.
  - Out-of-domain input -> best-effort value plus a warning on the result.
  - Malformed input     -> InvalidMeasurementError before anything is computed.

The function is pure: no I/O, no shared state. Calling it twice with the same
arguments returns equal results.
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ValidationError

from bodycomp.core.config import Settings, settings as default_settings
from bodycomp.schemas import (
    CalculationResult,
    CalculationWarning,
    MeasurementInput,
    Objective,
    Subject,
    WarningCode,
)
from bodycomp.services.body_fat import (
    body_density_to_fat_percent,
    calculate_body_density_durnin_womersley,
    clamp_body_fat_percent,
    split_fat_and_lean_mass,
    sum_3_skinfolds,
    sum_4_skinfolds,
    sum_6_skinfolds,
)
from bodycomp.services.energy import (
    calculate_bmr_mifflin,
    calculate_macros,
    calculate_maintenance_calories,
    calculate_target_calories,
)
from bodycomp.services.fractionation import fractionate
from bodycomp.services.indices import (
    calculate_bmi,
    calculate_waist_hip_ratio,
    calculate_z_scores,
    classify_bmi,
)
from bodycomp.services.somatotype import calculate_somatotype

logger = logging.getLogger(__name__)

SKINFOLD_FIELDS = (
    "triceps_mm", "biceps_mm", "subscapular_mm", "suprailiac_mm",
    "supraspinal_mm", "abdominal_mm", "thigh_mm", "calf_mm",
)


class InvalidMeasurementError(ValueError):
    """Raised when the input cannot be computed at all (wrong types, negative sizes...)."""

    def __init__(self, message: str, errors: list[dict] | None = None):
        super().__init__(message)
        self.errors = errors or []


def _validate(model: type[BaseModel], data: Any, label: str) -> Any:
    """Parse `data` into `model`, re-checking instances that may have skipped validation."""
    if isinstance(data, BaseModel):
        data = data.model_dump()
    elif not isinstance(data, Mapping):
        raise InvalidMeasurementError(f"{label} must be a mapping, got {type(data).__name__}")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidMeasurementError(
            f"Invalid {label}: {e.error_count()} error(s)",
            errors=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


def _coerce_objective(objective: Objective | str | None) -> Objective | None:
    if objective is None or isinstance(objective, Objective):
        return objective
    if isinstance(objective, str):
        try:
            return Objective(objective)
        except ValueError:
            return Objective.parse(objective)
    raise InvalidMeasurementError(f"objective must be a string, got {type(objective).__name__}")


def _round(value: float | None, digits: int) -> float | None:
    return None if value is None else round(value, digits)


class _Warnings:
    """Collects warnings for one computation and logs each as it is added."""

    def __init__(self):
        self.items: list[CalculationWarning] = []

    def add(self, code: WarningCode, message: str, field: str | None = None) -> None:
        logger.warning(f"{code.value}: {message}")
        self.items.append(CalculationWarning(code=code, field=field, message=message))


def compute(
    measurement: MeasurementInput | Mapping[str, Any],
    subject: Subject | Mapping[str, Any],
    objective: Objective | str | None = None,
    settings: Settings | None = None,
) -> CalculationResult:
    """
    Compute every derivable body-composition value for one measurement.

    Args:
        measurement: A MeasurementInput or a mapping with the same fields
        subject: Sex, age and activity level of the patient
        objective: loss / maintain / gain (free-text labels are normalized);
            None is treated as maintain
        settings: Thresholds to apply; defaults to the application settings

    Returns:
        CalculationResult with None for anything whose inputs were missing.

    Raises:
        InvalidMeasurementError: If the input is structurally invalid.
    """
    cfg = settings or default_settings
    m = _validate(MeasurementInput, measurement, "measurement")
    subj = _validate(Subject, subject, "subject")
    goal = _coerce_objective(objective)
    warnings = _Warnings()

    for name in SKINFOLD_FIELDS:
        value = getattr(m, name)
        if value is not None and value > cfg.SKINFOLD_SUSPICIOUS_MM:
            warnings.add(
                WarningCode.SKINFOLD_SUSPICIOUS,
                f"{name}={value} exceeds {cfg.SKINFOLD_SUSPICIOUS_MM}mm",
                field=name,
            )

    # 1. Skinfold sums
    sum3 = sum_3_skinfolds(m)
    sum4 = sum_4_skinfolds(m)
    sum6 = sum_6_skinfolds(m)

    # 2. Body density
    density_age = subj.age_years
    if sum4 is not None and not cfg.DW_MIN_AGE <= density_age <= cfg.DW_MAX_AGE:
        density_age = max(cfg.DW_MIN_AGE, min(density_age, cfg.DW_MAX_AGE))
        warnings.add(
            WarningCode.AGE_OUT_OF_RANGE,
            f"age {subj.age_years} outside {cfg.DW_MIN_AGE}-{cfg.DW_MAX_AGE}; "
            f"density uses age {density_age}",
            field="body_density",
        )
    body_density = calculate_body_density_durnin_womersley(sum4, subj.sex, density_age)

    # 3. Body fat %
    body_fat = body_density_to_fat_percent(body_density)
    if body_fat is not None:
        body_fat, clamped = clamp_body_fat_percent(
            body_fat, cfg.BODY_FAT_MIN_PERCENT, cfg.BODY_FAT_MAX_PERCENT,
        )
        if clamped:
            warnings.add(
                WarningCode.BODYFAT_OUT_OF_RANGE,
                f"Siri body fat outside {cfg.BODY_FAT_MIN_PERCENT}-{cfg.BODY_FAT_MAX_PERCENT}%; "
                f"clamped to {body_fat}%",
                field="body_fat_percent",
            )

    # 4. Fat / lean split
    fat_mass, lean_mass = split_fat_and_lean_mass(m.weight_kg, body_fat)

    # 5. Fractionation
    fractions = fractionate(m, subj.sex)
    deviation = fractions.weight_difference_percent
    if deviation is not None and abs(deviation) > cfg.COMPONENT_SUM_TOLERANCE_PERCENT:
        warnings.add(
            WarningCode.COMPONENT_SUM_MISMATCH,
            f"five components sum to {fractions.structured_weight:.3f}kg, "
            f"{deviation:+.2f}% from body weight {m.weight_kg}kg",
            field="structured_weight_kg",
        )

    # 6. Somatotype
    endomorphy, mesomorphy, ectomorphy = calculate_somatotype(m)

    # 7. Energy
    bmr = calculate_bmr_mifflin(m.weight_kg, m.height_cm, subj.age_years, subj.sex)
    maintenance = calculate_maintenance_calories(bmr, subj.activity_level)
    target = calculate_target_calories(maintenance, goal, cfg)
    macros = calculate_macros(target, lean_mass, cfg)
    if macros.carbs_clamped:
        warnings.add(
            WarningCode.CARBS_BELOW_ZERO,
            "protein and fat exceed the calorie target; carbs set to 0",
            field="carbs_g",
        )

    # 8. Indices
    bmi = calculate_bmi(m.weight_kg, m.height_cm)

    values = {
        "sum_3_skinfolds_mm": _round(sum3, 2),
        "sum_4_skinfolds_mm": _round(sum4, 2),
        "sum_6_skinfolds_mm": _round(sum6, 2),
        "body_density": _round(body_density, 6),
        "body_fat_percent": _round(body_fat, 2),
        "fat_mass_kg": _round(fat_mass, 3),
        "lean_mass_kg": _round(lean_mass, 3),
        "skin_mass_kg": _round(fractions.skin, 3),
        "adipose_mass_kg": _round(fractions.adipose, 3),
        "muscle_mass_kg": _round(fractions.muscle, 3),
        "bone_mass_kg": _round(fractions.bone, 3),
        "residual_mass_kg": _round(fractions.residual, 3),
        "skin_mass_percent": _round(fractions.percent_of_weight(fractions.skin), 2),
        "adipose_mass_percent": _round(fractions.percent_of_weight(fractions.adipose), 2),
        "muscle_mass_percent": _round(fractions.percent_of_weight(fractions.muscle), 2),
        "bone_mass_percent": _round(fractions.percent_of_weight(fractions.bone), 2),
        "residual_mass_percent": _round(fractions.percent_of_weight(fractions.residual), 2),
        "structured_weight_kg": _round(fractions.structured_weight, 3),
        "weight_difference_percent": _round(deviation, 2),
        "muscle_to_bone_ratio": _round(fractions.muscle_to_bone_ratio, 2),
        "adipose_to_muscle_ratio": _round(fractions.adipose_to_muscle_ratio, 2),
        "endomorphy": _round(endomorphy, 2),
        "mesomorphy": _round(mesomorphy, 2),
        "ectomorphy": _round(ectomorphy, 2),
        "bmr_kcal": _round(bmr, 1),
        "maintenance_kcal": _round(maintenance, 1),
        "target_kcal": _round(target, 1),
        "protein_g": _round(macros.protein_g, 1),
        "carbs_g": _round(macros.carbs_g, 1),
        "fat_g": _round(macros.fat_g, 1),
        "bmi": _round(bmi, 2),
        "waist_hip_ratio": _round(calculate_waist_hip_ratio(m.waist_cm, m.hip_cm), 3),
    }
    not_computable = [name for name, value in values.items() if value is None]

    if len(not_computable) == len(values):
        warnings.add(
            WarningCode.NOTHING_COMPUTABLE,
            "no result field could be computed from the supplied measurement",
        )

    logger.info(
        f"Computed body composition for patient {m.patient_id}: "
        f"body_fat={values['body_fat_percent']}%, "
        f"structured_weight={values['structured_weight_kg']}kg, "
        f"{len(not_computable)} field(s) not computable, "
        f"{len(warnings.items)} warning(s)"
    )

    return CalculationResult(
        **values,
        bmi_classification=classify_bmi(bmi),
        z_scores={k: round(v, 2) for k, v in calculate_z_scores(m).items()},
        warnings=warnings.items,
        not_computable=not_computable,
    )
