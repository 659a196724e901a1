"""
Tests for the Body-Composition Calculator (compute)
=====================================================
Test matrix:
  1. Reference case:       full measurement, every field computed, no warnings
  2. Null propagation:     each required input removed in turn -> field is None
  3. Idempotence:          same input twice -> equal results
  4. Warnings:             age out of range, body fat clamp, component mismatch,
                           suspicious skinfold, nothing computable
  5. Malformed input:      InvalidMeasurementError, no partial result
  6. Objective handling:   loss < maintain < gain, free-text labels
  7. Public signature:     optional arguments annotated as X | None
"""

import inspect
import logging
import math
import types

import pytest
from pydantic import ValidationError

from bodycomp.core.config import Settings
from bodycomp.schemas import (
    CalculationResult,
    MeasurementInput,
    Objective,
    Sex,
    Subject,
    WarningCode,
)
from bodycomp.services.calculator import InvalidMeasurementError, compute


SUM4 = ["triceps_mm", "biceps_mm", "subscapular_mm", "suprailiac_mm"]
SUM6 = ["triceps_mm", "subscapular_mm", "supraspinal_mm", "abdominal_mm", "thigh_mm", "calf_mm"]

# result field -> measurement fields it cannot do without
REQUIRED_INPUTS = {
    "sum_4_skinfolds_mm": SUM4,
    "sum_6_skinfolds_mm": SUM6,
    "body_density": SUM4,
    "body_fat_percent": SUM4,
    "fat_mass_kg": SUM4 + ["weight_kg"],
    "lean_mass_kg": SUM4 + ["weight_kg"],
    "skin_mass_kg": ["weight_kg", "height_cm"],
    "adipose_mass_kg": SUM6 + ["height_cm"],
    "muscle_mass_kg": [
        "height_cm", "arm_relaxed_cm", "triceps_mm", "forearm_cm", "thigh_medial_cm",
        "thigh_mm", "calf_girth_cm", "calf_mm", "thorax_cm", "subscapular_mm",
    ],
    "bone_mass_kg": ["height_cm", "head_cm", "biacromial_cm", "biiliac_cm", "humeral_cm", "femoral_cm"],
    "residual_mass_kg": ["seated_height_cm", "thorax_transverse_cm", "thorax_ap_cm", "waist_cm", "abdominal_mm"],
    "endomorphy": ["triceps_mm", "subscapular_mm", "supraspinal_mm", "height_cm"],
    "mesomorphy": [
        "height_cm", "humeral_cm", "femoral_cm", "arm_flexed_cm",
        "triceps_mm", "calf_girth_cm", "calf_mm",
    ],
    "ectomorphy": ["height_cm", "weight_kg"],
    "bmr_kcal": ["weight_kg", "height_cm"],
    "target_kcal": ["weight_kg", "height_cm"],
    "fat_g": ["weight_kg", "height_cm"],
    "protein_g": SUM4 + ["weight_kg", "height_cm"],
    "carbs_g": SUM4 + ["weight_kg", "height_cm"],
    "bmi": ["weight_kg", "height_cm"],
    "waist_hip_ratio": ["waist_cm", "hip_cm"],
}

NULL_CASES = [
    (result_field, input_field)
    for result_field, inputs in REQUIRED_INPUTS.items()
    for input_field in inputs
]


def _codes(result: CalculationResult) -> list[WarningCode]:
    return [w.code for w in result.warnings]


# ── Reference case ──────────────────────────────────────────────

class TestReferenceCase:

    def test_everything_computed(self, reference_measurement, male_25):
        result = compute(reference_measurement, male_25)
        assert result.not_computable == []
        assert result.warnings == []

    def test_values(self, reference_measurement, male_25):
        result = compute(reference_measurement, male_25)
        assert result.sum_4_skinfolds_mm == 20.0
        assert result.sum_6_skinfolds_mm == 35.0
        assert result.body_density == pytest.approx(1.080875, abs=1e-6)
        assert result.body_fat_percent == pytest.approx(7.96, abs=0.01)
        assert result.fat_mass_kg + result.lean_mass_kg == pytest.approx(78.4, abs=0.002)
        assert result.endomorphy == 1.35
        assert result.mesomorphy == 5.43
        assert result.ectomorphy == 1.86
        assert result.bmr_kcal == 1776.5
        assert result.maintenance_kcal == pytest.approx(1776.5 * 1.2, abs=0.1)
        assert result.target_kcal == result.maintenance_kcal
        assert result.bmi == pytest.approx(24.74, abs=0.01)
        assert result.bmi_classification == "Normal weight"
        assert result.waist_hip_ratio == pytest.approx(0.833, abs=0.001)
        assert result.z_scores["weight_kg"] == pytest.approx(0.39, abs=0.01)

    def test_component_sum_within_tolerance(self, reference_measurement, male_25):
        result = compute(reference_measurement, male_25)
        total = (
            result.muscle_mass_kg + result.adipose_mass_kg + result.bone_mass_kg
            + result.residual_mass_kg + result.skin_mass_kg
        )
        assert total == pytest.approx(78.4, rel=0.02)
        assert abs(result.weight_difference_percent) <= 2.0
        assert not result.has_warning(WarningCode.COMPONENT_SUM_MISMATCH)

    def test_accepts_plain_mappings(self, reference_data):
        result = compute(reference_data, {"sex": "male", "age_years": 25})
        assert result.body_fat_percent == pytest.approx(7.96, abs=0.01)

    def test_result_is_immutable(self, reference_measurement, male_25):
        result = compute(reference_measurement, male_25)
        with pytest.raises(ValidationError):
            result.body_fat_percent = 50.0


# ── Null propagation ────────────────────────────────────────────

class TestNullPropagation:

    @pytest.mark.parametrize("result_field, input_field", NULL_CASES)
    def test_missing_input_gives_none(self, reference_data, male_25, result_field, input_field):
        reference_data[input_field] = None
        result = compute(reference_data, male_25)
        assert getattr(result, result_field) is None
        assert result_field in result.not_computable

    def test_weight_and_height_only(self, male_25):
        result = compute({"weight_kg": 70.0, "height_cm": 175.0}, male_25)
        assert result.body_density is None
        assert result.adipose_mass_kg is None
        assert result.skin_mass_kg is not None
        assert result.bmr_kcal is not None
        assert result.ectomorphy is not None
        assert set(result.z_scores) == {"weight_kg", "height_cm"}
        assert not result.has_warning(WarningCode.NOTHING_COMPUTABLE)

    def test_weight_alone_computes_nothing(self, male_25):
        result = compute({"weight_kg": 70.0}, male_25)
        assert result.has_warning(WarningCode.NOTHING_COMPUTABLE)
        assert result.z_scores == {"weight_kg": pytest.approx((70.0 - 74.6) / 9.8, abs=0.01)}

    def test_empty_measurement_gets_single_summary_warning(self, male_25):
        result = compute({}, male_25)
        assert _codes(result) == [WarningCode.NOTHING_COMPUTABLE]
        assert "body_fat_percent" in result.not_computable


# ── Idempotence ─────────────────────────────────────────────────

class TestIdempotence:

    def test_same_input_same_result(self, reference_measurement, male_25):
        first = compute(reference_measurement, male_25, Objective.GAIN)
        second = compute(reference_measurement, male_25, Objective.GAIN)
        assert first == second
        assert first.model_dump() == second.model_dump()

    def test_input_is_not_mutated(self, reference_data, male_25):
        before = dict(reference_data)
        compute(reference_data, male_25)
        assert reference_data == before


# ── Warnings ────────────────────────────────────────────────────

class TestWarnings:

    @pytest.mark.parametrize("age", [12, 80])
    def test_age_outside_table(self, reference_measurement, age):
        result = compute(reference_measurement, Subject(sex=Sex.MALE, age_years=age))
        assert WarningCode.AGE_OUT_OF_RANGE in _codes(result)
        assert result.body_density is not None

    def test_age_clamped_to_nearest_band(self, reference_measurement):
        young = compute(reference_measurement, Subject(sex=Sex.FEMALE, age_years=10))
        youngest_supported = compute(reference_measurement, Subject(sex=Sex.FEMALE, age_years=16))
        assert young.body_density == youngest_supported.body_density

    def test_age_range_only_matters_for_density(self):
        result = compute({"weight_kg": 40.0, "height_cm": 150.0}, Subject(sex=Sex.MALE, age_years=10))
        assert WarningCode.AGE_OUT_OF_RANGE not in _codes(result)

    def test_age_boundary_20(self, reference_measurement):
        at_19 = compute(reference_measurement, Subject(sex=Sex.MALE, age_years=19))
        at_20 = compute(reference_measurement, Subject(sex=Sex.MALE, age_years=20))
        at_29 = compute(reference_measurement, Subject(sex=Sex.MALE, age_years=29))
        assert at_20.body_density == at_29.body_density
        assert at_20.body_density != at_19.body_density

    def test_body_fat_below_range_is_clamped(self, reference_data, male_25):
        for site in SUM4:
            reference_data[site] = 1.0
        result = compute(reference_data, male_25)
        assert result.body_fat_percent == 2.0
        assert WarningCode.BODYFAT_OUT_OF_RANGE in _codes(result)

    def test_body_fat_above_range_is_clamped(self, reference_data):
        for site in SUM4:
            reference_data[site] = 150.0
        result = compute(reference_data, Subject(sex=Sex.FEMALE, age_years=55))
        assert result.body_fat_percent == 60.0
        codes = _codes(result)
        assert WarningCode.BODYFAT_OUT_OF_RANGE in codes
        assert codes.count(WarningCode.SKINFOLD_SUSPICIOUS) == 4

    def test_suspicious_skinfold_is_kept(self, reference_data, male_25):
        reference_data["abdominal_mm"] = 65.0
        result = compute(reference_data, male_25)
        suspicious = [w for w in result.warnings if w.code == WarningCode.SKINFOLD_SUSPICIOUS]
        assert [w.field for w in suspicious] == ["abdominal_mm"]
        assert result.sum_6_skinfolds_mm == 92.0

    def test_component_sum_mismatch(self, reference_data, male_25):
        reference_data["weight_kg"] = 95.0
        result = compute(reference_data, male_25)
        assert WarningCode.COMPONENT_SUM_MISMATCH in _codes(result)
        # Reported as-is, not rescaled to body weight
        assert result.structured_weight_kg < 90.0

    def test_tolerance_is_configurable(self, reference_data, male_25):
        reference_data["weight_kg"] = 95.0
        loose = Settings(_env_file=None, COMPONENT_SUM_TOLERANCE_PERCENT=50.0)
        result = compute(reference_data, male_25, settings=loose)
        assert WarningCode.COMPONENT_SUM_MISMATCH not in _codes(result)

    def test_carbs_floor(self, reference_measurement, male_25):
        greedy = Settings(_env_file=None, PROTEIN_G_PER_KG_LEAN=12.0)
        result = compute(reference_measurement, male_25, Objective.LOSS, settings=greedy)
        assert result.carbs_g == 0.0
        assert WarningCode.CARBS_BELOW_ZERO in _codes(result)

    def test_carbs_floor_logged_once(self, reference_measurement, male_25, caplog):
        greedy = Settings(_env_file=None, PROTEIN_G_PER_KG_LEAN=12.0)
        with caplog.at_level(logging.WARNING, logger="bodycomp"):
            compute(reference_measurement, male_25, Objective.LOSS, settings=greedy)
        carbs_lines = [r for r in caplog.records if "carbs" in r.getMessage().lower()]
        assert len(carbs_lines) == 1
        assert carbs_lines[0].getMessage().startswith("CARBS_BELOW_ZERO")


# ── Malformed input ─────────────────────────────────────────────

class TestMalformedInput:

    @pytest.mark.parametrize(
        "field, value",
        [
            ("weight_kg", -70.0),
            ("weight_kg", 0.0),
            ("height_cm", 0.0),
            ("triceps_mm", -1.0),
            ("waist_cm", "wide"),
            ("weight_kg", float("nan")),
            ("height_cm", float("inf")),
            ("weight_kg", 1e308),
            ("weight_kg", 501.0),
            ("weight_kg", 1e-320),
            ("height_cm", 1e200),
            ("height_cm", 301.0),
            ("height_cm", 1e-300),
            ("seated_height_cm", 250.0),
            ("seated_height_cm", 1e-300),
            ("triceps_mm", 200.0),
            ("calf_mm", 151.0),
            ("waist_cm", 400.0),
            ("thorax_cm", 301.0),
            ("femoral_cm", 1e6),
            ("biacromial_cm", 301.0),
        ],
    )
    def test_rejected(self, reference_data, male_25, field, value):
        reference_data[field] = value
        with pytest.raises(InvalidMeasurementError) as exc:
            compute(reference_data, male_25)
        assert exc.value.errors
        assert exc.value.errors[0]["loc"] == (field,)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"weight_kg": 500.0, "height_cm": 300.0, "seated_height_cm": 200.0},
            {"weight_kg": 1.0, "height_cm": 30.0, "seated_height_cm": 15.0},
            {
                "weight_kg": 500.0,
                "triceps_mm": 150.0, "biceps_mm": 150.0, "subscapular_mm": 150.0,
                "suprailiac_mm": 150.0, "supraspinal_mm": 150.0, "abdominal_mm": 150.0,
                "thigh_mm": 150.0, "calf_mm": 150.0,
                "waist_cm": 300.0, "hip_cm": 300.0, "thorax_cm": 300.0, "femoral_cm": 300.0,
            },
        ],
    )
    def test_accepted_extremes_stay_finite(self, reference_data, male_25, overrides):
        reference_data.update(overrides)
        result = compute(reference_data, male_25, Objective.LOSS)
        numbers = {
            name: value
            for name, value in result.model_dump().items()
            if isinstance(value, float)
        }
        assert numbers
        assert all(math.isfinite(v) for v in numbers.values()), numbers
        assert result.carbs_g is None or result.carbs_g >= 0

    def test_unknown_field_rejected(self, reference_data, male_25):
        reference_data["chest_mm"] = 10.0
        with pytest.raises(InvalidMeasurementError):
            compute(reference_data, male_25)

    def test_bad_subject(self, reference_data):
        with pytest.raises(InvalidMeasurementError):
            compute(reference_data, {"sex": "other", "age_years": 30})
        with pytest.raises(InvalidMeasurementError):
            compute(reference_data, {"sex": "male", "age_years": -1})

    def test_instance_built_without_validation_is_rechecked(self, male_25):
        broken = MeasurementInput.model_construct(weight_kg=-5.0)
        with pytest.raises(InvalidMeasurementError):
            compute(broken, male_25)

    def test_not_a_mapping(self, male_25):
        with pytest.raises(InvalidMeasurementError):
            compute([78.4, 178.0], male_25)

    def test_is_a_value_error(self):
        assert issubclass(InvalidMeasurementError, ValueError)


# ── Objective ───────────────────────────────────────────────────

class TestObjective:

    def test_ordering(self, reference_measurement, male_25):
        loss = compute(reference_measurement, male_25, Objective.LOSS)
        keep = compute(reference_measurement, male_25, Objective.MAINTAIN)
        gain = compute(reference_measurement, male_25, Objective.GAIN)
        maintenance = keep.maintenance_kcal
        assert loss.target_kcal < maintenance < gain.target_kcal
        assert keep.target_kcal == maintenance

    def test_free_text_label(self, reference_measurement, male_25):
        by_label = compute(reference_measurement, male_25, "Pérdida de grasa")
        by_enum = compute(reference_measurement, male_25, Objective.LOSS)
        assert by_label.target_kcal == by_enum.target_kcal

    def test_enum_value_string(self, reference_measurement, male_25):
        assert compute(reference_measurement, male_25, "gain") == compute(
            reference_measurement, male_25, Objective.GAIN
        )


# ── Public signature ────────────────────────────────────────────

class TestSignature:

    def test_optional_arguments_use_union_syntax(self):
        params = inspect.signature(compute).parameters
        assert isinstance(params["objective"].annotation, types.UnionType)
        assert params["objective"].annotation == (Objective | str | None)
        assert params["settings"].annotation == (Settings | None)
        assert params["settings"].default is None
