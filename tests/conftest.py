"""
Shared fixtures: a complete ISAK 2 measurement of a 25-year-old man.

Hand-checked reference values for this case:
  sum4 = 20 mm  -> density ≈ 1.08087, body fat ≈ 7.96 %
  Kerr components ≈ skin 4.27 + adipose 13.33 + muscle 42.59
                    + bone 9.07 + residual 9.21 = 78.47 kg (weight 78.4 kg)
  somatotype ≈ 1.35 - 5.43 - 1.86
"""

import pytest

from bodycomp.schemas import MeasurementInput, Sex, Subject


REFERENCE_MEASUREMENT = {
    "patient_id": "ref-001",
    "weight_kg": 78.4,
    "height_cm": 178.0,
    "seated_height_cm": 92.0,
    # Skinfolds (mm)
    "triceps_mm": 5.0,
    "biceps_mm": 3.0,
    "subscapular_mm": 6.0,
    "suprailiac_mm": 6.0,
    "supraspinal_mm": 5.0,
    "abdominal_mm": 8.0,
    "thigh_mm": 7.0,
    "calf_mm": 4.0,
    # Girths (cm)
    "head_cm": 57.0,
    "waist_cm": 80.0,
    "hip_cm": 96.0,
    "arm_relaxed_cm": 32.5,
    "arm_flexed_cm": 34.0,
    "forearm_cm": 28.0,
    "thorax_cm": 102.0,
    "thigh_superior_cm": 58.0,
    "thigh_medial_cm": 57.0,
    "calf_girth_cm": 38.0,
    # Diameters (cm)
    "biacromial_cm": 41.6,
    "biiliac_cm": 28.5,
    "humeral_cm": 7.0,
    "femoral_cm": 9.8,
    "thorax_transverse_cm": 29.0,
    "thorax_ap_cm": 20.0,
}


@pytest.fixture
def reference_data() -> dict:
    """A fresh copy of the reference measurement as a plain dict."""
    return dict(REFERENCE_MEASUREMENT)


@pytest.fixture
def reference_measurement(reference_data) -> MeasurementInput:
    return MeasurementInput(**reference_data)


@pytest.fixture
def male_25() -> Subject:
    return Subject(sex=Sex.MALE, age_years=25)
