"""
General anthropometric indices: BMI, waist-hip ratio and phantom Z-scores.
"""

from bodycomp.schemas import MeasurementInput
from bodycomp.services.coefficients import REFERENCE_VALUES

# Upper bounds (exclusive) of the WHO BMI classes; last class is open-ended
BMI_CLASSES = (
    (18.5, "Underweight"),
    (25.0, "Normal weight"),
    (30.0, "Overweight"),
    (35.0, "Obesity class I"),
    (40.0, "Obesity class II"),
)
BMI_TOP_CLASS = "Obesity class III"


def calculate_bmi(weight_kg: float | None, height_cm: float | None) -> float | None:
    if weight_kg is None or height_cm is None:
        return None
    height_m = height_cm / 100.0
    return weight_kg / (height_m * height_m)


def classify_bmi(bmi: float | None) -> str | None:
    if bmi is None:
        return None
    for upper, label in BMI_CLASSES:
        if bmi < upper:
            return label
    return BMI_TOP_CLASS


def calculate_waist_hip_ratio(waist_cm: float | None, hip_cm: float | None) -> float | None:
    if waist_cm is None or not hip_cm:
        return None
    return waist_cm / hip_cm


def calculate_z_scores(m: MeasurementInput) -> dict[str, float]:
    """Z = (value - mean) / sd for every measured site with a reference value."""
    scores = {}
    for name, (mean, sd) in REFERENCE_VALUES.items():
        value = getattr(m, name)
        if value is None:
            continue
        scores[name] = (value - mean) / sd
    return scores
