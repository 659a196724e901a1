"""
Somatotype Service (Heath-Carter anthropometric method)
=========================================================
Rates body shape on three components:

  Endomorphy  - relative fatness, from triceps + subscapular + supraspinal
                skinfolds corrected for stature
  Mesomorphy  - musculo-skeletal robustness, from humerus/femur breadths and
                skinfold-corrected flexed arm and calf girths
  Ectomorphy  - relative linearity, from the height-weight ratio

Each rating is computed on its own, so a missing girth only loses mesomorphy.
No rating goes below 0.1: very lean or very slight subjects get the minimum
instead of a zero or negative value.
"""

import logging

from bodycomp.schemas import MeasurementInput
from bodycomp.services.body_fat import sum_3_skinfolds
from bodycomp.services.coefficients import (
    ECTO_LOWER_HWR,
    ECTO_UPPER_HWR,
    PHANTOM_HEIGHT_CM,
    SOMATOTYPE_FLOOR,
)

logger = logging.getLogger(__name__)


def _floored(rating: float) -> float:
    return max(SOMATOTYPE_FLOOR, rating)


def calculate_endomorphy(m: MeasurementInput) -> float | None:
    sum3 = sum_3_skinfolds(m)
    if sum3 is None or m.height_cm is None:
        return None
    x = sum3 * PHANTOM_HEIGHT_CM / m.height_cm
    return _floored(-0.7182 + 0.1451 * x - 0.00068 * x ** 2 + 0.0000014 * x ** 3)


def calculate_mesomorphy(m: MeasurementInput) -> float | None:
    required = (
        m.height_cm, m.humeral_cm, m.femoral_cm,
        m.arm_flexed_cm, m.triceps_mm, m.calf_girth_cm, m.calf_mm,
    )
    if any(v is None for v in required):
        return None

    # Skinfolds are in mm, girths in cm
    corrected_arm = m.arm_flexed_cm - m.triceps_mm / 10.0
    corrected_calf = m.calf_girth_cm - m.calf_mm / 10.0
    return _floored(
        0.858 * m.humeral_cm
        + 0.601 * m.femoral_cm
        + 0.188 * corrected_arm
        + 0.161 * corrected_calf
        - 0.131 * m.height_cm
        + 4.5
    )


def height_weight_ratio(height_cm: float | None, weight_kg: float | None) -> float | None:
    """HWR = height / cube root of weight."""
    if height_cm is None or weight_kg is None:
        return None
    return height_cm / weight_kg ** (1.0 / 3.0)


def calculate_ectomorphy(m: MeasurementInput) -> float | None:
    """
    Three branches on the height-weight ratio:
      HWR >= 40.75         -> 0.732 × HWR - 28.58
      38.25 < HWR < 40.75  -> 0.463 × HWR - 17.63
      HWR <= 38.25         -> 0.1
    """
    hwr = height_weight_ratio(m.height_cm, m.weight_kg)
    if hwr is None:
        return None
    if hwr >= ECTO_UPPER_HWR:
        return _floored(0.732 * hwr - 28.58)
    if hwr > ECTO_LOWER_HWR:
        return _floored(0.463 * hwr - 17.63)
    return SOMATOTYPE_FLOOR


def calculate_somatotype(m: MeasurementInput) -> tuple[float | None, float | None, float | None]:
    """Return (endomorphy, mesomorphy, ectomorphy)."""
    endo = calculate_endomorphy(m)
    meso = calculate_mesomorphy(m)
    ecto = calculate_ectomorphy(m)
    logger.debug(f"Heath-Carter somatotype: endo={endo} meso={meso} ecto={ecto}")
    return endo, meso, ecto
