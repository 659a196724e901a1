"""
Body Fat Calculation Service
==============================
Implements the Durnin & Womersley 4-skinfold method for estimating body fat.

The four sites (triceps, biceps, subscapular, suprailiac) are summed and the
log of that sum is fed into a linear regression whose constants depend on sex
and age band. The resulting body density is converted to body fat percentage
with the Siri equation.

FORMULA (Durnin & Womersley, 1974):
  Body Density = C - M × log10(S)

  Where S = sum of 4 skinfolds (in mm) and (C, M) come from
  coefficients.DURNIN_WOMERSLEY for the subject's sex and age band.

SIRI EQUATION (1961):
  Body Fat % = (495 / Body Density) - 450

Every function returns None when one of its inputs is missing, so a measurement
taken without, say, the biceps site still yields everything else.
"""

import logging
import math

from bodycomp.schemas import MeasurementInput, Sex
from bodycomp.services.coefficients import select_density_coefficients

logger = logging.getLogger(__name__)


def sum_of_skinfolds(*values: float | None) -> float | None:
    """Sum skinfold sites, or None if any of them was not measured."""
    if any(v is None for v in values):
        return None
    return sum(values)


def sum_4_skinfolds(m: MeasurementInput) -> float | None:
    """Durnin & Womersley sites: triceps + biceps + subscapular + suprailiac."""
    return sum_of_skinfolds(m.triceps_mm, m.biceps_mm, m.subscapular_mm, m.suprailiac_mm)


def sum_6_skinfolds(m: MeasurementInput) -> float | None:
    """ISAK 6-site sum used for adipose mass and progress tracking."""
    return sum_of_skinfolds(
        m.triceps_mm, m.subscapular_mm, m.supraspinal_mm,
        m.abdominal_mm, m.thigh_mm, m.calf_mm,
    )


def sum_3_skinfolds(m: MeasurementInput) -> float | None:
    """Heath-Carter endomorphy sites: triceps + subscapular + supraspinal."""
    return sum_of_skinfolds(m.triceps_mm, m.subscapular_mm, m.supraspinal_mm)


def calculate_body_density_durnin_womersley(
    sum_4_mm: float | None,
    sex: Sex,
    age_years: int,
) -> float | None:
    """
    Calculate body density from the 4-site skinfold sum.

    Args:
        sum_4_mm: Sum of triceps, biceps, subscapular and suprailiac (mm)
        sex: Selects the male or female coefficient table
        age_years: Selects the age band; callers clamp it to the supported range

    Returns:
        Body density in g/mL (typically between 1.0 and 1.1), or None when the
        sum is missing or not positive (log10 is undefined there).
    """
    if sum_4_mm is None or sum_4_mm <= 0:
        return None

    row = select_density_coefficients(sex, age_years)
    body_density = row.c - row.m * math.log10(sum_4_mm)

    logger.debug(
        f"Durnin-Womersley: sum4={sum_4_mm}mm, sex={sex.value}, age={age_years} "
        f"(band {row.min_age}+, C={row.c}, M={row.m}) -> density={body_density:.6f}"
    )
    return body_density


def body_density_to_fat_percent(body_density: float | None) -> float | None:
    """
    Convert body density to body fat percentage using the Siri equation.

    The value is returned unclamped; see clamp_body_fat_percent().

    Reference:
        Siri, W.E. (1961). Body composition from fluid spaces and density:
        Analysis of methods. In J. Brozek & A. Henschel (Eds.), Techniques for
        Measuring Body Composition (pp. 223-224). Washington, DC: National
        Academy of Sciences.
    """
    if body_density is None or body_density <= 0:
        return None
    return (495.0 / body_density) - 450.0


def clamp_body_fat_percent(
    fat_percent: float,
    minimum: float,
    maximum: float,
) -> tuple[float, bool]:
    """Clamp into [minimum, maximum]. The flag tells whether clamping happened."""
    clamped = max(minimum, min(fat_percent, maximum))
    return clamped, clamped != fat_percent


def split_fat_and_lean_mass(
    weight_kg: float | None,
    fat_percent: float | None,
) -> tuple[float | None, float | None]:
    """Return (fat_mass_kg, lean_mass_kg)."""
    if weight_kg is None or fat_percent is None:
        return None, None
    fat_mass = weight_kg * fat_percent / 100.0
    return fat_mass, weight_kg - fat_mass
