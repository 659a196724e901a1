"""
Coefficient Tables
==================
Fixed regression constants used by the body-composition calculator.

Everything here is immutable (tuples of frozen dataclasses or read-only mappings)
and loaded once at import time. Lookups go through pure functions so callers
never index the tables directly.

References:
  Durnin, J.V.G.A. & Womersley, J. (1974). Body fat assessed from total body
  density and its estimation from skinfold thickness. Br J Nutr, 32, 77-97.

  Kerr, D.A. (1988). An anthropometric method for the fractionation of skin,
  adipose, bone, muscle and residual tissue masses in males and females age
  6 to 77 years. MSc thesis, Simon Fraser University.

  Carter, J.E.L. & Heath, B.H. (1990). Somatotyping: Development and
  Applications. Cambridge University Press.
"""

from dataclasses import dataclass
from types import MappingProxyType

from bodycomp.schemas import ActivityLevel, Sex


# ============================================================
# DURNIN & WOMERSLEY (density = C - M * log10(sum of 4 skinfolds))
# ============================================================

@dataclass(frozen=True)
class DensityCoefficients:
    sex: Sex
    min_age: int  # inclusive lower bound of the age band
    c: float
    m: float


# Ordered by ascending min_age within each sex
DURNIN_WOMERSLEY: tuple[DensityCoefficients, ...] = (
    DensityCoefficients(Sex.MALE, 0, 1.1533, 0.0643),
    DensityCoefficients(Sex.MALE, 17, 1.1620, 0.0630),
    DensityCoefficients(Sex.MALE, 20, 1.1631, 0.0632),
    DensityCoefficients(Sex.MALE, 30, 1.1422, 0.0544),
    DensityCoefficients(Sex.MALE, 40, 1.1620, 0.0700),
    DensityCoefficients(Sex.MALE, 50, 1.1715, 0.0779),
    DensityCoefficients(Sex.FEMALE, 0, 1.1369, 0.0598),
    DensityCoefficients(Sex.FEMALE, 17, 1.1549, 0.0678),
    DensityCoefficients(Sex.FEMALE, 20, 1.1599, 0.0717),
    DensityCoefficients(Sex.FEMALE, 30, 1.1423, 0.0632),
    DensityCoefficients(Sex.FEMALE, 40, 1.1333, 0.0612),
    DensityCoefficients(Sex.FEMALE, 50, 1.1339, 0.0645),
)


def select_density_coefficients(sex: Sex, age_years: int) -> DensityCoefficients:
    """
    Pick the Durnin & Womersley row for a sex and age.

    Bands are inclusive at their lower bound: 17 falls in 17-19, 20 in 20-29,
    50 in 50+. Ages below the first band still map to it.
    """
    selected = None
    for row in DURNIN_WOMERSLEY:
        if row.sex != sex:
            continue
        if selected is None or row.min_age <= age_years:
            selected = row
    if selected is None:
        raise ValueError(f"No density coefficients for sex '{sex}'")
    return selected


# ============================================================
# KERR (1988) FIVE-COMPONENT PHANTOM
# ============================================================

# Phantom stature and sitting height (cm) used to scale to the reference body
PHANTOM_HEIGHT_CM = 170.18
PHANTOM_SEATED_HEIGHT_CM = 89.92


@dataclass(frozen=True)
class PhantomConstants:
    """Z = (sum * scale - mean) / sd ;  mass = (Z * mass_sd + mass_mean) / scale**3"""
    mean: float
    sd: float
    mass_mean: float
    mass_sd: float


ADIPOSE_PHANTOM = PhantomConstants(mean=116.41, sd=34.79, mass_mean=25.6, mass_sd=5.85)
MUSCLE_PHANTOM = PhantomConstants(mean=207.21, sd=13.74, mass_mean=24.5, mass_sd=5.4)
BONE_BODY_PHANTOM = PhantomConstants(mean=98.88, sd=5.33, mass_mean=6.70, mass_sd=1.34)
RESIDUAL_PHANTOM = PhantomConstants(mean=109.35, sd=7.08, mass_mean=6.10, mass_sd=1.24)

# Head bone is not scaled by stature
HEAD_GIRTH_MEAN_CM = 56.0
HEAD_GIRTH_SD_CM = 1.44
HEAD_BONE_MASS_MEAN_KG = 1.20
HEAD_BONE_MASS_SD_KG = 0.18

# Skin: DuBois body surface area constant and skin density (g/cm3)
BSA_CONSTANT = 71.84
SKIN_DENSITY = 1.05
SKIN_THICKNESS_MM = MappingProxyType({Sex.MALE: 2.07, Sex.FEMALE: 1.96})


# ============================================================
# HEATH-CARTER SOMATOTYPE
# ============================================================

# Height-weight ratio band edges for ectomorphy
ECTO_UPPER_HWR = 40.75
ECTO_LOWER_HWR = 38.25

# Lowest rating any component can take; zero or negative raw values get it
SOMATOTYPE_FLOOR = 0.1


# ============================================================
# ENERGY
# ============================================================

ACTIVITY_FACTORS = MappingProxyType({
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.VERY_ACTIVE: 1.9,
})

# Mifflin-St Jeor sex constant (kcal/day)
MIFFLIN_SEX_CONSTANT = MappingProxyType({Sex.MALE: 5.0, Sex.FEMALE: -161.0})

KCAL_PER_G_PROTEIN = 4.0
KCAL_PER_G_CARBS = 4.0
KCAL_PER_G_FAT = 9.0


# ============================================================
# PHANTOM REFERENCE VALUES (mean, sd) FOR Z-SCORES
# ============================================================

REFERENCE_VALUES = MappingProxyType({
    "weight_kg": (74.6, 9.8),
    "height_cm": (179.5, 7.2),
    "seated_height_cm": (93.5, 3.8),
    "biacromial_cm": (40.8, 2.1),
    "thorax_transverse_cm": (28.5, 1.9),
    "thorax_ap_cm": (19.3, 1.5),
    "biiliac_cm": (30.8, 2.2),
    "humeral_cm": (7.0, 0.4),
    "femoral_cm": (9.9, 0.5),
    "head_cm": (58.2, 1.7),
    "arm_relaxed_cm": (29.5, 2.4),
    "arm_flexed_cm": (31.8, 2.5),
    "forearm_cm": (27.1, 1.5),
    "thorax_cm": (94.2, 6.8),
    "waist_cm": (76.9, 6.4),
    "hip_cm": (100.8, 5.2),
    "thigh_superior_cm": (59.5, 4.1),
    "thigh_medial_cm": (53.2, 3.7),
    "calf_girth_cm": (37.6, 2.2),
    "triceps_mm": (9.8, 4.2),
    "subscapular_mm": (11.2, 4.5),
    "supraspinal_mm": (9.8, 4.2),
    "abdominal_mm": (17.5, 6.8),
    "thigh_mm": (14.8, 5.9),
    "calf_mm": (11.5, 4.5),
})
