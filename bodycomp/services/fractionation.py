"""
Five-Component Fractionation Service (Kerr, 1988)
===================================================
Splits body weight into skin, adipose, muscle, bone and residual mass.

Every component except skin uses the phantom stratagem: the sum of the relevant
sites is scaled to the phantom's stature (170.18 cm, or 89.92 cm sitting height
for residual mass), turned into a phantom Z-score, and converted back into a
mass for the subject's size:

  Z    = (Σ × P − mean) / sd          with P = 170.18 / height_cm
  mass = (Z × mass_sd + mass_mean) / P³

Components are estimated independently, so their sum ("structured weight")
does not have to match the scale weight. The gap is reported, never hidden.
"""

import logging
import math
from dataclasses import dataclass

from bodycomp.schemas import MeasurementInput, Sex
from bodycomp.services.body_fat import sum_6_skinfolds
from bodycomp.services.coefficients import (
    ADIPOSE_PHANTOM,
    BONE_BODY_PHANTOM,
    BSA_CONSTANT,
    HEAD_BONE_MASS_MEAN_KG,
    HEAD_BONE_MASS_SD_KG,
    HEAD_GIRTH_MEAN_CM,
    HEAD_GIRTH_SD_CM,
    MUSCLE_PHANTOM,
    PHANTOM_HEIGHT_CM,
    PHANTOM_SEATED_HEIGHT_CM,
    RESIDUAL_PHANTOM,
    SKIN_DENSITY,
    SKIN_THICKNESS_MM,
    PhantomConstants,
)

logger = logging.getLogger(__name__)


def _phantom_mass(site_sum: float, scale: float, phantom: PhantomConstants) -> float:
    z = (site_sum * scale - phantom.mean) / phantom.sd
    return (z * phantom.mass_sd + phantom.mass_mean) / scale ** 3


def _corrected_girth(girth_cm: float, skinfold_mm: float) -> float:
    """Girth minus the skinfold's contribution: G - π × S / 10."""
    return girth_cm - math.pi * skinfold_mm / 10.0


def body_surface_area(weight_kg: float | None, height_cm: float | None) -> float | None:
    """DuBois & DuBois body surface area in m²."""
    if weight_kg is None or height_cm is None:
        return None
    return BSA_CONSTANT * weight_kg ** 0.425 * height_cm ** 0.725 / 10000.0


def calculate_skin_mass(
    weight_kg: float | None,
    height_cm: float | None,
    sex: Sex,
) -> float | None:
    """Skin mass (kg) = BSA × skin thickness × skin density."""
    bsa = body_surface_area(weight_kg, height_cm)
    if bsa is None:
        return None
    return bsa * SKIN_THICKNESS_MM[sex] * SKIN_DENSITY


def calculate_adipose_mass(m: MeasurementInput) -> float | None:
    """Adipose mass (kg) from the six-skinfold sum."""
    sum6 = sum_6_skinfolds(m)
    if sum6 is None or m.height_cm is None:
        return None
    return _phantom_mass(sum6, PHANTOM_HEIGHT_CM / m.height_cm, ADIPOSE_PHANTOM)


def calculate_muscle_mass(m: MeasurementInput) -> float | None:
    """
    Muscle mass (kg) from five girths, four of them corrected for the overlying
    skinfold: relaxed arm (triceps), forearm, mid-thigh (thigh), calf (calf) and
    chest (subscapular).
    """
    required = (
        m.height_cm, m.arm_relaxed_cm, m.triceps_mm, m.forearm_cm,
        m.thigh_medial_cm, m.thigh_mm, m.calf_girth_cm, m.calf_mm,
        m.thorax_cm, m.subscapular_mm,
    )
    if any(v is None for v in required):
        return None

    girths = (
        _corrected_girth(m.arm_relaxed_cm, m.triceps_mm)
        + m.forearm_cm
        + _corrected_girth(m.thigh_medial_cm, m.thigh_mm)
        + _corrected_girth(m.calf_girth_cm, m.calf_mm)
        + _corrected_girth(m.thorax_cm, m.subscapular_mm)
    )
    return _phantom_mass(girths, PHANTOM_HEIGHT_CM / m.height_cm, MUSCLE_PHANTOM)


def calculate_bone_mass(m: MeasurementInput) -> float | None:
    """
    Bone mass (kg) = head bone (from head girth) + body bone (from biacromial,
    biiliac, and twice the humerus and femur breadths).
    """
    required = (m.height_cm, m.head_cm, m.biacromial_cm, m.biiliac_cm, m.humeral_cm, m.femoral_cm)
    if any(v is None for v in required):
        return None

    head_z = (m.head_cm - HEAD_GIRTH_MEAN_CM) / HEAD_GIRTH_SD_CM
    head_bone = head_z * HEAD_BONE_MASS_SD_KG + HEAD_BONE_MASS_MEAN_KG

    breadths = m.biacromial_cm + m.biiliac_cm + 2 * m.humeral_cm + 2 * m.femoral_cm
    body_bone = _phantom_mass(breadths, PHANTOM_HEIGHT_CM / m.height_cm, BONE_BODY_PHANTOM)

    return head_bone + body_bone


def calculate_residual_mass(m: MeasurementInput) -> float | None:
    """
    Residual mass (kg) from trunk dimensions scaled by sitting height:
    transverse chest + anterior-posterior chest + waist corrected by abdominal skinfold.
    """
    required = (m.seated_height_cm, m.thorax_transverse_cm, m.thorax_ap_cm, m.waist_cm, m.abdominal_mm)
    if any(v is None for v in required):
        return None

    trunk = m.thorax_transverse_cm + m.thorax_ap_cm + _corrected_girth(m.waist_cm, m.abdominal_mm)
    return _phantom_mass(trunk, PHANTOM_SEATED_HEIGHT_CM / m.seated_height_cm, RESIDUAL_PHANTOM)


@dataclass(frozen=True)
class Fractionation:
    """The five masses (kg) plus what can be derived from them."""
    weight_kg: float | None
    skin: float | None
    adipose: float | None
    muscle: float | None
    bone: float | None
    residual: float | None

    @property
    def components(self) -> dict[str, float | None]:
        return {
            "skin": self.skin,
            "adipose": self.adipose,
            "muscle": self.muscle,
            "bone": self.bone,
            "residual": self.residual,
        }

    @property
    def is_complete(self) -> bool:
        return all(v is not None for v in self.components.values())

    @property
    def structured_weight(self) -> float | None:
        if not self.is_complete:
            return None
        return self.skin + self.adipose + self.muscle + self.bone + self.residual

    @property
    def weight_difference_percent(self) -> float | None:
        structured = self.structured_weight
        if structured is None or self.weight_kg is None:
            return None
        return (structured - self.weight_kg) / self.weight_kg * 100.0

    def percent_of_weight(self, mass: float | None) -> float | None:
        if mass is None or self.weight_kg is None:
            return None
        return mass / self.weight_kg * 100.0

    @property
    def muscle_to_bone_ratio(self) -> float | None:
        if self.muscle is None or not self.bone:
            return None
        return self.muscle / self.bone

    @property
    def adipose_to_muscle_ratio(self) -> float | None:
        if self.adipose is None or not self.muscle:
            return None
        return self.adipose / self.muscle


def fractionate(m: MeasurementInput, sex: Sex) -> Fractionation:
    """Estimate all five components independently."""
    result = Fractionation(
        weight_kg=m.weight_kg,
        skin=calculate_skin_mass(m.weight_kg, m.height_cm, sex),
        adipose=calculate_adipose_mass(m),
        muscle=calculate_muscle_mass(m),
        bone=calculate_bone_mass(m),
        residual=calculate_residual_mass(m),
    )

    if result.is_complete:
        logger.debug(
            f"Kerr fractionation: skin={result.skin:.3f} adipose={result.adipose:.3f} "
            f"muscle={result.muscle:.3f} bone={result.bone:.3f} residual={result.residual:.3f} "
            f"structured={result.structured_weight:.3f}kg"
        )
    return result
