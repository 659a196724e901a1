"""
Pydantic V2 Schemas (Calculator Inputs/Outputs)
=================================================
These schemas define the shape of data that flows in and out of the calculator,
both for direct Python callers and for the HTTP shell.

Naming Convention:
  - MeasurementInput / Subject : what the calculator consumes
  - CalculationResult          : what it produces (immutable)
  - ComputeRequest             : POST body of the compute endpoint

Every anthropometric field is optional. `None` means "not measured" and is never
treated as zero: formulas that need a missing site simply do not run.
"""

import datetime
import enum
import unicodedata

from pydantic import BaseModel, Field, field_validator


# ============================================================
# ENUMS
# ============================================================

class Sex(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"


class ActivityLevel(str, enum.Enum):
    """Physical activity level, mapped to a multiplier of the basal metabolic rate."""
    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    VERY_ACTIVE = "very_active"


class Objective(str, enum.Enum):
    """Nutritional objective used to adjust maintenance calories."""
    LOSS = "loss"
    MAINTAIN = "maintain"
    GAIN = "gain"

    @classmethod
    def parse(cls, value: str | None) -> "Objective | None":
        """
        Normalize a free-text objective label as patients' files store them.

        Accepts English or Spanish labels ("Pérdida de grasa", "Ganancia muscular",
        "hipertrofia", ...). Accents and case are ignored. Anything that is neither
        a loss nor a gain label counts as maintenance; empty input gives None.
        """
        if not value:
            return None
        decomposed = unicodedata.normalize("NFD", value)
        text = "".join(c for c in decomposed if not unicodedata.combining(c))
        text = text.strip().lower()

        if "loss" in text or "perd" in text or "bajar" in text:
            return cls.LOSS
        if "gain" in text or "gan" in text or "hipert" in text:
            return cls.GAIN
        return cls.MAINTAIN


class WarningCode(str, enum.Enum):
    """Non-fatal conditions attached to a result."""
    AGE_OUT_OF_RANGE = "AGE_OUT_OF_RANGE"
    BODYFAT_OUT_OF_RANGE = "BODYFAT_OUT_OF_RANGE"
    COMPONENT_SUM_MISMATCH = "COMPONENT_SUM_MISMATCH"
    SKINFOLD_SUSPICIOUS = "SKINFOLD_SUSPICIOUS"
    CARBS_BELOW_ZERO = "CARBS_BELOW_ZERO"
    NOTHING_COMPUTABLE = "NOTHING_COMPUTABLE"


# ============================================================
# INPUT SCHEMAS
# ============================================================

MAX_SKINFOLD_MM = 150.0
MAX_GIRTH_CM = 300.0

class MeasurementInput(BaseModel):
    """
    One ISAK 2 anthropometric capture session.

    Skinfolds are in millimeters, girths and diameters in centimeters.
    Every value is bounded to a humanly plausible range (weight 1-500 kg,
    height 30-300 cm, seated height 15-200 cm, skinfolds up to 150 mm, girths
    and breadths up to 300 cm); anything outside it is rejected as malformed.
    """
    patient_id: str | None = Field(default=None, description="Patient reference")
    measured_at: datetime.datetime | None = Field(
        default=None, description="When the measurement was taken"
    )

    # Basic
    weight_kg: float | None = Field(default=None, ge=1, le=500, description="Body weight (kg)")
    height_cm: float | None = Field(default=None, ge=30, le=300, description="Stretch stature (cm)")
    seated_height_cm: float | None = Field(default=None, ge=15, le=200, description="Sitting height (cm)")

    # Skinfolds (mm)
    triceps_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    biceps_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    subscapular_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    suprailiac_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    supraspinal_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    abdominal_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM)
    thigh_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM, description="Front thigh skinfold")
    calf_mm: float | None = Field(default=None, ge=0, le=MAX_SKINFOLD_MM, description="Medial calf skinfold")

    # Girths (cm)
    head_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    waist_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    hip_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    arm_relaxed_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    arm_flexed_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    forearm_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    thorax_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Mesosternale chest girth")
    thigh_superior_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Thigh girth 1 cm below gluteal fold")
    thigh_medial_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Mid-thigh girth")
    calf_girth_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)

    # Bone diameters (cm)
    biacromial_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    biiliac_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Biiliocristal breadth")
    humeral_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Biepicondylar humerus breadth")
    femoral_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Biepicondylar femur breadth")
    thorax_transverse_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM)
    thorax_ap_cm: float | None = Field(default=None, ge=0, le=MAX_GIRTH_CM, description="Anterior-posterior chest depth")

    model_config = {"allow_inf_nan": False, "extra": "forbid"}


class Subject(BaseModel):
    """The patient attributes the regressions depend on."""
    sex: Sex
    age_years: int = Field(..., ge=0, le=130, description="Age at measurement time")
    activity_level: ActivityLevel = Field(
        default=ActivityLevel.SEDENTARY, description="Used for maintenance calories"
    )

    model_config = {"extra": "forbid"}


class ComputeRequest(BaseModel):
    """Body of POST /calculations/compute."""
    measurement: MeasurementInput
    subject: Subject
    objective: Objective | None = None

    @field_validator("objective", mode="before")
    @classmethod
    def parse_objective_label(cls, value):
        """Accept free-text labels ("Pérdida de grasa") besides the enum values."""
        if isinstance(value, str) and value not in Objective._value2member_map_:
            return Objective.parse(value)
        return value


# ============================================================
# OUTPUT SCHEMAS
# ============================================================

class CalculationWarning(BaseModel):
    """A non-fatal observation about the input or a derived value."""
    code: WarningCode
    field: str | None = None
    message: str

    model_config = {"frozen": True}


class CalculationResult(BaseModel):
    """
    Everything derived from one MeasurementInput.

    Immutable: when the measurement changes, compute a new result instead of
    patching this one. Numeric fields are None when their inputs were missing;
    their names are listed in `not_computable`.
    """
    # Skinfold sums (mm)
    sum_3_skinfolds_mm: float | None = None
    sum_4_skinfolds_mm: float | None = None
    sum_6_skinfolds_mm: float | None = None

    # Density-based body fat
    body_density: float | None = None
    body_fat_percent: float | None = None
    fat_mass_kg: float | None = None
    lean_mass_kg: float | None = None

    # Five-component fractionation (kg and % of body weight)
    skin_mass_kg: float | None = None
    adipose_mass_kg: float | None = None
    muscle_mass_kg: float | None = None
    bone_mass_kg: float | None = None
    residual_mass_kg: float | None = None
    skin_mass_percent: float | None = None
    adipose_mass_percent: float | None = None
    muscle_mass_percent: float | None = None
    bone_mass_percent: float | None = None
    residual_mass_percent: float | None = None
    structured_weight_kg: float | None = None
    weight_difference_percent: float | None = None
    muscle_to_bone_ratio: float | None = None
    adipose_to_muscle_ratio: float | None = None

    # Heath-Carter somatotype
    endomorphy: float | None = None
    mesomorphy: float | None = None
    ectomorphy: float | None = None

    # Energy and macros (per day)
    bmr_kcal: float | None = None
    maintenance_kcal: float | None = None
    target_kcal: float | None = None
    protein_g: float | None = None
    carbs_g: float | None = None
    fat_g: float | None = None

    # General indices
    bmi: float | None = None
    bmi_classification: str | None = None
    waist_hip_ratio: float | None = None
    z_scores: dict[str, float] = Field(default_factory=dict)

    warnings: list[CalculationWarning] = Field(default_factory=list)
    not_computable: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def has_warning(self, code: WarningCode) -> bool:
        return any(w.code == code for w in self.warnings)
