"""
Application Configuration
=========================
Uses pydantic-settings to load environment variables into a typed Settings object.

Besides app metadata, this holds every threshold the body-composition calculator
applies when deciding whether a value deserves a warning. They are inferred
clinical defaults rather than published constants, so each can be overridden
from the environment (or a .env file) without touching code.
"""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    The .env file is automatically read thanks to the model_config below.
    """

    # Application metadata
    APP_NAME: str = "ISAK Body Composition Service"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Durnin & Womersley (1974) sample covered ages 16-72.
    # Ages outside this range are clamped and flagged.
    DW_MIN_AGE: int = 16
    DW_MAX_AGE: int = 72

    # Physiologically plausible body fat range (%)
    BODY_FAT_MIN_PERCENT: float = 2.0
    BODY_FAT_MAX_PERCENT: float = 60.0

    # Skinfolds above this (mm) are kept but flagged as suspicious
    SKINFOLD_SUSPICIOUS_MM: float = 60.0

    # Allowed gap between the five-component sum and body weight (%)
    COMPONENT_SUM_TOLERANCE_PERCENT: float = 2.0

    # Objective adjustments applied to maintenance calories
    LOSS_CALORIE_OFFSET: float = -0.20
    GAIN_CALORIE_OFFSET: float = 0.15

    # Macro split
    PROTEIN_G_PER_KG_LEAN: float = 2.0
    FAT_CALORIE_FRACTION: float = 0.25

    model_config = {"env_file": ".env", "extra": "ignore"}


# Singleton instance — import this everywhere you need settings
settings = Settings()
