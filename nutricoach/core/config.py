"""
Application Configuration
=========================
Uses pydantic-settings to load environment variables into a typed Settings object.
The calculation policies (BMI thresholds, missing skinfold handling, plausible
body fat range) live here so a deployment can switch them without code changes.
"""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    The .env file is automatically read thanks to the model_config below.
    """

    # "legacy" keeps the 24.9 / 29.9 cutoffs used by the coaching app screens.
    # "who" uses the conventional 25.0 / 30.0 cutoffs.
    BMI_CLASSIFICATION_STANDARD: Literal["legacy", "who"] = "legacy"

    # Language of the BMI classification labels
    CLASSIFICATION_LOCALE: Literal["en", "pt_BR"] = "en"

    # "require_all": all 7 Pollock sites must be measured before estimating body fat.
    # "zero": unmeasured sites count as 0 mm (behaviour of the old patient form).
    SKINFOLD_MISSING_POLICY: Literal["require_all", "zero"] = "require_all"

    # Body fat % outside this range is returned with a plausibility warning
    BODY_FAT_PLAUSIBLE_MIN: float = 2.0
    BODY_FAT_PLAUSIBLE_MAX: float = 65.0

    model_config = {"env_file": ".env", "extra": "ignore"}


# Singleton instance, import this everywhere you need settings
settings = Settings()
