"""
BMI Calculation Service
========================
Calculates the Body Mass Index and its classification band.

FORMULA:
  BMI = weight_kg / (height_m)²      where height_m = height_cm / 100

The BMI is rounded to 1 decimal place (ties away from zero, 24.25 -> 24.3)
and the classification is taken from the ROUNDED value, so the number shown
to the user and its label always agree.

CLASSIFICATION STANDARDS:
  legacy (default): cutoffs used by the coaching app screens:
    < 18.5 Underweight | < 24.9 Normal weight | < 29.9 Overweight | else Obesity
  who: conventional WHO cutoffs:
    < 18.5 Underweight | < 25.0 Normal weight | < 30.0 Overweight | else Obesity

Note that under "legacy" a BMI of 24.9 is already "Overweight".
"""

import logging
import math

from nutricoach.core.config import settings
from nutricoach.core.rounding import round_half_up
from nutricoach.schemas import BMIOutcome, BMIResult, InputValidationError, UndefinedInput

logger = logging.getLogger(__name__)

# Upper bounds (exclusive) of Underweight, Normal weight and Overweight
BMI_THRESHOLDS = {
    "legacy": (18.5, 24.9, 29.9),
    "who": (18.5, 25.0, 30.0),
}

BMI_LABELS = {
    "en": ("Underweight", "Normal weight", "Overweight", "Obesity"),
    "pt_BR": ("Abaixo do Peso", "Peso Normal", "Sobrepeso", "Obesidade"),
}


def classify_bmi(
    bmi: float,
    standard: str | None = None,
    locale: str | None = None,
) -> str:
    """
    Map a BMI value to its classification label.

    Args:
        bmi: The BMI value (already rounded by the caller)
        standard: "legacy" or "who" (default: settings.BMI_CLASSIFICATION_STANDARD)
        locale: "en" or "pt_BR" (default: settings.CLASSIFICATION_LOCALE)

    Returns:
        The classification label in the requested language

    Raises:
        ValueError: If the standard or locale is unknown
    """
    standard = standard or settings.BMI_CLASSIFICATION_STANDARD
    locale = locale or settings.CLASSIFICATION_LOCALE

    if standard not in BMI_THRESHOLDS:
        raise ValueError(
            f"Unknown BMI classification standard '{standard}'. "
            f"Available: {list(BMI_THRESHOLDS)}"
        )
    if locale not in BMI_LABELS:
        raise ValueError(
            f"Unknown classification locale '{locale}'. "
            f"Available: {list(BMI_LABELS)}"
        )

    underweight_max, normal_max, overweight_max = BMI_THRESHOLDS[standard]
    underweight, normal, overweight, obesity = BMI_LABELS[locale]

    if bmi < underweight_max:
        return underweight
    if bmi < normal_max:
        return normal
    if bmi < overweight_max:
        return overweight
    return obesity


def compute_bmi(
    weight_kg: float | None,
    height_cm: float | None,
) -> BMIOutcome:
    """
    Calculate the BMI from weight (kg) and height (cm).

    Never raises for bad data:
      - Missing (None) or zero height/weight -> UndefinedInput
      - Height/weight so extreme the BMI is not finite -> UndefinedInput
      - Negative or non-finite height/weight -> InputValidationError

    Examples:
        compute_bmi(70, 170)  -> BMIResult(value=24.2, classification="Normal weight")
        compute_bmi(90, 170)  -> BMIResult(value=31.1, classification="Obesity")
        compute_bmi(70, 0)    -> UndefinedInput(reason="missing_height")
    """
    for field, value in (("weight_kg", weight_kg), ("height_cm", height_cm)):
        if value is None:
            continue
        if not math.isfinite(value) or value < 0:
            logger.warning(f"Rejected BMI input {field}={value}")
            return InputValidationError(
                field=field,
                value=value,
                message=f"{field} must be a finite, non-negative number.",
            )

    # A zero height or weight comes from an empty form field: treat as missing
    if not height_cm:
        return UndefinedInput(
            reason="missing_height",
            detail="Height is required (and must be greater than 0) to calculate BMI.",
        )
    if not weight_kg:
        return UndefinedInput(
            reason="missing_weight",
            detail="Weight is required (and must be greater than 0) to calculate BMI.",
        )

    height_m = height_cm / 100
    height_m_squared = height_m * height_m

    # A tiny height can underflow to 0 and a huge weight can overflow to inf
    if height_m_squared == 0 or not math.isfinite(weight_kg / height_m_squared):
        logger.warning(f"Non-finite BMI for weight={weight_kg}kg, height={height_cm}cm")
        return UndefinedInput(
            reason="non_finite_result",
            detail=f"Weight {weight_kg}kg and height {height_cm}cm do not yield a finite BMI.",
        )

    bmi = round_half_up(weight_kg / height_m_squared, 1)
    classification = classify_bmi(bmi)

    logger.info(
        f"BMI calculation: weight={weight_kg}kg, height={height_cm}cm "
        f"-> bmi={bmi} ({classification})"
    )

    return BMIResult(value=bmi, classification=classification)
