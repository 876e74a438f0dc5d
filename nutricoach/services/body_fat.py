"""
Body Fat Calculation Service
==============================
Implements the Jackson & Pollock 7-skinfold method for estimating body fat percentage.

The Pollock 7-site skinfold method is one of the most widely used and validated
methods for estimating body composition. It uses caliper measurements from
7 sites on the body to calculate body density, which is then converted to
body fat percentage using the Siri equation.

FORMULA (Jackson & Pollock, 1978 / Jackson, Pollock & Ward, 1980):
  Men:   Body Density = 1.112 - (0.00043499 × S) + (0.00000055 × S²) - (0.00028826 × Age)
  Women: Body Density = 1.097 - (0.00046971 × S) + (0.00000056 × S²) - (0.00012828 × Age)

  Where S = sum of 7 skinfolds (in mm):
    chest, mid-axillary, triceps, subscapular, abdominal, suprailiac, thigh

SIRI EQUATION (1961):
  Body Fat % = (495 / Body Density) - 450

MISSING DATA:
  "require_all" (default) only estimates when all 7 sites were measured.
  "zero" counts unmeasured sites as 0 mm, which understates S for a partially
  filled form. Either way, a sum of 0 means nothing was entered.

PRECISION:
  The canonical result is rounded to 1 decimal place (patient record card),
  ties away from zero like the screens display it.
  Callers that want the 2-decimal figure of the patient editor pass precision=2.
"""

import logging
import math

from nutricoach.core.config import settings
from nutricoach.core.rounding import round_half_up
from nutricoach.schemas import (
    BodyFatOutcome,
    BodyFatResult,
    InputValidationError,
    PlausibilityWarning,
    Sex,
    SkinfoldMeasurements,
    UndefinedInput,
)

logger = logging.getLogger(__name__)

# The 7 sites that make up the Pollock sum. Biceps, supraspinale and calf are ignored.
POLLOCK_7_SITES = (
    "chest",
    "mid_axillary",
    "triceps",
    "subscapular",
    "abdominal",
    "suprailiac",
    "thigh",
)

# (intercept, linear S, quadratic S², age) per sex
POLLOCK_7_COEFFICIENTS = {
    Sex.MALE: (1.112, 0.00043499, 0.00000055, 0.00028826),
    Sex.FEMALE: (1.097, 0.00046971, 0.00000056, 0.00012828),
}

SUPPORTED_PRECISIONS = (1, 2)


def sum_of_skinfolds(
    skinfolds: SkinfoldMeasurements,
    missing_policy: str | None = None,
) -> float | None:
    """
    Sum the 7 Pollock sites.

    Returns None when a site is unmeasured and the policy is "require_all".
    Under the "zero" policy unmeasured sites count as 0 mm.
    """
    missing_policy = missing_policy or settings.SKINFOLD_MISSING_POLICY
    values = [getattr(skinfolds, site) for site in POLLOCK_7_SITES]

    if missing_policy == "require_all":
        if any(value is None for value in values):
            return None
    elif missing_policy != "zero":
        raise ValueError(
            f"Unknown skinfold missing policy '{missing_policy}'. "
            "Available: ['require_all', 'zero']"
        )

    return sum(value or 0.0 for value in values)


def missing_sites(skinfolds: SkinfoldMeasurements) -> list[str]:
    """List the Pollock sites that have no measurement."""
    return [site for site in POLLOCK_7_SITES if getattr(skinfolds, site) is None]


def calculate_body_density_pollock_7(
    sum_of_skinfolds_mm: float,
    age_years: int = 25,
    sex: Sex = Sex.MALE,
) -> float:
    """
    Calculate body density using the Jackson-Pollock 7-skinfold generalized equation.

    Args:
        sum_of_skinfolds_mm: Sum of all 7 skinfold measurements in millimeters
        age_years: Age of the subject in years (default: 25)
        sex: Sex.MALE or Sex.FEMALE (default: Sex.MALE)

    Returns:
        Body density in g/cm³ (typically between 1.0 and 1.1), unrounded

    Raises:
        ValueError: If no coefficient set exists for `sex`

    Reference:
        Jackson, A.S. & Pollock, M.L. (1978). Generalized equations for predicting
        body density of men. British Journal of Nutrition, 40, 497-504.
        Jackson, A.S., Pollock, M.L. & Ward, A. (1980). Generalized equations for
        predicting body density of women. Medicine and Science in Sports and
        Exercise, 12, 175-181.
    """
    if sex not in POLLOCK_7_COEFFICIENTS:
        raise ValueError(f"No Jackson-Pollock 7-site coefficients for sex '{sex}'.")

    intercept, linear, quadratic, age_factor = POLLOCK_7_COEFFICIENTS[sex]
    s = sum_of_skinfolds_mm
    body_density = (
        intercept
        - (linear * s)
        + (quadratic * s * s)
        - (age_factor * age_years)
    )

    logger.info(
        f"Pollock 7-fold calculation: "
        f"sum_skinfolds={s}mm, age={age_years}, sex={Sex(sex).value}, "
        f"body_density={body_density:.6f} g/cm³"
    )

    return body_density


def body_density_to_fat_percent(body_density: float) -> float:
    """
    Convert body density to body fat percentage using the Siri equation.

    Formula:
        Body Fat % = (495 / Body Density) - 450

    The result is neither rounded nor clamped. A density of exactly 0 gives
    infinity; a negative density gives a (meaningless) large negative percentage.

    Reference:
        Siri, W.E. (1961). Body composition from fluid spaces and density:
        Analysis of methods. In J. Brozek & A. Henschel (Eds.), Techniques for
        Measuring Body Composition (pp. 223-224). Washington, DC: National
        Academy of Sciences.
    """
    if body_density == 0:
        return math.inf
    return (495.0 / body_density) - 450.0


def _validate_inputs(
    skinfolds: SkinfoldMeasurements,
    age_years: int,
    precision: int,
) -> InputValidationError | None:
    """Reject negative/non-finite readings and unsupported precisions."""
    if precision not in SUPPORTED_PRECISIONS:
        return InputValidationError(
            field="precision",
            value=precision,
            message=f"precision must be one of {list(SUPPORTED_PRECISIONS)}.",
        )

    if age_years is None or age_years < 0:
        return InputValidationError(
            field="age_years",
            value=age_years,
            message="age_years must be a non-negative integer.",
        )

    for site in POLLOCK_7_SITES:
        value = getattr(skinfolds, site)
        if value is not None and (not math.isfinite(value) or value < 0):
            return InputValidationError(
                field=site,
                value=value,
                message=f"Skinfold '{site}' must be a finite, non-negative value in mm.",
            )

    return None


def compute_body_fat_percent(
    skinfolds: SkinfoldMeasurements,
    age_years: int,
    sex: Sex,
    precision: int = 1,
    missing_policy: str | None = None,
) -> BodyFatOutcome:
    """
    Complete body fat estimate from the 7 skinfold measurements.

    This is the main entry point for the body fat calculation service.
    It sums the 7 sites, calculates body density with the sex-specific
    equation and converts it to body fat % with the Siri equation.

    Args:
        skinfolds: Caliper readings (only the 7 Pollock sites are used)
        age_years: Age of the subject in years
        sex: Sex of the subject (OTHER has no coefficient set)
        precision: Decimal places of the result, 1 (default) or 2
        missing_policy: "require_all" or "zero" (default: settings.SKINFOLD_MISSING_POLICY)

    Returns:
        BodyFatResult on success (with a PlausibilityWarning when the value
        falls outside the plausible human range), UndefinedInput when the
        estimate is not defined for the input, InputValidationError when the
        input is malformed.
    """
    error = _validate_inputs(skinfolds, age_years, precision)
    if error is not None:
        logger.warning(f"Rejected body fat input: {error.message} (value={error.value})")
        return error

    if sex not in POLLOCK_7_COEFFICIENTS:
        return UndefinedInput(
            reason="unsupported_sex",
            detail=(
                f"The Jackson-Pollock 7-site equation has no coefficients for sex '{sex}'. "
                "Only MALE and FEMALE are supported."
            ),
        )

    total = sum_of_skinfolds(skinfolds, missing_policy)
    if total is None:
        return UndefinedInput(
            reason="missing_skinfolds",
            detail=f"All 7 skinfold sites are required. Missing: {missing_sites(skinfolds)}.",
        )

    if total == 0:
        return UndefinedInput(
            reason="empty_skinfolds",
            detail="No skinfold measurements were entered (sum of the 7 sites is 0).",
        )

    body_density = calculate_body_density_pollock_7(total, age_years, sex)
    fat_percent = body_density_to_fat_percent(body_density)

    if not (math.isfinite(body_density) and math.isfinite(fat_percent)):
        logger.warning(f"Non-finite body fat for density={body_density}")
        return UndefinedInput(
            reason="non_finite_result",
            detail=f"Body density {body_density} does not yield a finite body fat %.",
        )

    value = round_half_up(fat_percent, precision)
    # Range check on the unrounded estimate
    warning = _check_plausibility(fat_percent, value)

    logger.info(
        f"Siri equation: density={body_density:.6f} -> fat={value}%"
    )

    return BodyFatResult(
        value=value,
        precision=precision,
        sum_of_skinfolds=round_half_up(total, 2),
        body_density=round_half_up(body_density, 6),
        warning=warning,
    )


def _check_plausibility(fat_percent: float, shown: float) -> PlausibilityWarning | None:
    """
    Flag (without clamping) a body fat % outside the configured human range.
    `fat_percent` is the unrounded estimate, `shown` the rounded value reported.
    """
    lower = settings.BODY_FAT_PLAUSIBLE_MIN
    upper = settings.BODY_FAT_PLAUSIBLE_MAX

    if lower <= fat_percent <= upper:
        return None

    message = (
        f"Estimated body fat {shown}% is outside the plausible range "
        f"{lower}%-{upper}%. Check the caliper readings (mm, not cm) and the age."
    )
    logger.warning(message)
    return PlausibilityWarning(message=message, lower=lower, upper=upper)
