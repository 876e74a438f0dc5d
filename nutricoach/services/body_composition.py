"""
Body Composition Service
=========================
Combines the BMI and body fat calculators for a single patient.

Both calculations are independent pure functions; this service simply runs
them on the same Subject + SkinfoldMeasurements so the patient record can show
both results together, and derives the companion figures:

  fat_mass_kg  = weight_kg × body_fat% / 100
  lean_mass_kg = weight_kg − fat_mass_kg

It also builds the BMI-over-time series from the patient's weigh-in history.
"""

import logging

from nutricoach.core.rounding import round_half_up
from nutricoach.schemas import (
    BMIHistoryPoint,
    BodyCompositionReport,
    SkinfoldMeasurements,
    Subject,
    WeighIn,
)
from nutricoach.services.bmi import compute_bmi
from nutricoach.services.body_fat import compute_body_fat_percent

logger = logging.getLogger(__name__)


def assess_body_composition(
    subject: Subject,
    skinfolds: SkinfoldMeasurements,
    precision: int = 1,
    missing_policy: str | None = None,
) -> BodyCompositionReport:
    """
    Compute BMI and body fat % for one patient and report them together.

    A missing result on one side never prevents the other: a patient with
    height and weight but no caliper readings still gets a BMI.

    Args:
        subject: Age, sex, weight and height of the patient
        skinfolds: Caliper readings in mm
        precision: Decimal places of the body fat %, 1 (default) or 2
        missing_policy: Override for settings.SKINFOLD_MISSING_POLICY

    Returns:
        BodyCompositionReport with both outcomes, plus fat/lean mass when
        weight and body fat % are both known
    """
    bmi = compute_bmi(subject.weight_kg, subject.height_cm)
    body_fat = compute_body_fat_percent(
        skinfolds,
        subject.age_years,
        subject.sex,
        precision=precision,
        missing_policy=missing_policy,
    )

    fat_mass_kg = None
    lean_mass_kg = None
    if body_fat.kind == "ok" and subject.weight_kg:
        fat_mass = subject.weight_kg * body_fat.value / 100
        fat_mass_kg = round_half_up(fat_mass, 1)
        lean_mass_kg = round_half_up(subject.weight_kg - fat_mass, 1)

    logger.info(
        f"Body composition: bmi={bmi.kind}, body_fat={body_fat.kind}, "
        f"fat_mass={fat_mass_kg}kg, lean_mass={lean_mass_kg}kg"
    )

    return BodyCompositionReport(
        subject=subject,
        bmi=bmi,
        body_fat=body_fat,
        fat_mass_kg=fat_mass_kg,
        lean_mass_kg=lean_mass_kg,
    )


def build_bmi_history(
    history: list[WeighIn],
    height_cm: float | None,
) -> list[BMIHistoryPoint]:
    """
    Build the BMI-over-time series from the weigh-in history.

    Points are ordered by date ascending (oldest first, ready for charting).
    Entries whose BMI is not defined (no height, zero weight) are kept with
    bmi/classification set to None so the weight line stays complete.
    """
    points = []
    for entry in sorted(history, key=lambda h: h.date):
        result = compute_bmi(entry.weight_kg, height_cm)
        if result.kind == "ok":
            points.append(BMIHistoryPoint(
                date=entry.date,
                weight_kg=entry.weight_kg,
                bmi=result.value,
                classification=result.classification,
            ))
        else:
            points.append(BMIHistoryPoint(date=entry.date, weight_kg=entry.weight_kg))

    return points
