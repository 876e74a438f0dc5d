"""
Pydantic V2 Schemas (Inputs and Calculation Results)
=====================================================
These schemas define the shape of data that flows in and out of the
anthropometric calculators.

Naming Convention:
  - Subject / SkinfoldMeasurements / WeighIn : measurement inputs
  - *Result                                  : a successfully computed value
  - UndefinedInput                           : "no result" (data not entered yet)
  - InputValidationError                     : malformed input (e.g. negative mm)

Results are tagged by their `kind` field ("ok", "undefined", "invalid") so a
caller can branch on `result.kind` without isinstance checks.
"""

import datetime
import enum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


# ============================================================
# INPUT SCHEMAS
# ============================================================

class Sex(str, enum.Enum):
    """Biological sex as recorded on the patient profile."""
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"  # No Jackson-Pollock coefficient set exists for this category


class Subject(BaseModel):
    """
    The person being measured.
    Weight and height are optional because new patient profiles routinely
    lack them; negative values are rejected here at the boundary.
    """
    age_years: int = Field(..., ge=0, description="Age in whole years")
    sex: Sex = Field(..., description="MALE, FEMALE or OTHER")
    weight_kg: float | None = Field(default=None, ge=0, description="Body weight in kilograms")
    height_cm: float | None = Field(default=None, ge=0, description="Height in centimeters")


class SkinfoldMeasurements(BaseModel):
    """
    Caliper readings in millimeters. Any site may be unset (None).

    Only the 7 Pollock sites enter the body fat estimate. Biceps, supraspinale
    and calf are collected by the patient form for other protocols and are
    ignored by the 7-site sum.
    """
    # Pollock 7-site protocol
    chest: float | None = Field(default=None, ge=0)
    mid_axillary: float | None = Field(default=None, ge=0)
    triceps: float | None = Field(default=None, ge=0)
    subscapular: float | None = Field(default=None, ge=0)
    abdominal: float | None = Field(default=None, ge=0)
    suprailiac: float | None = Field(default=None, ge=0)
    thigh: float | None = Field(default=None, ge=0)

    # Collected elsewhere, not part of the 7-site sum
    biceps: float | None = Field(default=None, ge=0)
    supraspinale: float | None = Field(default=None, ge=0)
    calf: float | None = Field(default=None, ge=0)


class WeighIn(BaseModel):
    """A single entry of the patient's weight history."""
    date: datetime.date
    weight_kg: float = Field(..., ge=0)


# ============================================================
# RESULT SCHEMAS
# ============================================================

class UndefinedInput(BaseModel):
    """
    Typed "no result": a required measurement is absent, or the formula is not
    defined for the input (e.g. sex OTHER). This is an expected case, not an error.
    """
    kind: Literal["undefined"] = "undefined"
    reason: str = Field(description="Short machine-readable code, e.g. 'missing_height'")
    detail: str = Field(description="Human-readable explanation")


class InputValidationError(BaseModel):
    """Malformed input that was rejected instead of being computed against."""
    kind: Literal["invalid"] = "invalid"
    field: str
    value: float | None = None
    message: str


class BMIResult(BaseModel):
    """Body Mass Index rounded to one decimal, with its classification band."""
    kind: Literal["ok"] = "ok"
    value: float
    classification: str


class PlausibilityWarning(BaseModel):
    """
    Raised alongside a computed body fat % that falls outside the plausible
    human range. The number is still reported, never clamped.
    """
    code: Literal["out_of_plausible_range"] = "out_of_plausible_range"
    message: str
    lower: float
    upper: float


class BodyFatResult(BaseModel):
    """Jackson-Pollock 7-site body fat estimate (Siri conversion)."""
    kind: Literal["ok"] = "ok"
    value: float = Field(description="Body fat percentage (e.g. 15.5 means 15.5%)")
    precision: int = Field(description="Decimal places used when rounding `value`")
    sum_of_skinfolds: float = Field(description="Sum of the 7 sites in mm")
    body_density: float = Field(description="Estimated body density in g/cm³")
    warning: PlausibilityWarning | None = None


BMIOutcome = Annotated[
    BMIResult | UndefinedInput | InputValidationError,
    Field(discriminator="kind"),
]

BodyFatOutcome = Annotated[
    BodyFatResult | UndefinedInput | InputValidationError,
    Field(discriminator="kind"),
]


# ============================================================
# COMPOSITION SCHEMAS
# ============================================================

class BodyCompositionReport(BaseModel):
    """
    BMI and body fat computed from the same Subject + SkinfoldMeasurements,
    presented together. Fat/lean mass are only filled when both weight and
    body fat % are known.
    """
    subject: Subject
    bmi: BMIOutcome
    body_fat: BodyFatOutcome
    fat_mass_kg: float | None = None
    lean_mass_kg: float | None = None


class BMIHistoryPoint(BaseModel):
    """One point of the BMI-over-time chart."""
    date: datetime.date
    weight_kg: float
    bmi: float | None = None
    classification: str | None = None
