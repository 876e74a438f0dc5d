"""
Patient Roster Assessment Service
===================================
Runs the BMI and body fat calculators over a whole patient list held in a
pandas DataFrame (one row per patient), e.g. the professional's roster export.

IMPORTANT NOTES:
  - Values come from hand-filled forms, so numeric cells are cleaned first:
    NaN, "", "NA", "-", "*" etc. mean "not measured" (None, NOT 0.0),
    and a comma decimal separator ("12,5") is accepted.
  - Negative values are NOT fixed up here; they reach the calculators and are
    reported as "invalid" for that row.
  - A bad row never aborts the batch: every input row gets a result row.
  - Only a structurally unusable frame (missing required columns) raises.

Expected columns:
  age_years, sex, weight_kg, height_cm           (required)
  skinfold_chest, skinfold_mid_axillary, skinfold_triceps, skinfold_subscapular,
  skinfold_abdominal, skinfold_suprailiac, skinfold_thigh   (optional)

Appended columns:
  bmi, bmi_classification, bmi_status, bmi_detail,
  body_fat_percent, body_fat_status, body_fat_warning, body_fat_detail
"""

import logging
import math

import pandas as pd

from nutricoach.schemas import Sex, SkinfoldMeasurements
from nutricoach.services.bmi import compute_bmi
from nutricoach.services.body_fat import POLLOCK_7_SITES, compute_body_fat_percent

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["age_years", "sex", "weight_kg", "height_cm"]

# Map roster columns to SkinfoldMeasurements fields
SKINFOLD_COLUMNS = {f"skinfold_{site}": site for site in POLLOCK_7_SITES}

RESULT_COLUMNS = [
    "bmi",
    "bmi_classification",
    "bmi_status",
    "bmi_detail",
    "body_fat_percent",
    "body_fat_status",
    "body_fat_warning",
    "body_fat_detail",
]

# Values that mean "not measured" in a hand-filled form
NON_NUMERIC_PLACEHOLDERS = {"NA", "na", "N/A", "n/a", "-", "--", "*", ".."}

# Sex labels as typed in English or Portuguese forms
SEX_ALIASES = {
    "m": Sex.MALE,
    "male": Sex.MALE,
    "masculino": Sex.MALE,
    "f": Sex.FEMALE,
    "female": Sex.FEMALE,
    "feminino": Sex.FEMALE,
    "other": Sex.OTHER,
    "outro": Sex.OTHER,
}


def clean_numeric_value(value) -> float | None:
    """
    Convert a potentially messy form value to a float.

    Handles these cases:
      - Already a number: return as float
      - NaN / None / empty string / placeholder: return None (not measured)
      - String with comma decimal separator: replace comma with dot
      - Any other unparseable or non-finite value: log and return None
    """
    if value is None or pd.isna(value):
        return None

    str_value = str(value).strip()
    if str_value in NON_NUMERIC_PLACEHOLDERS or str_value == "":
        return None

    # Handle comma as decimal separator (e.g., "12,5" -> "12.5")
    str_value = str_value.replace(",", ".")

    try:
        result = float(str_value)
    except (ValueError, TypeError):
        logger.warning(f"Could not parse measurement value: '{value}' -> treating as missing")
        return None

    if not math.isfinite(result):
        logger.warning(f"Non-finite measurement value: '{value}' -> treating as missing")
        return None
    return result


def normalize_sex(value) -> Sex:
    """
    Map a free-text sex label to Sex.
    Blank or unrecognised labels become Sex.OTHER, like a profile saved without one.
    """
    if value is None or pd.isna(value):
        return Sex.OTHER

    label = str(value).strip()
    if label.upper() in Sex.__members__:
        return Sex[label.upper()]

    sex = SEX_ALIASES.get(label.lower())
    if sex is None:
        logger.warning(f"Unrecognised sex label '{value}' -> treating as OTHER")
        return Sex.OTHER
    return sex


def _assess_row(
    record: dict,
    precision: int,
    missing_policy: str | None,
) -> dict:
    """Run both calculators on one roster row and flatten the outcomes."""
    weight_kg = clean_numeric_value(record.get("weight_kg"))
    height_cm = clean_numeric_value(record.get("height_cm"))
    age = clean_numeric_value(record.get("age_years"))
    sex = normalize_sex(record.get("sex"))

    row = dict.fromkeys(RESULT_COLUMNS)

    bmi = compute_bmi(weight_kg, height_cm)
    row["bmi_status"] = bmi.kind
    if bmi.kind == "ok":
        row["bmi"] = bmi.value
        row["bmi_classification"] = bmi.classification
    elif bmi.kind == "undefined":
        row["bmi_detail"] = bmi.detail
    else:
        row["bmi_detail"] = bmi.message

    if age is None:
        row["body_fat_status"] = "undefined"
        row["body_fat_detail"] = "Age is required to estimate body fat."
        return row

    # model_construct skips pydantic validation so negative readings reach the
    # calculator and come back as an "invalid" outcome instead of raising
    skinfolds = SkinfoldMeasurements.model_construct(**{
        site: clean_numeric_value(record.get(column))
        for column, site in SKINFOLD_COLUMNS.items()
    })

    body_fat = compute_body_fat_percent(
        skinfolds,
        int(age),
        sex,
        precision=precision,
        missing_policy=missing_policy,
    )
    row["body_fat_status"] = body_fat.kind
    if body_fat.kind == "ok":
        row["body_fat_percent"] = body_fat.value
        if body_fat.warning is not None:
            row["body_fat_warning"] = body_fat.warning.message
    elif body_fat.kind == "undefined":
        row["body_fat_detail"] = body_fat.detail
    else:
        row["body_fat_detail"] = body_fat.message

    return row


def assess_roster(
    df: pd.DataFrame,
    precision: int = 1,
    missing_policy: str | None = None,
) -> pd.DataFrame:
    """
    Assess every patient of a roster DataFrame.

    Processing Steps:
      1. Clean column names (strip whitespace)
      2. Verify the required columns exist
      3. For each row: clean values, compute BMI and body fat %
      4. Append the result columns (same index and row order as the input)

    Args:
        df: One row per patient (see module docstring for the columns)
        precision: Decimal places of body_fat_percent, 1 (default) or 2
        missing_policy: Override for settings.SKINFOLD_MISSING_POLICY

    Returns:
        A new DataFrame: the input columns plus the result columns

    Raises:
        ValueError: If a required column is missing
    """
    df = df.copy()
    df.columns = [str(col).strip() for col in df.columns]

    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        raise ValueError(
            f"Roster is missing required columns: {missing_columns}. "
            f"Available columns: {list(df.columns)}"
        )

    absent_sites = [col for col in SKINFOLD_COLUMNS if col not in df.columns]
    if absent_sites:
        logger.info(f"Roster has no columns for skinfold sites: {absent_sites}")

    results = [
        _assess_row(record, precision, missing_policy)
        for record in df.to_dict(orient="records")
    ]
    results_df = pd.DataFrame(results, index=df.index, columns=RESULT_COLUMNS)

    ok_bmi = int((results_df["bmi_status"] == "ok").sum())
    ok_fat = int((results_df["body_fat_status"] == "ok").sum())
    logger.info(
        f"Roster assessed: {len(df)} patients, "
        f"{ok_bmi} with BMI, {ok_fat} with body fat estimate"
    )

    return pd.concat([df, results_df], axis=1)
