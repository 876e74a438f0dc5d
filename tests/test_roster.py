"""
Tests for the Patient Roster Assessment Service
=================================================
Uses small in-memory DataFrames shaped like a hand-filled patient list.
"""

import math

import pandas as pd
import pytest

from nutricoach.schemas import Sex
from nutricoach.services.roster import (
    RESULT_COLUMNS,
    assess_roster,
    clean_numeric_value,
    normalize_sex,
)

SITES = ["chest", "mid_axillary", "triceps", "subscapular", "abdominal", "suprailiac", "thigh"]


def _patient(age, sex, weight, height, skinfold=None, **overrides) -> dict:
    """Build one roster row with every skinfold site set to `skinfold`."""
    row = {"age_years": age, "sex": sex, "weight_kg": weight, "height_cm": height}
    for site in SITES:
        row[f"skinfold_{site}"] = skinfold
    row.update(overrides)
    return row


# ── Unit Tests for the cleaners ─────────────────────────────────

class TestCleanNumericValue:

    def test_number(self):
        assert clean_numeric_value(12.5) == 12.5
        assert clean_numeric_value(7) == 7.0

    def test_comma_decimal(self):
        assert clean_numeric_value("12,5") == 12.5

    def test_whitespace(self):
        assert clean_numeric_value(" 80 ") == 80.0

    @pytest.mark.parametrize("value", [None, math.nan, "", "  ", "NA", "-", "*", ".."])
    def test_not_measured(self, value):
        assert clean_numeric_value(value) is None

    def test_garbage_is_missing(self):
        assert clean_numeric_value("twelve") is None

    def test_infinity_is_missing(self):
        assert clean_numeric_value("inf") is None

    def test_negative_is_kept(self):
        """Negative readings are reported by the calculators, not fixed up here."""
        assert clean_numeric_value("-3") == -3.0


class TestNormalizeSex:

    @pytest.mark.parametrize("label", ["M", "male", "Masculino", "MALE", " m "])
    def test_male(self, label):
        assert normalize_sex(label) is Sex.MALE

    @pytest.mark.parametrize("label", ["F", "female", "Feminino", "FEMALE"])
    def test_female(self, label):
        assert normalize_sex(label) is Sex.FEMALE

    @pytest.mark.parametrize("label", ["Outro", "other", "x", None, math.nan])
    def test_other(self, label):
        assert normalize_sex(label) is Sex.OTHER


# ── Tests for assess_roster ─────────────────────────────────────

class TestAssessRoster:

    def test_complete_rows(self):
        df = pd.DataFrame([
            _patient(30, "M", 80, 180, 10),
            _patient("30", "Feminino", "62,5", "165", "10,0"),
        ])
        result = assess_roster(df)

        assert list(result.columns[-len(RESULT_COLUMNS):]) == RESULT_COLUMNS

        male = result.iloc[0]
        assert male["bmi"] == 24.7
        assert male["bmi_classification"] == "Normal weight"
        assert male["bmi_status"] == "ok"
        assert male["body_fat_percent"] == 10.2
        assert male["body_fat_status"] == "ok"

        female = result.iloc[1]
        assert female["bmi"] == 23.0
        assert female["body_fat_percent"] == 15.7

    def test_bad_rows_are_reported_not_dropped(self):
        df = pd.DataFrame([
            _patient(40, "male", 70, "-", 12, skinfold_triceps=-3),
            _patient(math.nan, "F", 60, 160, 12),
            _patient(25, "Outro", 60, 160, 12),
        ])
        result = assess_roster(df)
        assert len(result) == 3

        no_height = result.iloc[0]
        assert no_height["bmi_status"] == "undefined"
        assert pd.isna(no_height["bmi"])
        assert no_height["body_fat_status"] == "invalid"
        assert "triceps" in no_height["body_fat_detail"]

        no_age = result.iloc[1]
        assert no_age["bmi_status"] == "ok"
        assert no_age["body_fat_status"] == "undefined"
        assert "Age is required" in no_age["body_fat_detail"]

        other = result.iloc[2]
        assert other["body_fat_status"] == "undefined"
        assert "MALE and FEMALE" in other["body_fat_detail"]

    def test_implausible_value_has_warning(self):
        df = pd.DataFrame([_patient(30, "M", 80, 180, 150)])
        result = assess_roster(df)

        assert result.iloc[0]["body_fat_status"] == "ok"
        assert result.iloc[0]["body_fat_percent"] < 0
        assert "plausible range" in result.iloc[0]["body_fat_warning"]

    def test_missing_skinfold_columns(self):
        """A roster without caliper columns still gets BMI for every patient."""
        df = pd.DataFrame([{"age_years": 30, "sex": "M", "weight_kg": 90, "height_cm": 170}])
        result = assess_roster(df)

        assert result.iloc[0]["bmi"] == 31.1
        assert result.iloc[0]["bmi_classification"] == "Obesity"
        assert result.iloc[0]["body_fat_status"] == "undefined"

    def test_zero_policy_and_precision(self):
        df = pd.DataFrame([_patient(30, "M", 80, 180, 10, skinfold_chest=None)])

        strict = assess_roster(df)
        assert strict.iloc[0]["body_fat_status"] == "undefined"

        lenient = assess_roster(df, precision=2, missing_policy="zero")
        assert lenient.iloc[0]["body_fat_status"] == "ok"
        assert lenient.iloc[0]["body_fat_percent"] > 0

    def test_column_names_are_stripped_and_index_kept(self):
        df = pd.DataFrame(
            [{" age_years": 30, "sex ": "M", " weight_kg ": 70, "height_cm": 170}],
            index=["patient-1"],
        )
        result = assess_roster(df)

        assert list(result.index) == ["patient-1"]
        assert "age_years" in result.columns
        assert result.loc["patient-1", "bmi"] == 24.2

    def test_input_frame_is_not_modified(self):
        df = pd.DataFrame([_patient(30, "M", 80, 180, 10)])
        columns_before = list(df.columns)
        assess_roster(df)
        assert list(df.columns) == columns_before

    def test_missing_required_column_raises(self):
        df = pd.DataFrame([{"age_years": 30, "weight_kg": 70, "height_cm": 170}])
        with pytest.raises(ValueError, match="missing required columns"):
            assess_roster(df)

    def test_empty_roster(self):
        df = pd.DataFrame(columns=["age_years", "sex", "weight_kg", "height_cm"])
        result = assess_roster(df)
        assert len(result) == 0
        assert set(RESULT_COLUMNS) <= set(result.columns)
