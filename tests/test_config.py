"""
Tests for the Settings object (environment overrides).
"""

import pytest
from pydantic import ValidationError

from nutricoach.core.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        for name in ("BMI_CLASSIFICATION_STANDARD", "SKINFOLD_MISSING_POLICY"):
            monkeypatch.delenv(name, raising=False)
        config = Settings(_env_file=None)

        assert config.BMI_CLASSIFICATION_STANDARD == "legacy"
        assert config.SKINFOLD_MISSING_POLICY == "require_all"
        assert config.BODY_FAT_PLAUSIBLE_MIN == 2.0
        assert config.BODY_FAT_PLAUSIBLE_MAX == 65.0

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("SKINFOLD_MISSING_POLICY", "zero")
        monkeypatch.setenv("BODY_FAT_PLAUSIBLE_MAX", "60")
        config = Settings(_env_file=None)

        assert config.SKINFOLD_MISSING_POLICY == "zero"
        assert config.BODY_FAT_PLAUSIBLE_MAX == 60.0

    def test_unknown_standard_is_rejected(self, monkeypatch):
        monkeypatch.setenv("BMI_CLASSIFICATION_STANDARD", "asian")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)
