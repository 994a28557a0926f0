"""Tests for environment-driven settings."""

import json
from decimal import Decimal

import pytest

from partner_engine.config import Settings
from partner_engine.errors import InvalidRate
from partner_engine.models import ProbabilityPolicy


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.environment == "dev"
        assert settings.port == 8080
        assert settings.log_level == "INFO"
        assert settings.probability_policy is ProbabilityPolicy.STAGE_DEFAULT
        assert settings.partner_rates.rate_for("partner-premium-001") == Decimal("0.18")

    def test_reads_environment(self):
        settings = Settings.from_env({
            "ENVIRONMENT": "prod",
            "PORT": "9000",
            "LOG_LEVEL": "debug",
            "PROBABILITY_POLICY": "preserve_override",
        })

        assert settings.environment == "prod"
        assert settings.port == 9000
        assert settings.log_level == "DEBUG"
        assert settings.probability_policy is ProbabilityPolicy.PRESERVE_OVERRIDE

    def test_partner_rates_replace_defaults(self):
        settings = Settings.from_env({"PARTNER_RATES": json.dumps({"partner-gold": 0.2})})

        assert settings.partner_rates.rate_for("partner-gold") == Decimal("0.2")
        assert settings.partner_rates.rate_for("partner-premium-001") is None

    def test_invalid_partner_rate(self):
        with pytest.raises(InvalidRate):
            Settings.from_env({"PARTNER_RATES": json.dumps({"partner-gold": 2})})

    def test_partner_rates_must_be_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            Settings.from_env({"PARTNER_RATES": "[0.2]"})

    def test_invalid_policy(self):
        with pytest.raises(ValueError):
            Settings.from_env({"PROBABILITY_POLICY": "sometimes"})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="LOG_LEVEL"):
            Settings.from_env({"LOG_LEVEL": "LOUD"})
