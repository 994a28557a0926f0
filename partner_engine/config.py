"""
Runtime Configuration

All settings come from environment variables:

    ENVIRONMENT          dev, staging, prod (default: dev)
    PORT                 Flask port (default: 8080)
    LOG_LEVEL            logging level name (default: INFO)
    PROBABILITY_POLICY   stage_default or preserve_override (default: stage_default)
    PARTNER_RATES        JSON object of partner_id -> rate, replaces the default table
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

from .models import ProbabilityPolicy
from .partner_rates import DEFAULT_PARTNER_RATES, PartnerRateTable


@dataclass(frozen=True)
class Settings:
    environment: str = "dev"
    port: int = 8080
    log_level: str = "INFO"
    probability_policy: ProbabilityPolicy = ProbabilityPolicy.STAGE_DEFAULT
    partner_rates: PartnerRateTable = field(default_factory=PartnerRateTable)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        log_level = env.get("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Invalid LOG_LEVEL: {log_level}")

        raw_rates = env.get("PARTNER_RATES")
        rates = json.loads(raw_rates) if raw_rates else DEFAULT_PARTNER_RATES
        if not isinstance(rates, dict):
            raise ValueError("PARTNER_RATES must be a JSON object of partner_id -> rate")

        return cls(
            environment=env.get("ENVIRONMENT", "dev"),
            port=int(env.get("PORT", 8080)),
            log_level=log_level,
            probability_policy=ProbabilityPolicy(env.get("PROBABILITY_POLICY", ProbabilityPolicy.STAGE_DEFAULT.value)),
            partner_rates=PartnerRateTable(rates),
        )
