"""
Error Taxonomy for the Partnership Engine

Every validation failure raised by the calculators and the stage engine is an
EngineError. EngineError subclasses ValueError so the API layers can keep
treating it as a validation failure (HTTP 400).
"""


class EngineError(ValueError):
    """Base class for all local validation failures."""

    code = "engine_error"


class InvalidAmount(EngineError):
    code = "invalid_amount"


class InfiniteAmount(EngineError):
    code = "infinite_amount"


class NegativeAmount(EngineError):
    code = "negative_amount"


class InvalidRate(EngineError):
    code = "invalid_rate"


class InvalidProbability(EngineError):
    code = "invalid_probability"


class InvalidSplitPercentages(EngineError):
    code = "invalid_split_percentages"


class InvalidPartnerCount(EngineError):
    code = "invalid_partner_count"


class InvalidTierSchedule(EngineError):
    code = "invalid_tier_schedule"


class InvalidActor(EngineError):
    code = "invalid_actor"


class UnknownStage(EngineError):
    code = "unknown_stage"


class OpportunityNotFound(LookupError):
    """Raised by repositories when an opportunity id is unknown."""

    code = "not_found"
