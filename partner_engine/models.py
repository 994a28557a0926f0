"""
Domain Models for the Partnership Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

# =============================================================================
# ENUMERATIONS
# =============================================================================


class CommissionType(str, Enum):
    """Partnership commission types and their standard rates."""

    REFERRAL = "referral"
    RESELLER = "reseller"
    MSP = "msp"
    CUSTOM = "custom"

    @property
    def default_rate(self) -> Decimal | None:
        # Custom commissions only ever use a caller-supplied rate
        return _DEFAULT_RATES.get(self)

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DEFAULT_RATES = {
    CommissionType.REFERRAL: Decimal("0.15"),
    CommissionType.RESELLER: Decimal("0.30"),
    CommissionType.MSP: Decimal("0.25"),
}

_DESCRIPTIONS = {
    CommissionType.REFERRAL: "One-time referral commission",
    CommissionType.RESELLER: "Reseller margin-based commission",
    CommissionType.MSP: "Managed service provider ongoing commission",
    CommissionType.CUSTOM: "Custom commission structure",
}


class PipelineStage(str, Enum):
    """Named phases of an opportunity, in pipeline order."""

    LEAD = "lead"
    DEMO = "demo"
    POC = "poc"
    PROPOSAL = "proposal"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"


class ProbabilityPolicy(str, Enum):
    """What happens to a stored probability when the stage changes."""

    STAGE_DEFAULT = "stage_default"  # always reset to the stage default
    PRESERVE_OVERRIDE = "preserve_override"  # keep manual overrides


# =============================================================================
# COMMISSION MODELS
# =============================================================================


@dataclass(frozen=True)
class CommissionTier:
    """A single bracket in a progressive commission schedule."""

    lower_bound: Decimal
    upper_bound: Decimal | None  # None = infinite
    rate: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "CommissionTier":
        upper = data.get("upper_bound")
        return cls(
            lower_bound=Decimal(str(data["lower_bound"])),
            upper_bound=Decimal(str(upper)) if upper is not None else None,
            rate=Decimal(str(data["rate"])),
        )


@dataclass
class CommissionRequest:
    """A commission calculation request as received from the API."""

    amount: Decimal
    commission_type: CommissionType = CommissionType.REFERRAL
    rate: Decimal | None = None
    partner_id: str | None = None
    tiered: bool = False
    split_count: int | None = None
    split_percentages: list[Decimal] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "CommissionRequest":
        rate = data.get("rate")
        split_count = data.get("split_count")
        if split_count is not None and (isinstance(split_count, bool) or not isinstance(split_count, int)):
            raise TypeError(f"split_count must be an integer, got: {split_count!r}")
        return cls(
            # Raw values are kept; the calculators validate them
            amount=data["amount"],
            commission_type=CommissionType(data.get("commission_type", CommissionType.REFERRAL.value)),
            rate=rate,
            partner_id=data.get("partner_id"),
            tiered=bool(data.get("tiered", False)),
            split_count=split_count,
            split_percentages=list(data.get("split_percentages") or []),
        )


@dataclass
class CommissionResult:
    """Outcome of a processed commission request."""

    commission_type: CommissionType
    amount: Decimal
    rate: Decimal | None
    commission: Decimal
    tiered: bool = False
    partner_id: str | None = None
    splits: list[Decimal] = field(default_factory=list)


# =============================================================================
# OPPORTUNITY MODELS
# =============================================================================


@dataclass(frozen=True)
class Opportunity:
    """An opportunity record, as far as the stage engine cares."""

    opportunity_id: str
    title: str
    amount: Decimal
    stage: PipelineStage
    probability: int
    probability_overridden: bool = False
    partner_id: str | None = None
    actual_close_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def weighted_value(self) -> Decimal:
        """Amount scaled by win probability; always derived, never stored."""
        return self.amount * self.probability / Decimal(100)


@dataclass(frozen=True)
class StageHistoryEntry:
    """Immutable audit record for one accepted stage transition."""

    entry_id: str
    opportunity_id: str
    previous_stage: PipelineStage | None  # None = opening entry
    new_stage: PipelineStage
    actor_id: str
    changed_at: datetime
    note: str | None = None


@dataclass(frozen=True)
class StageChange:
    """The updated record and its history entry, produced together."""

    opportunity: Opportunity
    entry: StageHistoryEntry


@dataclass
class OpportunityCreateRequest:
    title: str
    amount: Decimal
    stage: str = PipelineStage.LEAD.value
    probability: int | None = None
    partner_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "OpportunityCreateRequest":
        title = data["title"]
        if not isinstance(title, str) or not title.strip():
            raise ValueError("title must be a non-empty string")
        return cls(
            title=title,
            amount=data["amount"],
            stage=data.get("stage", PipelineStage.LEAD.value),
            probability=data.get("probability"),
            partner_id=data.get("partner_id"),
        )


@dataclass
class StageChangeRequest:
    stage: str
    actor_id: str
    note: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "StageChangeRequest":
        note = data.get("note")
        if note is not None and not isinstance(note, str):
            raise TypeError(f"note must be a string, got: {note!r}")
        return cls(stage=data["stage"], actor_id=data["actor_id"], note=note)


# =============================================================================
# PIPELINE MODELS
# =============================================================================


@dataclass
class StageBreakdown:
    stage: PipelineStage
    count: int = 0
    total_value: Decimal = Decimal("0")
    weighted_value: Decimal = Decimal("0")


@dataclass
class PipelineSummary:
    """Forecast view of the pipeline, one breakdown per stage."""

    stages: list[StageBreakdown]
    total_opportunities: int = 0
    total_value: Decimal = Decimal("0")
    total_weighted_value: Decimal = Decimal("0")
    open_weighted_value: Decimal = Decimal("0")
