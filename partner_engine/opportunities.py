"""
Opportunity Service

Coordinates validated requests, the stage engine and the repository. This is
the layer that logs; the engine and calculators stay silent.
"""

import logging
import uuid
from dataclasses import replace

from .errors import InvalidProbability
from .models import (
    Opportunity,
    OpportunityCreateRequest,
    PipelineSummary,
    StageChange,
    StageChangeRequest,
    StageHistoryEntry,
)
from .pipeline import summarize_pipeline
from .repository import OpportunityRepository
from .stage_engine import StageEngine
from .stages import parse_stage, stage_default_probability
from .validators import validate_amount, validate_probability

logger = logging.getLogger(__name__)


def _whole_probability(probability) -> int:
    value = validate_probability(probability)
    if value != value.to_integral_value():
        raise InvalidProbability(f"Probability must be a whole number, got: {probability}")
    return int(value)


class OpportunityService:
    """CRUD and stage operations over an injected repository."""

    def __init__(self, repository: OpportunityRepository, engine: StageEngine | None = None):
        self.repository = repository
        self.engine = engine or StageEngine()

    def create(self, request: OpportunityCreateRequest, actor_id: str) -> Opportunity:
        """
        Create an opportunity and write its opening history entry.

        An explicit probability counts as a manual override; otherwise the
        stage default applies.
        """
        stage = parse_stage(request.stage)
        if request.probability is None:
            probability, overridden = stage_default_probability(stage), False
        else:
            probability, overridden = _whole_probability(request.probability), True

        now = self.engine.clock()
        opportunity = Opportunity(
            opportunity_id=str(uuid.uuid4()),
            title=request.title,
            amount=validate_amount(request.amount),
            stage=stage,
            probability=probability,
            probability_overridden=overridden,
            partner_id=request.partner_id,
            created_at=now,
            updated_at=now,
        )
        entry = self.engine.opening_entry(opportunity, actor_id)
        self.repository.add(opportunity, entry)

        logger.info(f"Created opportunity {opportunity.opportunity_id} at stage {stage.value}")
        return opportunity

    def get(self, opportunity_id: str) -> Opportunity:
        return self.repository.get(opportunity_id)

    def list(self) -> list[Opportunity]:
        return self.repository.list()

    def change_stage(self, opportunity_id: str, request: StageChangeRequest) -> StageChange:
        with self.repository.transaction():
            current = self.repository.get(opportunity_id)
            change = self.engine.apply_stage_change(current, request.stage, request.actor_id, request.note)
            self.repository.commit_stage_change(change.opportunity, change.entry)

        logger.info(
            f"Opportunity {opportunity_id}: {current.stage.value} -> "
            f"{change.opportunity.stage.value} by {request.actor_id}"
        )
        return change

    def override_probability(self, opportunity_id: str, probability) -> Opportunity:
        """Set a manual probability; kept across stage changes only under PRESERVE_OVERRIDE."""
        value = _whole_probability(probability)
        with self.repository.transaction():
            current = self.repository.get(opportunity_id)
            updated = replace(
                current,
                probability=value,
                probability_overridden=True,
                updated_at=self.engine.clock(),
            )
            self.repository.update(updated)

        logger.info(f"Opportunity {opportunity_id}: probability overridden to {value}")
        return updated

    def update_amount(self, opportunity_id: str, amount) -> Opportunity:
        value = validate_amount(amount)
        with self.repository.transaction():
            current = self.repository.get(opportunity_id)
            updated = replace(current, amount=value, updated_at=self.engine.clock())
            self.repository.update(updated)

        logger.info(f"Opportunity {opportunity_id}: amount updated to {value}")
        return updated

    def history(self, opportunity_id: str) -> tuple[StageHistoryEntry, ...]:
        return self.repository.history(opportunity_id)

    def pipeline_summary(self) -> PipelineSummary:
        return summarize_pipeline(self.repository.list())
