"""
Opportunity Stage Engine

Applies stage changes to opportunity records. Any recognised stage may follow
any other; the engine keeps probability, close marker and history consistent
rather than enforcing a workflow.
"""

import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable

from .models import Opportunity, ProbabilityPolicy, StageChange, StageHistoryEntry
from .stages import is_terminal_stage, parse_stage, stage_default_probability
from .validators import validate_actor


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StageEngine:
    """
    Produces the next opportunity state plus exactly one history entry.

    The input record is never mutated. Callers persist the returned record
    and entry together, one transition per opportunity at a time.
    """

    def __init__(
        self,
        policy: ProbabilityPolicy = ProbabilityPolicy.STAGE_DEFAULT,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.policy = ProbabilityPolicy(policy)
        self.clock = clock
        self.id_factory = id_factory

    def apply_stage_change(
        self,
        opportunity: Opportunity,
        new_stage,
        actor_id: str,
        note: str | None = None,
    ) -> StageChange:
        # Validate everything before building any new state
        stage = parse_stage(new_stage)
        validate_actor(actor_id)
        changed_at = self.clock()

        probability, overridden = self._next_probability(opportunity, stage)

        updated = replace(
            opportunity,
            stage=stage,
            probability=probability,
            probability_overridden=overridden,
            actual_close_date=changed_at if is_terminal_stage(stage) else None,
            updated_at=changed_at,
        )
        entry = StageHistoryEntry(
            entry_id=self.id_factory(),
            opportunity_id=opportunity.opportunity_id,
            previous_stage=opportunity.stage,
            new_stage=stage,
            actor_id=actor_id,
            changed_at=changed_at,
            note=note,
        )
        return StageChange(opportunity=updated, entry=entry)

    def opening_entry(self, opportunity: Opportunity, actor_id: str, note: str | None = None) -> StageHistoryEntry:
        """First history entry for a newly created opportunity."""
        validate_actor(actor_id)
        return StageHistoryEntry(
            entry_id=self.id_factory(),
            opportunity_id=opportunity.opportunity_id,
            previous_stage=None,
            new_stage=opportunity.stage,
            actor_id=actor_id,
            changed_at=opportunity.created_at or self.clock(),
            note=note,
        )

    def _next_probability(self, opportunity: Opportunity, stage) -> tuple[int, bool]:
        if self.policy is ProbabilityPolicy.PRESERVE_OVERRIDE and opportunity.probability_overridden:
            return opportunity.probability, True
        return stage_default_probability(stage), False
