from datetime import datetime, timezone
from decimal import Decimal
from itertools import count

import pytest

from partner_engine import InMemoryOpportunityRepository, OpportunityService, StageEngine
from partner_engine.models import Opportunity, PipelineStage, ProbabilityPolicy

FIXED_NOW = datetime(2026, 1, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def sequential_ids():
    counter = count(1)
    return lambda: f"entry-{next(counter)}"


@pytest.fixture
def engine(fixed_clock, sequential_ids):
    return StageEngine(clock=fixed_clock, id_factory=sequential_ids)


@pytest.fixture
def preserving_engine(fixed_clock, sequential_ids):
    return StageEngine(
        policy=ProbabilityPolicy.PRESERVE_OVERRIDE,
        clock=fixed_clock,
        id_factory=sequential_ids,
    )


@pytest.fixture
def repository():
    return InMemoryOpportunityRepository()


@pytest.fixture
def service(repository, engine):
    return OpportunityService(repository, engine)


def make_opportunity(
    stage=PipelineStage.LEAD,
    amount="100000",
    probability=None,
    overridden=False,
    opportunity_id="opp-1",
) -> Opportunity:
    stage = PipelineStage(stage)
    defaults = {
        PipelineStage.LEAD: 10,
        PipelineStage.DEMO: 25,
        PipelineStage.POC: 50,
        PipelineStage.PROPOSAL: 75,
        PipelineStage.CLOSED_WON: 100,
        PipelineStage.CLOSED_LOST: 0,
    }
    return Opportunity(
        opportunity_id=opportunity_id,
        title="Acme Cloud Migration",
        amount=Decimal(amount),
        stage=stage,
        probability=defaults[stage] if probability is None else probability,
        probability_overridden=overridden,
        created_at=FIXED_NOW,
        updated_at=FIXED_NOW,
    )
