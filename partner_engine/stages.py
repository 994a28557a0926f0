"""
Pipeline Stage Configuration

Fixed ordering, default win probability and display name for every stage.
"""

from dataclasses import dataclass

from .errors import UnknownStage
from .models import PipelineStage


@dataclass(frozen=True)
class StageConfig:
    stage: PipelineStage
    order: int
    probability: int
    name: str


PIPELINE_STAGES = {
    PipelineStage.LEAD: StageConfig(PipelineStage.LEAD, 1, 10, "Lead"),
    PipelineStage.DEMO: StageConfig(PipelineStage.DEMO, 2, 25, "Demo"),
    PipelineStage.POC: StageConfig(PipelineStage.POC, 3, 50, "POC"),
    PipelineStage.PROPOSAL: StageConfig(PipelineStage.PROPOSAL, 4, 75, "Proposal"),
    PipelineStage.CLOSED_WON: StageConfig(PipelineStage.CLOSED_WON, 5, 100, "Closed Won"),
    PipelineStage.CLOSED_LOST: StageConfig(PipelineStage.CLOSED_LOST, 6, 0, "Closed Lost"),
}

ACTIVE_STAGES = (
    PipelineStage.LEAD,
    PipelineStage.DEMO,
    PipelineStage.POC,
    PipelineStage.PROPOSAL,
)

CLOSED_STAGES = (PipelineStage.CLOSED_WON, PipelineStage.CLOSED_LOST)


def parse_stage(value) -> PipelineStage:
    """Resolve a stage from a PipelineStage or its string value."""
    if isinstance(value, PipelineStage):
        return value
    if isinstance(value, str):
        try:
            return PipelineStage(value)
        except ValueError:
            pass
    raise UnknownStage(
        f"Unknown stage: {value!r}. Must be one of: "
        + ", ".join(stage.value for stage in PipelineStage)
    )


def stage_default_probability(stage) -> int:
    return PIPELINE_STAGES[parse_stage(stage)].probability


def is_terminal_stage(stage) -> bool:
    """Closed stages end the pipeline; the engine still accepts moves out of them."""
    return parse_stage(stage) in CLOSED_STAGES


def ordered_stages() -> list[StageConfig]:
    return sorted(PIPELINE_STAGES.values(), key=lambda config: config.order)
