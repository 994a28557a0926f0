"""
Pipeline Summary

Forecast view over a set of opportunities: count, value and weighted value
per stage, plus totals.
"""

from decimal import Decimal
from typing import Iterable

from .models import Opportunity, PipelineSummary, StageBreakdown
from .stages import ACTIVE_STAGES, ordered_stages


def summarize_pipeline(opportunities: Iterable[Opportunity]) -> PipelineSummary:
    """
    Build a PipelineSummary. Every stage appears, in pipeline order, even
    when it holds no opportunities.
    """
    breakdowns = {config.stage: StageBreakdown(stage=config.stage) for config in ordered_stages()}

    for opp in opportunities:
        row = breakdowns[opp.stage]
        row.count += 1
        row.total_value += opp.amount
        row.weighted_value += opp.weighted_value

    stages = list(breakdowns.values())
    return PipelineSummary(
        stages=stages,
        total_opportunities=sum(row.count for row in stages),
        total_value=sum((row.total_value for row in stages), Decimal("0")),
        total_weighted_value=sum((row.weighted_value for row in stages), Decimal("0")),
        open_weighted_value=sum(
            (row.weighted_value for row in stages if row.stage in ACTIVE_STAGES), Decimal("0")
        ),
    )
