"""
Output Builder

Turns engine results into JSON-safe API response dicts.
"""

from datetime import datetime
from decimal import Decimal

from .models import CommissionResult, Opportunity, PipelineSummary, StageChange, StageHistoryEntry
from .stages import PIPELINE_STAGES, is_terminal_stage, ordered_stages


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


class OutputBuilder:
    """Builds API response bodies."""

    def commission(self, result: CommissionResult) -> dict:
        output = {
            "commission_type": result.commission_type.value,
            "amount": to_money(result.amount),
            "rate": float(result.rate) if result.rate is not None else None,
            "tiered": result.tiered,
            "partner_id": result.partner_id,
            "commission": {
                "value": to_money(result.commission),
                "description": self._describe_commission(result),
            },
        }
        if result.splits:
            output["splits"] = [to_money(share) for share in result.splits]
        return output

    def _describe_commission(self, result: CommissionResult) -> str:
        if result.tiered:
            return f"Tiered commission on {_fmt(result.amount)} = {_fmt(result.commission)}"
        return f"{result.rate * 100:.2f}% × {_fmt(result.amount)} = {_fmt(result.commission)}"

    def opportunity(self, opp: Opportunity) -> dict:
        return {
            "id": opp.opportunity_id,
            "title": opp.title,
            "amount": to_money(opp.amount),
            "stage": opp.stage.value,
            "stage_name": PIPELINE_STAGES[opp.stage].name,
            "probability": opp.probability,
            "probability_overridden": opp.probability_overridden,
            "weighted_value": to_money(opp.weighted_value),
            "partner_id": opp.partner_id,
            "is_closed": is_terminal_stage(opp.stage),
            "actual_close_date": _iso(opp.actual_close_date),
            "created_at": _iso(opp.created_at),
            "updated_at": _iso(opp.updated_at),
        }

    def history_entry(self, entry: StageHistoryEntry) -> dict:
        return {
            "id": entry.entry_id,
            "opportunity_id": entry.opportunity_id,
            "previous_stage": entry.previous_stage.value if entry.previous_stage else None,
            "new_stage": entry.new_stage.value,
            "actor_id": entry.actor_id,
            "note": entry.note,
            "changed_at": _iso(entry.changed_at),
        }

    def stage_change(self, change: StageChange) -> dict:
        return {
            "opportunity": self.opportunity(change.opportunity),
            "history_entry": self.history_entry(change.entry),
        }

    def pipeline_summary(self, summary: PipelineSummary) -> dict:
        return {
            "stages": [
                {
                    "stage": row.stage.value,
                    "name": PIPELINE_STAGES[row.stage].name,
                    "count": row.count,
                    "total_value": to_money(row.total_value),
                    "weighted_value": to_money(row.weighted_value),
                }
                for row in summary.stages
            ],
            "total_opportunities": summary.total_opportunities,
            "total_value": to_money(summary.total_value),
            "total_weighted_value": to_money(summary.total_weighted_value),
            "open_weighted_value": to_money(summary.open_weighted_value),
        }

    def stages(self) -> list[dict]:
        return [
            {
                "stage": config.stage.value,
                "name": config.name,
                "order": config.order,
                "probability": config.probability,
                "is_terminal": is_terminal_stage(config.stage),
            }
            for config in ordered_stages()
        ]
