"""
Commission Processor - Request Orchestrator

Coordinates commission requests through discrete, testable steps.
"""

from typing import Any, Dict

from .calculators import CommissionCalculator
from .models import CommissionRequest, CommissionResult, CommissionType
from .output import OutputBuilder
from .validators import validate_amount, validate_rate


class CommissionProcessor:
    """
    Main orchestrator for commission requests.

    Implements a clear pipeline pattern:
    1. Resolve Rate (explicit > partner override > type default)
    2. Calculate Commission (flat or tiered)
    3. Split Commission (optional)
    4. Build Output
    """

    def __init__(self, calculator: CommissionCalculator | None = None):
        self.calculator = calculator or CommissionCalculator()
        self.output_builder = OutputBuilder()

    def process(self, request: CommissionRequest) -> CommissionResult:
        calculator = self.calculator

        # Steps 1-2: rate and commission
        if request.tiered:
            rate = None
            commission = calculator.calculate_tiered_commission(request.amount)
        elif request.rate is None and request.partner_id is not None:
            rate = calculator.resolve_partner_rate(request.partner_id, fallback=request.commission_type.default_rate)
            commission = calculator.calculate_commission(request.amount, request.commission_type, rate)
        else:
            rate = request.rate if request.rate is not None else request.commission_type.default_rate
            commission = calculator.calculate_commission(request.amount, request.commission_type, request.rate)

        # Step 3: optional split (percentages win over an even count)
        splits = []
        if request.split_percentages:
            splits = calculator.split_commission_custom(commission, request.split_percentages)
        elif request.split_count is not None:
            splits = calculator.split_commission(commission, request.split_count)

        return CommissionResult(
            commission_type=request.commission_type,
            amount=validate_amount(request.amount),
            rate=validate_rate(rate) if rate is not None else None,
            commission=commission,
            tiered=request.tiered,
            partner_id=request.partner_id,
            splits=splits,
        )

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a commission request from raw dictionary input.

        Convenience method for API usage.
        """
        request = CommissionRequest.from_dict(data)
        result = self.process(request)
        return self.output_builder.commission(result)

    @staticmethod
    def commission_types() -> list[dict]:
        return [
            {
                "type": commission_type.value,
                "default_rate": float(commission_type.default_rate) if commission_type.default_rate is not None else None,
                "description": commission_type.description,
            }
            for commission_type in CommissionType
        ]
