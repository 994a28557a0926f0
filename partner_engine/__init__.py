"""
PARTNERSHIP ENGINE
Commission calculation and opportunity stage bookkeeping
"""

from .calculators import CommissionCalculator
from .models import CommissionType, Opportunity, PipelineStage, ProbabilityPolicy
from .opportunities import OpportunityService
from .processor import CommissionProcessor
from .repository import InMemoryOpportunityRepository
from .stage_engine import StageEngine

__all__ = [
    'CommissionCalculator',
    'CommissionProcessor',
    'CommissionType',
    'InMemoryOpportunityRepository',
    'Opportunity',
    'OpportunityService',
    'PipelineStage',
    'ProbabilityPolicy',
    'StageEngine',
]
