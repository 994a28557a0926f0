"""
Unit Tests for the Opportunity Stage Engine

Stage lookups, probability policy, close marker and history entries.
"""

import dataclasses
from decimal import Decimal

import pytest

from conftest import FIXED_NOW, make_opportunity
from partner_engine.errors import InvalidActor, UnknownStage
from partner_engine.models import PipelineStage
from partner_engine.stages import (
    ACTIVE_STAGES,
    CLOSED_STAGES,
    is_terminal_stage,
    ordered_stages,
    parse_stage,
    stage_default_probability,
)


class TestStageLookups:
    """Stage table lookups."""

    @pytest.mark.parametrize(
        "stage, probability",
        [
            ("lead", 10),
            ("demo", 25),
            ("poc", 50),
            ("proposal", 75),
            ("closed_won", 100),
            ("closed_lost", 0),
        ],
    )
    def test_default_probabilities(self, stage, probability):
        assert stage_default_probability(stage) == probability

    def test_accepts_enum_members(self):
        assert stage_default_probability(PipelineStage.POC) == 50

    @pytest.mark.parametrize("value", ["negotiation", "LEAD", "", None, 3])
    def test_unknown_stage(self, value):
        with pytest.raises(UnknownStage):
            stage_default_probability(value)

    @pytest.mark.parametrize("stage", ["closed_won", "closed_lost"])
    def test_terminal_stages(self, stage):
        assert is_terminal_stage(stage) is True

    @pytest.mark.parametrize("stage", ["lead", "demo", "poc", "proposal"])
    def test_active_stages_are_not_terminal(self, stage):
        assert is_terminal_stage(stage) is False

    def test_is_terminal_rejects_unknown(self):
        with pytest.raises(UnknownStage):
            is_terminal_stage("won")

    def test_stage_order(self):
        assert [config.stage.value for config in ordered_stages()] == [
            "lead", "demo", "poc", "proposal", "closed_won", "closed_lost",
        ]

    def test_active_and_closed_partition_all_stages(self):
        assert set(ACTIVE_STAGES) | set(CLOSED_STAGES) == set(PipelineStage)
        assert not set(ACTIVE_STAGES) & set(CLOSED_STAGES)

    def test_parse_stage(self):
        assert parse_stage("proposal") is PipelineStage.PROPOSAL


class TestApplyStageChange:
    """Applying a stage change under the default (overwrite) policy."""

    def test_moves_stage_and_resets_probability(self, engine):
        change = engine.apply_stage_change(make_opportunity(), "demo", "user-1")

        assert change.opportunity.stage == PipelineStage.DEMO
        assert change.opportunity.probability == 25
        assert change.opportunity.weighted_value == Decimal("25000")

    def test_history_entry_captures_transition(self, engine):
        change = engine.apply_stage_change(make_opportunity(), PipelineStage.POC, "user-1", "Demo went well")
        entry = change.entry

        assert entry.entry_id == "entry-1"
        assert entry.opportunity_id == "opp-1"
        assert entry.previous_stage == PipelineStage.LEAD
        assert entry.new_stage == PipelineStage.POC
        assert entry.actor_id == "user-1"
        assert entry.note == "Demo went well"
        assert entry.changed_at == FIXED_NOW

    def test_input_record_is_not_mutated(self, engine):
        original = make_opportunity()
        engine.apply_stage_change(original, "proposal", "user-1")

        assert original.stage == PipelineStage.LEAD
        assert original.probability == 10

    def test_updated_at_is_stamped(self, engine):
        change = engine.apply_stage_change(make_opportunity(), "demo", "user-1")
        assert change.opportunity.updated_at == FIXED_NOW

    def test_backward_transition_is_accepted(self, engine):
        change = engine.apply_stage_change(make_opportunity(stage="proposal"), "lead", "user-1")

        assert change.opportunity.stage == PipelineStage.LEAD
        assert change.entry.previous_stage == PipelineStage.PROPOSAL

    def test_same_stage_transition_still_logged(self, engine):
        change = engine.apply_stage_change(make_opportunity(stage="demo"), "demo", "user-1")
        assert change.entry.previous_stage == change.entry.new_stage == PipelineStage.DEMO

    def test_closed_won_sets_close_marker(self, engine):
        change = engine.apply_stage_change(make_opportunity(stage="proposal"), "closed_won", "user-1")

        assert change.opportunity.actual_close_date == FIXED_NOW
        assert change.opportunity.probability == 100
        assert change.opportunity.weighted_value == Decimal("100000")

    def test_closed_lost_sets_close_marker(self, engine):
        change = engine.apply_stage_change(make_opportunity(), "closed_lost", "user-1")

        assert change.opportunity.actual_close_date == FIXED_NOW
        assert change.opportunity.weighted_value == Decimal("0")

    def test_reopening_clears_close_marker(self, engine):
        closed = engine.apply_stage_change(make_opportunity(), "closed_lost", "user-1").opportunity
        reopened = engine.apply_stage_change(closed, "proposal", "user-1").opportunity

        assert reopened.actual_close_date is None
        assert reopened.probability == 75

    def test_overwrite_policy_discards_manual_probability(self, engine):
        opportunity = make_opportunity(probability=60, overridden=True)
        change = engine.apply_stage_change(opportunity, "demo", "user-1")

        assert change.opportunity.probability == 25
        assert change.opportunity.probability_overridden is False

    def test_unknown_stage_rejected_without_entry(self, engine, sequential_ids):
        with pytest.raises(UnknownStage):
            engine.apply_stage_change(make_opportunity(), "negotiation", "user-1")

        # No id was consumed, so no entry was built
        assert sequential_ids() == "entry-1"

    @pytest.mark.parametrize("actor_id", ["", "   ", None])
    def test_actor_required(self, engine, actor_id):
        with pytest.raises(InvalidActor):
            engine.apply_stage_change(make_opportunity(), "demo", actor_id)

    def test_history_entry_is_immutable(self, engine):
        entry = engine.apply_stage_change(make_opportunity(), "demo", "user-1").entry
        with pytest.raises(dataclasses.FrozenInstanceError):
            entry.new_stage = PipelineStage.POC


class TestPreserveOverridePolicy:
    """Manual probabilities survive stage changes under PRESERVE_OVERRIDE."""

    def test_keeps_manual_probability(self, preserving_engine):
        opportunity = make_opportunity(probability=60, overridden=True)
        change = preserving_engine.apply_stage_change(opportunity, "demo", "user-1")

        assert change.opportunity.probability == 60
        assert change.opportunity.probability_overridden is True
        assert change.opportunity.weighted_value == Decimal("60000")

    def test_applies_default_without_override(self, preserving_engine):
        change = preserving_engine.apply_stage_change(make_opportunity(), "poc", "user-1")
        assert change.opportunity.probability == 50

    def test_keeps_override_even_when_closing(self, preserving_engine):
        opportunity = make_opportunity(stage="proposal", probability=90, overridden=True)
        change = preserving_engine.apply_stage_change(opportunity, "closed_won", "user-1")

        assert change.opportunity.probability == 90
        assert change.opportunity.actual_close_date == FIXED_NOW


class TestOpeningEntry:
    def test_opening_entry_has_no_previous_stage(self, engine):
        entry = engine.opening_entry(make_opportunity(stage="demo"), "user-1")

        assert entry.previous_stage is None
        assert entry.new_stage == PipelineStage.DEMO
        assert entry.changed_at == FIXED_NOW


class TestWeightedValueIsDerived:
    def test_weighted_value_follows_amount(self):
        opportunity = dataclasses.replace(make_opportunity(stage="poc"), amount=Decimal("300000"))
        assert opportunity.weighted_value == Decimal("150000")
