"""
Opportunity Persistence

The stage engine never touches storage. Services talk to an
OpportunityRepository; the in-memory implementation backs the Flask app and
the tests.
"""

import threading
from contextlib import AbstractContextManager
from typing import Protocol

from .errors import OpportunityNotFound
from .models import Opportunity, StageHistoryEntry


class OpportunityRepository(Protocol):
    def transaction(self) -> AbstractContextManager: ...

    def add(self, opportunity: Opportunity, entry: StageHistoryEntry) -> None: ...

    def get(self, opportunity_id: str) -> Opportunity: ...

    def list(self) -> list[Opportunity]: ...

    def update(self, opportunity: Opportunity) -> None: ...

    def commit_stage_change(self, opportunity: Opportunity, entry: StageHistoryEntry) -> None: ...

    def history(self, opportunity_id: str) -> tuple[StageHistoryEntry, ...]: ...


class InMemoryOpportunityRepository:
    """
    Dict-backed repository.

    A single re-entrant lock serialises writes, so a record and its history
    entry are always stored together. Holding transaction() across a
    read-apply-commit keeps one transition in flight at a time, so history
    keeps the order transitions committed.
    """

    def __init__(self):
        self._opportunities: dict[str, Opportunity] = {}
        self._history: dict[str, list[StageHistoryEntry]] = {}
        self._lock = threading.RLock()

    def transaction(self):
        return self._lock

    def add(self, opportunity: Opportunity, entry: StageHistoryEntry) -> None:
        with self._lock:
            if opportunity.opportunity_id in self._opportunities:
                raise ValueError(f"Opportunity already exists: {opportunity.opportunity_id}")
            self._opportunities[opportunity.opportunity_id] = opportunity
            self._history[opportunity.opportunity_id] = [entry]

    def get(self, opportunity_id: str) -> Opportunity:
        try:
            return self._opportunities[opportunity_id]
        except KeyError:
            raise OpportunityNotFound(f"Opportunity not found: {opportunity_id}") from None

    def list(self) -> list[Opportunity]:
        return list(self._opportunities.values())

    def update(self, opportunity: Opportunity) -> None:
        with self._lock:
            self.get(opportunity.opportunity_id)
            self._opportunities[opportunity.opportunity_id] = opportunity

    def commit_stage_change(self, opportunity: Opportunity, entry: StageHistoryEntry) -> None:
        with self._lock:
            self.get(opportunity.opportunity_id)
            self._opportunities[opportunity.opportunity_id] = opportunity
            self._history[opportunity.opportunity_id].append(entry)

    def history(self, opportunity_id: str) -> tuple[StageHistoryEntry, ...]:
        self.get(opportunity_id)
        return tuple(self._history[opportunity_id])
