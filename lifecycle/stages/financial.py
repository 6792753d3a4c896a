"""
Financial Gate Resolver - Stage Payment Status

The payment ledger is an external collaborator. It decides whether a
stage's obligations are met; this module only routes the question and
returns the verdict.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from lifecycle.stages.catalogue import DEFAULT_CATALOGUE, StageCatalogue
from lifecycle.stages.schema import StageFinancialStatus


logger = logging.getLogger(__name__)


# =============================================================================
# Ledger Collaborator
# =============================================================================


class FinancialLedger(ABC):
    """Source of per-stage payment status."""

    @abstractmethod
    def get_stage_financial_status(
        self,
        property_id: str,
        stage_number: int,
    ) -> StageFinancialStatus:
        """Return the payment verdict for one stage of one property."""


@dataclass
class _StageLedgerEntry:
    total_required: float = 0.0
    total_paid: float = 0.0


class InMemoryFinancialLedger(FinancialLedger):
    """
    Ledger kept in memory for development and tests.

    A stage is complete when its recorded payments cover its recorded
    requirement. Stages with nothing recorded are complete.
    """

    def __init__(self):
        self._entries: dict[tuple[str, int], _StageLedgerEntry] = {}

    def _entry(self, property_id: str, stage_number: int) -> _StageLedgerEntry:
        return self._entries.setdefault((property_id, stage_number), _StageLedgerEntry())

    def set_requirement(self, property_id: str, stage_number: int, amount: float) -> None:
        self._entry(property_id, stage_number).total_required = amount

    def record_payment(self, property_id: str, stage_number: int, amount: float) -> None:
        self._entry(property_id, stage_number).total_paid += amount

    def get_stage_financial_status(
        self,
        property_id: str,
        stage_number: int,
    ) -> StageFinancialStatus:
        entry = self._entries.get((property_id, stage_number))
        if entry is None:
            return StageFinancialStatus.not_required()
        pending = max(entry.total_required - entry.total_paid, 0.0)
        return StageFinancialStatus(
            is_financially_complete=pending == 0,
            total_paid=entry.total_paid,
            total_required=entry.total_required,
            pending_amount=pending,
        )


# =============================================================================
# Resolver
# =============================================================================


class FinancialGateResolver:
    """
    Per-property view over the ledger.

    Stages without a payment obligation in the catalogue are reported
    complete without consulting the ledger.
    """

    def __init__(
        self,
        ledger: FinancialLedger,
        property_id: str,
        catalogue: Optional[StageCatalogue] = None,
    ):
        self._ledger = ledger
        self._property_id = property_id
        self._catalogue = catalogue or DEFAULT_CATALOGUE

    def get_stage_financial_status(self, stage_number: int) -> StageFinancialStatus:
        if not self._catalogue.has_financial_requirement(stage_number):
            return StageFinancialStatus.not_required()

        status = self._ledger.get_stage_financial_status(self._property_id, stage_number)
        logger.debug(
            "Stage %d of %s financially complete: %s",
            stage_number,
            self._property_id,
            status.is_financially_complete,
        )
        return status

    def get_all_stage_statuses(self, stage_numbers: tuple[int, ...]) -> dict[int, StageFinancialStatus]:
        return {stage: self.get_stage_financial_status(stage) for stage in stage_numbers}
