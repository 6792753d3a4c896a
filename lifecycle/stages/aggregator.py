"""
Stage Completion Aggregator - Document + Financial Gating per Stage

A stage is complete when every document it requires is satisfied and,
for stages with a payment obligation, the ledger reports it settled.
Stages unlock strictly in order: a stage is accessible only when every
earlier stage of the workflow is complete.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from lifecycle.stages.catalogue import DEFAULT_CATALOGUE, StageCatalogue
from lifecycle.stages.schema import (
    DocumentStates,
    StageFinancialStatus,
    WorkflowType,
    is_satisfied,
)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class StageStatus:
    """Completion verdict for one stage."""

    stage_number: int
    documents_complete: bool
    financially_complete: bool
    is_overall_complete: bool
    blocking_reasons: tuple[str, ...]
    has_financial_requirement: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage_number": self.stage_number,
            "documents_complete": self.documents_complete,
            "financially_complete": self.financially_complete,
            "is_overall_complete": self.is_overall_complete,
            "blocking_reasons": list(self.blocking_reasons),
            "has_financial_requirement": self.has_financial_requirement,
        }


def _unpaid_reason(stage_number: int, status: StageFinancialStatus) -> str:
    if status.pending_amount:
        return f"Outstanding payment for stage {stage_number} (KES {status.pending_amount:,.0f} pending)"
    return f"Outstanding payment for stage {stage_number}"


# =============================================================================
# Aggregator
# =============================================================================


class StageCompletionAggregator:
    """Combines document and financial completion into stage statuses."""

    def __init__(self, catalogue: Optional[StageCatalogue] = None):
        self._catalogue = catalogue or DEFAULT_CATALOGUE

    @property
    def catalogue(self) -> StageCatalogue:
        return self._catalogue

    def calculate_stage_status(
        self,
        stage_number: int,
        document_states: DocumentStates,
        financial_status: StageFinancialStatus,
    ) -> StageStatus:
        """
        Evaluate one stage.

        Args:
            stage_number: Internal stage number
            document_states: Current state per document key
            financial_status: Ledger verdict for the stage

        Returns:
            StageStatus; blocking_reasons lists missing documents in
            catalogue order, then the unpaid balance
        """
        reasons = []
        for doc in self._catalogue.document_types_for_stage(stage_number):
            if not is_satisfied(document_states.get(doc.key)):
                reasons.append(f"Missing document: {doc.label}")
        documents_complete = not reasons

        has_financial_requirement = self._catalogue.has_financial_requirement(stage_number)
        financially_complete = True
        if has_financial_requirement:
            financially_complete = financial_status.is_financially_complete
            if not financially_complete:
                reasons.append(_unpaid_reason(stage_number, financial_status))

        return StageStatus(
            stage_number=stage_number,
            documents_complete=documents_complete,
            financially_complete=financially_complete,
            is_overall_complete=documents_complete and financially_complete,
            blocking_reasons=tuple(reasons),
            has_financial_requirement=has_financial_requirement,
        )

    def calculate_workflow_statuses(
        self,
        workflow_type: WorkflowType,
        document_states: DocumentStates,
        financial_statuses: Mapping[int, StageFinancialStatus],
    ) -> dict[int, StageStatus]:
        """
        Evaluate every stage of a workflow, in stage order.

        A payment stage missing from financial_statuses counts as unpaid.
        """
        statuses = {}
        for stage_number in self._catalogue.stage_numbers(workflow_type):
            financial_status = financial_statuses.get(stage_number)
            if financial_status is None:
                financial_status = StageFinancialStatus(
                    is_financially_complete=not self._catalogue.has_financial_requirement(stage_number)
                )
            statuses[stage_number] = self.calculate_stage_status(
                stage_number, document_states, financial_status
            )
        return statuses


# =============================================================================
# Progression
# =============================================================================


def derive_accessible_stages(statuses: Mapping[int, StageStatus]) -> tuple[int, ...]:
    """
    Stages a user may currently open, in workflow order.

    The first stage is always accessible; each later stage needs the one
    before it to be accessible and complete.
    """
    accessible = []
    previous_open = True
    for stage_number, status in statuses.items():
        if not previous_open:
            break
        accessible.append(stage_number)
        previous_open = status.is_overall_complete
    return tuple(accessible)


def derive_current_stage(statuses: Mapping[int, StageStatus]) -> Optional[int]:
    """First incomplete stage in workflow order, or None when all are complete."""
    for stage_number, status in statuses.items():
        if not status.is_overall_complete:
            return stage_number
    return None


def calculate_stage_status(
    stage_number: int,
    document_states: DocumentStates,
    financial_status: StageFinancialStatus,
    catalogue: Optional[StageCatalogue] = None,
) -> StageStatus:
    """Evaluate one stage against a catalogue (default catalogue if omitted)."""
    return StageCompletionAggregator(catalogue).calculate_stage_status(
        stage_number, document_states, financial_status
    )
