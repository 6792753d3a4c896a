"""
Lifecycle Engine - Stage Report Facade

Wires the catalogue, document store and financial ledger together and
produces one report per (property, workflow) evaluation.

Usage:
    engine = LifecycleEngine(document_store=store, ledger=ledger)
    report = engine.evaluate("prop-1", WorkflowType.DIRECT_ADDITION)
    if report.current_stage is not None:
        print(report.statuses[report.current_stage].blocking_reasons)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from lifecycle.stages.aggregator import (
    StageCompletionAggregator,
    StageStatus,
    derive_accessible_stages,
    derive_current_stage,
)
from lifecycle.stages.catalogue import (
    DEFAULT_CATALOGUE,
    StageCatalogue,
    get_display_stage_number,
)
from lifecycle.stages.documents import DocumentStore, InMemoryDocumentStore
from lifecycle.stages.financial import FinancialGateResolver, FinancialLedger, InMemoryFinancialLedger
from lifecycle.stages.locking import get_next_required, is_locked
from lifecycle.stages.progress import WorkflowProgress, calculate_progress
from lifecycle.stages.progression import ChecklistStep, derive_stage_progression
from lifecycle.stages.schema import DocumentStates, StageFinancialStatus, WorkflowType


logger = logging.getLogger(__name__)


# =============================================================================
# Report
# =============================================================================


@dataclass(frozen=True)
class PropertyStageReport:
    """Everything known about a property's position in one workflow."""

    property_id: str
    workflow_type: WorkflowType
    statuses: dict[int, StageStatus]
    accessible_stages: tuple[int, ...]
    current_stage: Optional[int]
    progress: WorkflowProgress
    next_required: dict[int, Optional[str]]
    checklist: tuple[ChecklistStep, ...] = ()
    financial_statuses: dict[int, StageFinancialStatus] = field(default_factory=dict)

    @property
    def is_complete(self) -> bool:
        return self.current_stage is None

    def is_stage_accessible(self, stage_number: int) -> bool:
        return stage_number in self.accessible_stages

    def to_dict(self, catalogue: Optional[StageCatalogue] = None) -> dict[str, Any]:
        catalogue = catalogue or DEFAULT_CATALOGUE
        stages = []
        for stage_number, status in self.statuses.items():
            entry = status.to_dict()
            entry["display_number"] = get_display_stage_number(stage_number, self.workflow_type)
            entry["label"] = catalogue.stage_label(stage_number)
            entry["is_accessible"] = stage_number in self.accessible_stages
            financial = self.financial_statuses.get(stage_number)
            entry["financial"] = financial.to_dict() if financial else None
            stages.append(entry)

        return {
            "property_id": self.property_id,
            "workflow_type": self.workflow_type.value,
            "stages": stages,
            "accessible_stages": list(self.accessible_stages),
            "current_stage": self.current_stage,
            "progress": self.progress.to_dict(),
            "next_required": {str(stage): key for stage, key in self.next_required.items()},
            "checklist": [step.to_dict() for step in self.checklist],
        }


# =============================================================================
# Engine
# =============================================================================


class LifecycleEngine:
    """
    Evaluates stage gating for properties.

    Collaborators default to empty in-memory implementations.
    """

    def __init__(
        self,
        catalogue: Optional[StageCatalogue] = None,
        document_store: Optional[DocumentStore] = None,
        ledger: Optional[FinancialLedger] = None,
    ):
        self.catalogue = catalogue or DEFAULT_CATALOGUE
        self.document_store = document_store or InMemoryDocumentStore()
        self.ledger = ledger or InMemoryFinancialLedger()
        self._aggregator = StageCompletionAggregator(self.catalogue)

    def evaluate(self, property_id: str, workflow_type: WorkflowType) -> PropertyStageReport:
        """
        Build the stage report for a property.

        Args:
            property_id: Property to evaluate
            workflow_type: Workflow whose stage range is evaluated

        Returns:
            PropertyStageReport

        Raises:
            InvalidEnumValue: If workflow_type is not declared
        """
        workflow_type = WorkflowType.parse(workflow_type)
        document_states = self.document_store.get_document_states(property_id)
        return self._build_report(property_id, workflow_type, document_states)

    def _build_report(
        self,
        property_id: str,
        workflow_type: WorkflowType,
        document_states: DocumentStates,
    ) -> PropertyStageReport:
        stage_numbers = self.catalogue.stage_numbers(workflow_type)
        gate = FinancialGateResolver(self.ledger, property_id, self.catalogue)
        financial_statuses = gate.get_all_stage_statuses(stage_numbers)

        statuses = self._aggregator.calculate_workflow_statuses(
            workflow_type, document_states, financial_statuses
        )
        next_required = {
            stage: get_next_required(document_states, keys)
            for stage, keys in self.catalogue.sequential_groups.items()
            if stage in self.catalogue.stage_range(workflow_type)
        }

        report = PropertyStageReport(
            property_id=property_id,
            workflow_type=workflow_type,
            statuses=statuses,
            accessible_stages=derive_accessible_stages(statuses),
            current_stage=derive_current_stage(statuses),
            progress=calculate_progress(document_states, workflow_type, self.catalogue),
            next_required=next_required,
            checklist=tuple(derive_stage_progression(document_states, workflow_type, self.catalogue)),
            financial_statuses=financial_statuses,
        )
        logger.debug(
            "Evaluated %s (%s): current stage %s, %d%% complete",
            property_id,
            workflow_type.value,
            report.current_stage,
            report.progress.percentage,
        )
        return report

    def get_progress(self, property_id: str, workflow_type: WorkflowType) -> WorkflowProgress:
        document_states = self.document_store.get_document_states(property_id)
        return calculate_progress(document_states, workflow_type, self.catalogue)

    def is_document_locked(
        self,
        property_id: str,
        doc_key: str,
        workflow_type: WorkflowType,
    ) -> bool:
        """
        Whether a document slot can not yet be filled.

        A slot is locked when its stage is not accessible, or when an
        earlier key in its stage's sequential chain is unsatisfied.
        Unknown keys are never locked.
        """
        stage_number = self.catalogue.stage_for_document(doc_key)
        if stage_number is None:
            return False

        workflow_type = WorkflowType.parse(workflow_type)
        document_states = self.document_store.get_document_states(property_id)

        report = self._build_report(property_id, workflow_type, document_states)
        if stage_number in report.statuses and not report.is_stage_accessible(stage_number):
            return True

        return is_locked(doc_key, document_states, self.catalogue.sequential_keys(stage_number))
