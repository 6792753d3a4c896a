"""
Property Lifecycle - Stage Gating Module

Decides, for a property in a given workflow, which stages are complete,
which are open, which document slots are still locked, and how far the
workflow has progressed.

Principles:
1. One satisfaction rule: uploaded or marked N/A
2. Stages open strictly in order
3. Payment verdicts come from the ledger, never computed here
4. Internal stage numbers everywhere; display offsets at the edges
"""

from lifecycle.stages.schema import (
    WorkflowType,
    StageRange,
    DocumentStatus,
    DocumentStateEntry,
    DocumentStates,
    StageFinancialStatus,
    PropertyLifecycleState,
    is_satisfied,
    document_states_from_dict,
)
from lifecycle.stages.catalogue import (
    DocumentTypeSpec,
    StageCatalogue,
    DEFAULT_CATALOGUE,
    AGREEMENT_STAGE_DOCUMENTS,
    FINANCIAL_STAGES,
    SUBDIVISION_DISPLAY_OFFSET,
    WORKFLOW_LABELS,
    get_stage_range,
    get_stage_numbers,
    is_stage_visible,
    get_filtered_doc_types,
    is_doc_type_allowed_for_workflow,
    get_display_stage_number,
    get_actual_stage_number,
    get_display_range,
    get_workflow_type,
)
from lifecycle.stages.locking import is_locked, get_next_required, get_lock_states
from lifecycle.stages.financial import (
    FinancialLedger,
    InMemoryFinancialLedger,
    FinancialGateResolver,
)
from lifecycle.stages.aggregator import (
    StageStatus,
    StageCompletionAggregator,
    calculate_stage_status,
    derive_accessible_stages,
    derive_current_stage,
)
from lifecycle.stages.progress import WorkflowProgress, calculate_progress, completion_percentage
from lifecycle.stages.progression import ChecklistStep, derive_stage_progression, find_active_step
from lifecycle.stages.documents import DocumentStore, InMemoryDocumentStore

__all__ = [
    # Schema
    "WorkflowType",
    "StageRange",
    "DocumentStatus",
    "DocumentStateEntry",
    "DocumentStates",
    "StageFinancialStatus",
    "PropertyLifecycleState",
    "is_satisfied",
    "document_states_from_dict",
    # Catalogue
    "DocumentTypeSpec",
    "StageCatalogue",
    "DEFAULT_CATALOGUE",
    "AGREEMENT_STAGE_DOCUMENTS",
    "FINANCIAL_STAGES",
    "SUBDIVISION_DISPLAY_OFFSET",
    "WORKFLOW_LABELS",
    "get_stage_range",
    "get_stage_numbers",
    "is_stage_visible",
    "get_filtered_doc_types",
    "is_doc_type_allowed_for_workflow",
    "get_display_stage_number",
    "get_actual_stage_number",
    "get_display_range",
    "get_workflow_type",
    # Locking
    "is_locked",
    "get_next_required",
    "get_lock_states",
    # Financial
    "FinancialLedger",
    "InMemoryFinancialLedger",
    "FinancialGateResolver",
    # Aggregation
    "StageStatus",
    "StageCompletionAggregator",
    "calculate_stage_status",
    "derive_accessible_stages",
    "derive_current_stage",
    # Progress
    "WorkflowProgress",
    "calculate_progress",
    "completion_percentage",
    "ChecklistStep",
    "derive_stage_progression",
    "find_active_step",
    # Documents
    "DocumentStore",
    "InMemoryDocumentStore",
]
