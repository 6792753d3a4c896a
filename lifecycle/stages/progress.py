"""
Workflow Progress Calculator

Counts satisfied documents over the document types belonging to a
workflow's stage range. Works on internal stage numbers; display offsets
are applied by callers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Optional

from lifecycle.stages.catalogue import DEFAULT_CATALOGUE, StageCatalogue
from lifecycle.stages.schema import DocumentStates, WorkflowType, is_satisfied


@dataclass(frozen=True)
class WorkflowProgress:
    """Completed/total document counts for a workflow."""

    completed: int
    total: int
    percentage: int  # 0-100

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.completed == self.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "completed": self.completed,
            "total": self.total,
            "percentage": self.percentage,
        }


def completion_percentage(completed: int, total: int) -> int:
    """
    Whole percentage rounded half up; 0 when there is nothing to complete.

    100 is reserved for a finished workflow and 0 for an untouched one, so
    near-complete and barely-started counts are clamped to 99 and 1.
    """
    if total <= 0:
        return 0
    percentage = int(math.floor(100 * completed / total + 0.5))
    if completed < total:
        percentage = min(percentage, 99)
    if completed > 0:
        percentage = max(percentage, 1)
    return percentage


def calculate_progress(
    document_states: DocumentStates,
    workflow_type: WorkflowType,
    catalogue: Optional[StageCatalogue] = None,
) -> WorkflowProgress:
    """
    Calculate document completion for a workflow.

    Args:
        document_states: Current state per document key
        workflow_type: Workflow whose stage range filters the catalogue
        catalogue: Stage catalogue (default catalogue if omitted)

    Returns:
        WorkflowProgress

    Raises:
        InvalidEnumValue: If workflow_type is not declared
    """
    catalogue = catalogue or DEFAULT_CATALOGUE
    documents = catalogue.documents_for_workflow(WorkflowType.parse(workflow_type))

    completed = sum(1 for doc in documents if is_satisfied(document_states.get(doc.key)))
    total = len(documents)

    return WorkflowProgress(
        completed=completed,
        total=total,
        percentage=completion_percentage(completed, total),
    )
