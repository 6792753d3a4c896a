"""
Document checklist progression.

Lays out a workflow's documents as numbered steps, with each sequential
group collapsed into a single multi-document step. Steps unlock in order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from lifecycle.stages.catalogue import DEFAULT_CATALOGUE, StageCatalogue
from lifecycle.stages.schema import DocumentStates, WorkflowType, is_satisfied


@dataclass(frozen=True)
class ChecklistStep:
    step_number: int
    doc_keys: tuple[str, ...]
    is_completed: bool
    is_active: bool
    is_locked: bool
    stage_number: int

    @property
    def is_multi_document(self) -> bool:
        return len(self.doc_keys) > 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "step_number": self.step_number,
            "doc_keys": list(self.doc_keys),
            "stage_number": self.stage_number,
            "is_completed": self.is_completed,
            "is_active": self.is_active,
            "is_locked": self.is_locked,
            "is_multi_document": self.is_multi_document,
        }


def derive_stage_progression(
    document_states: DocumentStates,
    workflow_type: WorkflowType,
    catalogue: Optional[StageCatalogue] = None,
) -> list[ChecklistStep]:
    """
    Build the ordered checklist for a workflow.

    A step is locked when an earlier step is incomplete and it is not
    complete itself; it is active when every earlier step is complete and
    it is not.
    """
    catalogue = catalogue or DEFAULT_CATALOGUE
    grouped = {
        key: keys
        for keys in catalogue.sequential_groups.values()
        for key in keys
    }

    steps: list[ChecklistStep] = []
    for doc in catalogue.documents_for_workflow(WorkflowType.parse(workflow_type)):
        keys = grouped.get(doc.key, (doc.key,))
        if keys[0] != doc.key:
            # Later members of a group are folded into the group's first step
            continue

        is_completed = all(is_satisfied(document_states.get(key)) for key in keys)
        previous_completed = all(step.is_completed for step in steps)
        steps.append(ChecklistStep(
            step_number=len(steps) + 1,
            doc_keys=keys,
            stage_number=doc.stage,
            is_completed=is_completed,
            is_active=previous_completed and not is_completed,
            is_locked=not previous_completed and not is_completed,
        ))
    return steps


def find_active_step(steps: list[ChecklistStep]) -> Optional[ChecklistStep]:
    for step in steps:
        if step.is_active:
            return step
    return None
