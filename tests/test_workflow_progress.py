"""
Tests for Workflow Progress and the Document Checklist

Tests covering:
1. Completion percentage and rounding
2. Filtering documents by workflow stage range
3. Checklist steps with the agreement group collapsed
"""

import pytest

from lifecycle.errors import InvalidEnumValue
from lifecycle.stages import (
    AGREEMENT_STAGE_DOCUMENTS,
    DEFAULT_CATALOGUE,
    DocumentStateEntry,
    DocumentStatus,
    DocumentTypeSpec,
    StageCatalogue,
    WorkflowType,
    calculate_progress,
    completion_percentage,
    derive_stage_progression,
    find_active_step,
)


def satisfy(keys, na=False):
    if na:
        return {key: DocumentStateEntry(status=DocumentStatus(is_na=True)) for key in keys}
    return {key: DocumentStateEntry(documents=("file",)) for key in keys}


# =============================================================================
# Percentage Tests
# =============================================================================


class TestCompletionPercentage:
    """Tests for the whole-number percentage."""

    def test_zero_total(self):
        assert completion_percentage(0, 0) == 0

    def test_rounds_half_up(self):
        assert completion_percentage(1, 8) == 13  # 12.5
        assert completion_percentage(5, 8) == 63  # 62.5

    def test_bounds(self):
        for total in list(range(1, 40)) + [199, 200, 201, 1000]:
            for completed in range(total + 1):
                pct = completion_percentage(completed, total)
                assert 0 <= pct <= 100
                assert (pct == 100) == (completed == total)
                assert (pct == 0) == (completed == 0)

    def test_near_complete_large_workflow(self):
        assert completion_percentage(199, 200) == 99
        assert completion_percentage(999, 1000) == 99
        assert completion_percentage(1, 1000) == 1


# =============================================================================
# Progress Tests
# =============================================================================


class TestCalculateProgress:
    """Tests for counting documents within a workflow."""

    def test_empty_direct_addition(self):
        progress = calculate_progress({}, WorkflowType.DIRECT_ADDITION)

        assert progress.completed == 0
        assert progress.total == 23
        assert progress.percentage == 0

    def test_subdivision_eight_of_fourteen(self):
        keys = [doc.key for doc in DEFAULT_CATALOGUE.documents_for_workflow(WorkflowType.SUBDIVISION)]
        progress = calculate_progress(satisfy(keys[:8]), "subdivision")

        assert progress.total == 14
        assert progress.completed == 8
        assert progress.percentage == 57

    def test_documents_outside_range_ignored(self):
        stage_one = DEFAULT_CATALOGUE.stage_document_keys(1)
        progress = calculate_progress(satisfy(stage_one), WorkflowType.SUBDIVISION)
        assert progress.completed == 0

    def test_large_catalogue_one_short_is_not_complete(self):
        docs = tuple(DocumentTypeSpec(f"doc_{i}", f"Doc {i}", 1) for i in range(200))
        catalogue = StageCatalogue(document_types=docs, sequential_groups={})
        keys = [doc.key for doc in docs]

        progress = calculate_progress(satisfy(keys[:199]), WorkflowType.DIRECT_ADDITION, catalogue)

        assert progress.completed == 199
        assert progress.percentage == 99
        assert not progress.is_complete

    def test_shared_stage_ten_document_counts_in_both(self):
        states = satisfy(["registered_title"])

        assert calculate_progress(states, WorkflowType.PURCHASE_PIPELINE).completed == 1
        assert calculate_progress(states, WorkflowType.SUBDIVISION).completed == 1

    def test_na_counts_as_complete(self):
        keys = [doc.key for doc in DEFAULT_CATALOGUE.documents_for_workflow(WorkflowType.HANDOVER)]
        progress = calculate_progress(satisfy(keys, na=True), WorkflowType.HANDOVER)

        assert progress.percentage == 100
        assert progress.is_complete is True

    def test_unknown_keys_ignored(self):
        progress = calculate_progress(satisfy(["mystery_document"]), WorkflowType.DIRECT_ADDITION)
        assert progress.completed == 0

    def test_unknown_workflow_rejected(self):
        with pytest.raises(InvalidEnumValue):
            calculate_progress({}, "rental")


# =============================================================================
# Checklist Tests
# =============================================================================


class TestStageProgression:
    """Tests for the ordered document checklist."""

    def test_agreement_group_collapsed(self):
        steps = derive_stage_progression({}, WorkflowType.DIRECT_ADDITION)
        grouped = [step for step in steps if step.is_multi_document]

        assert len(steps) == 23 - len(AGREEMENT_STAGE_DOCUMENTS) + 1
        assert len(grouped) == 1
        assert grouped[0].doc_keys == AGREEMENT_STAGE_DOCUMENTS
        assert grouped[0].stage_number == 4

    def test_step_numbers_sequential(self):
        steps = derive_stage_progression({}, WorkflowType.SUBDIVISION)
        assert [s.step_number for s in steps] == list(range(1, len(steps) + 1))
        assert steps[0].doc_keys == ("registered_title",)

    def test_fresh_checklist(self):
        steps = derive_stage_progression({}, WorkflowType.DIRECT_ADDITION)

        assert steps[0].is_active is True
        assert steps[0].is_locked is False
        assert all(step.is_locked for step in steps[1:])
        assert find_active_step(steps) is steps[0]

    def test_group_complete_only_when_all_members_satisfied(self):
        before_group = [
            doc.key for doc in DEFAULT_CATALOGUE.documents_for_workflow(WorkflowType.DIRECT_ADDITION)
            if doc.stage < 4
        ]
        states = satisfy(before_group)
        states.update(satisfy(AGREEMENT_STAGE_DOCUMENTS[:4]))

        steps = derive_stage_progression(states, WorkflowType.DIRECT_ADDITION)
        group = next(step for step in steps if step.is_multi_document)

        assert group.is_completed is False
        assert group.is_active is True
        assert find_active_step(steps) is group

    def test_completed_step_after_gap_is_not_locked(self):
        states = satisfy(["survey_report"])
        steps = derive_stage_progression(states, WorkflowType.DIRECT_ADDITION)
        survey = next(step for step in steps if step.doc_keys == ("survey_report",))

        assert survey.is_completed is True
        assert survey.is_locked is False
        assert survey.is_active is False

    def test_all_complete_has_no_active_step(self):
        keys = [doc.key for doc in DEFAULT_CATALOGUE.documents_for_workflow(WorkflowType.SUBDIVISION)]
        steps = derive_stage_progression(satisfy(keys), WorkflowType.SUBDIVISION)

        assert all(step.is_completed for step in steps)
        assert find_active_step(steps) is None
