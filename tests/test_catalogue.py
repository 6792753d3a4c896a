"""
Tests for the Stage Catalogue and Workflow Helpers

Tests covering:
1. Default document catalogue
2. Workflow stage ranges and display numbering
3. Workflow type selection
4. Catalogue validation
"""

import pytest

from lifecycle.errors import InvalidEnumValue
from lifecycle.stages import (
    AGREEMENT_STAGE_DOCUMENTS,
    DEFAULT_CATALOGUE,
    DocumentTypeSpec,
    PropertyLifecycleState,
    StageCatalogue,
    StageRange,
    WorkflowType,
    get_actual_stage_number,
    get_display_range,
    get_display_stage_number,
    get_filtered_doc_types,
    get_stage_numbers,
    get_stage_range,
    get_workflow_type,
    is_doc_type_allowed_for_workflow,
    is_stage_visible,
)


# =============================================================================
# Default Catalogue Tests
# =============================================================================


class TestDefaultCatalogue:
    """Tests for the shipped document catalogue."""

    def test_document_counts(self):
        assert len(get_filtered_doc_types(WorkflowType.DIRECT_ADDITION)) == 23
        assert len(get_filtered_doc_types(WorkflowType.SUBDIVISION)) == 14

    def test_keys_unique(self):
        keys = [doc.key for doc in DEFAULT_CATALOGUE.document_types]
        assert len(keys) == len(set(keys))

    def test_agreement_chain(self):
        assert DEFAULT_CATALOGUE.sequential_keys(4) == AGREEMENT_STAGE_DOCUMENTS
        assert DEFAULT_CATALOGUE.sequential_keys(5) == ()

    def test_financial_stages(self):
        financial = [
            stage for stage in range(1, 17)
            if DEFAULT_CATALOGUE.has_financial_requirement(stage)
        ]
        assert financial == [3, 6, 9, 10]

    def test_stage_lookup(self):
        assert DEFAULT_CATALOGUE.stage_for_document("signed_lra33") == 4
        assert DEFAULT_CATALOGUE.stage_for_document("unknown") is None
        assert DEFAULT_CATALOGUE.document_types_for_stage(99) == ()
        assert DEFAULT_CATALOGUE.stage_label(99) == "Stage 99"


# =============================================================================
# Stage Range Tests
# =============================================================================


class TestStageRanges:
    """Tests for workflow ranges and display numbers."""

    @pytest.mark.parametrize("workflow", [
        WorkflowType.DIRECT_ADDITION,
        WorkflowType.PURCHASE_PIPELINE,
        WorkflowType.HANDOVER,
    ])
    def test_regular_range(self, workflow):
        assert get_stage_range(workflow) == StageRange(1, 10)
        assert get_stage_numbers(workflow) == tuple(range(1, 11))

    def test_subdivision_range(self):
        assert get_stage_range("subdivision") == StageRange(10, 16)
        assert is_stage_visible(10, WorkflowType.SUBDIVISION)
        assert not is_stage_visible(9, WorkflowType.SUBDIVISION)

    def test_display_numbers(self):
        assert get_display_stage_number(10, WorkflowType.SUBDIVISION) == 1
        assert get_display_stage_number(16, WorkflowType.SUBDIVISION) == 7
        assert get_display_stage_number(7, WorkflowType.HANDOVER) == 7
        assert get_display_range(WorkflowType.SUBDIVISION) == StageRange(1, 7)

    def test_display_round_trip(self):
        for workflow in WorkflowType:
            for stage in get_stage_numbers(workflow):
                display = get_display_stage_number(stage, workflow)
                assert get_actual_stage_number(display, workflow) == stage

    def test_doc_allowed_for_workflow(self):
        assert is_doc_type_allowed_for_workflow("registered_title", WorkflowType.SUBDIVISION)
        assert is_doc_type_allowed_for_workflow("registered_title", WorkflowType.DIRECT_ADDITION)
        assert not is_doc_type_allowed_for_workflow("new_titles", WorkflowType.DIRECT_ADDITION)
        assert not is_doc_type_allowed_for_workflow("unknown", WorkflowType.DIRECT_ADDITION)

    def test_invalid_range(self):
        with pytest.raises(ValueError):
            StageRange(5, 1)

    def test_unknown_workflow(self):
        with pytest.raises(InvalidEnumValue):
            get_stage_range("lease")


# =============================================================================
# Workflow Type Tests
# =============================================================================


class TestWorkflowType:
    """Tests for picking a property's active workflow."""

    def test_default_direct_addition(self):
        assert get_workflow_type(PropertyLifecycleState("p1")) is WorkflowType.DIRECT_ADDITION

    def test_purchase_pipeline_source(self):
        state = PropertyLifecycleState("p1", property_source="PURCHASE_PIPELINE")
        assert get_workflow_type(state) is WorkflowType.PURCHASE_PIPELINE

    def test_handover_beats_source(self):
        state = PropertyLifecycleState(
            "p1", property_source="PURCHASE_PIPELINE", handover_status="IN_PROGRESS"
        )
        assert get_workflow_type(state) is WorkflowType.HANDOVER

    def test_subdivision_beats_everything(self):
        state = PropertyLifecycleState(
            "p1",
            property_source="PURCHASE_PIPELINE",
            subdivision_status="IN_PROGRESS",
            handover_status="COMPLETED",
        )
        assert get_workflow_type(state) is WorkflowType.SUBDIVISION

    def test_not_started_is_ignored(self):
        state = PropertyLifecycleState(
            "p1", subdivision_status="NOT_STARTED", handover_status="NOT_STARTED"
        )
        assert get_workflow_type(state) is WorkflowType.DIRECT_ADDITION


# =============================================================================
# Custom Catalogue Tests
# =============================================================================


class TestCustomCatalogue:
    """Tests for catalogue validation."""

    def test_duplicate_keys_rejected(self):
        docs = (
            DocumentTypeSpec("a", "A", 1),
            DocumentTypeSpec("a", "A again", 2),
        )
        with pytest.raises(ValueError):
            StageCatalogue(document_types=docs, sequential_groups={})

    def test_sequential_key_must_belong_to_stage(self):
        docs = (DocumentTypeSpec("a", "A", 1), DocumentTypeSpec("b", "B", 2))
        with pytest.raises(ValueError):
            StageCatalogue(document_types=docs, sequential_groups={1: ("a", "b")})

    def test_custom_catalogue_lookups(self):
        docs = (DocumentTypeSpec("a", "A", 1), DocumentTypeSpec("b", "B", 1))
        catalogue = StageCatalogue(
            document_types=docs,
            financial_stages=frozenset({1}),
            sequential_groups={1: ("a", "b")},
        )

        assert catalogue.stage_document_keys(1) == ("a", "b")
        assert catalogue.has_financial_requirement(1)
        assert catalogue.documents_for_workflow(WorkflowType.SUBDIVISION) == ()
