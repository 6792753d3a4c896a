"""
Tests for Stage Completion and Financial Gating

Tests covering:
1. Financial gate routing to the ledger
2. Stage completion from documents and payments
3. Blocking reason order
4. Accessible and current stage derivation
"""

import pytest

from lifecycle.stages import (
    DEFAULT_CATALOGUE,
    DocumentStateEntry,
    FinancialGateResolver,
    InMemoryFinancialLedger,
    StageCompletionAggregator,
    StageFinancialStatus,
    WorkflowType,
    calculate_stage_status,
    derive_accessible_stages,
    derive_current_stage,
)


PAID = StageFinancialStatus(is_financially_complete=True)
UNPAID = StageFinancialStatus(is_financially_complete=False, total_required=50000.0, total_paid=20000.0, pending_amount=30000.0)


def complete_states(*stage_numbers):
    """Upload one file for every document of the given stages."""
    return {
        key: DocumentStateEntry(documents=("file",))
        for stage in stage_numbers
        for key in DEFAULT_CATALOGUE.stage_document_keys(stage)
    }


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def aggregator():
    return StageCompletionAggregator()


@pytest.fixture
def ledger():
    return InMemoryFinancialLedger()


# =============================================================================
# Financial Gate Tests
# =============================================================================


class TestFinancialGate:
    """Tests for per-stage payment verdicts."""

    def test_stage_without_obligation_skips_ledger(self, ledger):
        ledger.set_requirement("prop-1", 2, 1000.0)
        gate = FinancialGateResolver(ledger, "prop-1")

        assert gate.get_stage_financial_status(2).is_financially_complete is True

    def test_nothing_recorded_is_complete(self, ledger):
        gate = FinancialGateResolver(ledger, "prop-1")
        assert gate.get_stage_financial_status(3).is_financially_complete is True

    def test_partial_payment_is_incomplete(self, ledger):
        ledger.set_requirement("prop-1", 6, 15000.0)
        ledger.record_payment("prop-1", 6, 5000.0)

        status = FinancialGateResolver(ledger, "prop-1").get_stage_financial_status(6)
        assert status.is_financially_complete is False
        assert status.pending_amount == 10000.0

    def test_full_payment_is_complete(self, ledger):
        ledger.set_requirement("prop-1", 9, 8000.0)
        ledger.record_payment("prop-1", 9, 5000.0)
        ledger.record_payment("prop-1", 9, 3000.0)

        status = FinancialGateResolver(ledger, "prop-1").get_stage_financial_status(9)
        assert status.is_financially_complete is True
        assert status.pending_amount == 0

    def test_ledger_is_per_property(self, ledger):
        ledger.set_requirement("prop-1", 3, 1000.0)
        gate = FinancialGateResolver(ledger, "prop-2")
        assert gate.get_stage_financial_status(3).is_financially_complete is True


# =============================================================================
# Stage Status Tests
# =============================================================================


class TestStageStatus:
    """Tests for a single stage verdict."""

    def test_documents_and_payment_complete(self, aggregator):
        status = aggregator.calculate_stage_status(3, complete_states(3), PAID)

        assert status.is_overall_complete is True
        assert status.blocking_reasons == ()
        assert status.has_financial_requirement is True

    def test_unpaid_stage_blocks(self, aggregator):
        status = aggregator.calculate_stage_status(3, complete_states(3), UNPAID)

        assert status.documents_complete is True
        assert status.financially_complete is False
        assert status.is_overall_complete is False
        assert status.blocking_reasons == (
            "Outstanding payment for stage 3 (KES 30,000 pending)",
        )

    def test_missing_documents_listed_before_payment(self, aggregator):
        status = aggregator.calculate_stage_status(3, {}, StageFinancialStatus(False))

        assert status.blocking_reasons == (
            "Missing document: Official Search",
            "Missing document: Legal Opinion",
            "Outstanding payment for stage 3",
        )

    def test_payment_ignored_without_obligation(self, aggregator):
        status = aggregator.calculate_stage_status(2, complete_states(2), UNPAID)

        assert status.financially_complete is True
        assert status.is_overall_complete is True
        assert status.has_financial_requirement is False

    def test_unknown_stage_has_no_requirements(self, aggregator):
        status = aggregator.calculate_stage_status(42, {}, PAID)
        assert status.is_overall_complete is True

    def test_reasons_empty_iff_complete(self, aggregator):
        for stage in DEFAULT_CATALOGUE.stage_numbers(WorkflowType.DIRECT_ADDITION):
            for states in ({}, complete_states(stage)):
                for financial in (PAID, UNPAID):
                    status = aggregator.calculate_stage_status(stage, states, financial)
                    assert (status.blocking_reasons == ()) == status.is_overall_complete

    def test_module_level_helper(self):
        status = calculate_stage_status(1, complete_states(1), PAID)
        assert status.is_overall_complete is True


# =============================================================================
# Progression Tests
# =============================================================================


class TestStageProgression:
    """Tests for accessible and current stages."""

    def test_fresh_property_only_first_stage_open(self, aggregator):
        statuses = aggregator.calculate_workflow_statuses(WorkflowType.DIRECT_ADDITION, {}, {})

        assert list(statuses) == list(range(1, 11))
        assert derive_accessible_stages(statuses) == (1,)
        assert derive_current_stage(statuses) == 1

    def test_unpaid_stage_blocks_next(self, aggregator):
        states = complete_states(1, 2, 3, 4)
        statuses = aggregator.calculate_workflow_statuses(
            WorkflowType.DIRECT_ADDITION, states, {3: UNPAID}
        )

        assert statuses[3].documents_complete is True
        assert statuses[3].is_overall_complete is False
        assert statuses[3].blocking_reasons
        assert derive_accessible_stages(statuses) == (1, 2, 3)
        assert derive_current_stage(statuses) == 3

    def test_missing_payment_verdict_counts_as_unpaid(self, aggregator):
        statuses = aggregator.calculate_workflow_statuses(
            WorkflowType.DIRECT_ADDITION, complete_states(1, 2, 3), {}
        )
        assert statuses[3].financially_complete is False

    def test_incomplete_stage_blocks_all_later_stages(self, aggregator):
        """Completing later stages does not open them past an incomplete one."""
        states = complete_states(1, 3, 4, 5)
        statuses = aggregator.calculate_workflow_statuses(
            WorkflowType.DIRECT_ADDITION, states, {3: PAID}
        )

        assert derive_accessible_stages(statuses) == (1, 2)
        assert derive_current_stage(statuses) == 2

    def test_all_complete(self, aggregator):
        stages = DEFAULT_CATALOGUE.stage_numbers(WorkflowType.SUBDIVISION)
        statuses = aggregator.calculate_workflow_statuses(
            WorkflowType.SUBDIVISION,
            complete_states(*stages),
            {stage: PAID for stage in stages},
        )

        assert derive_accessible_stages(statuses) == stages
        assert derive_current_stage(statuses) is None
