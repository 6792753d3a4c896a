"""
Stage Catalogue - Document Requirements per Numbered Stage

Static configuration supplied to the engine at construction:
- every document type and the stage that owns it
- the stage range of each workflow
- ordered document chains that unlock one by one
- stages that carry a payment obligation

Stage numbering is global. Direct addition, purchase pipeline and handover
use stages 1-10. Subdivision uses stages 10-16, shown to users as 1-7;
stage 10 (registered title) is the prerequisite shared by both ranges.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final, Mapping, Optional

from lifecycle.stages.schema import PropertyLifecycleState, StageRange, WorkflowType


# =============================================================================
# Document Types
# =============================================================================


@dataclass(frozen=True)
class DocumentTypeSpec:
    """One required document slot."""

    key: str
    label: str
    stage: int
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "stage": self.stage,
            "description": self.description,
        }


# Agreement with seller: documents unlock strictly in this order
AGREEMENT_STAGE_DOCUMENTS: Final[tuple[str, ...]] = (
    "original_title_deed",
    "seller_id_passport",
    "spousal_consent",
    "spouse_id_kra",
    "signed_lra33",
)

DOCUMENT_TYPES: Final[tuple[DocumentTypeSpec, ...]] = (
    # Stage 1 - Initial search & evaluation
    DocumentTypeSpec("photo_property", "Property Photos", 1, "Current photos of the property"),
    DocumentTypeSpec("other_location_map", "Location Map", 1, "Property location and access map"),
    DocumentTypeSpec("other_property_details", "Property Details", 1, "Property specifications and features"),
    # Stage 2 - Survey & mapping
    DocumentTypeSpec("survey_report", "Survey Report", 2, "Professional land survey report"),
    DocumentTypeSpec("deed_plan_survey", "Survey Map", 2, "Detailed survey map with beacons"),
    DocumentTypeSpec("deed_plan_official", "Deed Plan", 2, "Official deed plan"),
    # Stage 3 - Legal verification & due diligence
    DocumentTypeSpec("search_certificate", "Official Search", 3, "Land registry search certificate"),
    DocumentTypeSpec("legal_opinion", "Legal Opinion", 3, "Lawyer's legal opinion on the property"),
    # Stage 4 - Agreement with seller
    DocumentTypeSpec("original_title_deed", "Original Title Deed", 4, "Original or certified copy of title deed"),
    DocumentTypeSpec("seller_id_passport", "Seller ID / Passport", 4, "Identification of the seller"),
    DocumentTypeSpec("spousal_consent", "Spousal Consent", 4, "Consent of the seller's spouse"),
    DocumentTypeSpec("spouse_id_kra", "Spouse ID & KRA PIN", 4, "Identification of the seller's spouse"),
    DocumentTypeSpec("signed_lra33", "Signed LRA 33", 4, "Signed transfer form LRA 33"),
    # Stage 5 - Sale agreement
    DocumentTypeSpec("sale_agreement", "Sale Agreement", 5, "Executed sale agreement"),
    DocumentTypeSpec("deposit_receipt", "Deposit Receipt", 5, "Receipt for the deposit paid"),
    # Stage 6 - Land control board
    DocumentTypeSpec("lcb_application", "LCB Application", 6, "Land control board application"),
    DocumentTypeSpec("lcb_consent", "LCB Consent", 6, "Land control board consent"),
    # Stage 7 - Valuation
    DocumentTypeSpec("valuation_report", "Valuation Report", 7, "Government valuation report"),
    # Stage 8 - Transfer documents
    DocumentTypeSpec("transfer_forms", "Transfer Forms", 8, "Completed transfer forms"),
    DocumentTypeSpec("buyer_kra_pin", "Buyer KRA PIN", 8, "Buyer tax registration"),
    # Stage 9 - Stamp duty
    DocumentTypeSpec("stamp_duty_assessment", "Stamp Duty Assessment", 9, "Stamp duty assessment"),
    DocumentTypeSpec("stamp_duty_receipt", "Stamp Duty Receipt", 9, "Proof of stamp duty payment"),
    # Stage 10 - Title registration (subdivision prerequisite)
    DocumentTypeSpec("registered_title", "Registered Title", 10, "Title registered in the buyer's name"),
    # Stage 11 - Subdivision decision
    DocumentTypeSpec("minutes_decision_subdivision", "Subdivision Decision Minutes", 11, "Minutes approving subdivision"),
    DocumentTypeSpec("subdivision_scheme_plan", "Scheme Plan", 11, "Proposed subdivision scheme plan"),
    # Stage 12 - Subdivision search
    DocumentTypeSpec("search_certificate_subdivision", "Subdivision Search Certificate", 12, "Search before subdivision"),
    DocumentTypeSpec("rates_clearance", "Rates Clearance", 12, "County rates clearance certificate"),
    # Stage 13 - Subdivision LCB consent
    DocumentTypeSpec("lcb_consent_subdivision", "Subdivision LCB Consent", 13, "Land control board consent to subdivide"),
    DocumentTypeSpec("lcb_minutes_subdivision", "Subdivision LCB Minutes", 13, "Land control board meeting minutes"),
    # Stage 14 - Mutation
    DocumentTypeSpec("mutation_forms", "Mutation Forms", 14, "Approved mutation forms"),
    DocumentTypeSpec("survey_approval", "Survey Approval", 14, "Director of surveys approval"),
    # Stage 15 - Beaconing
    DocumentTypeSpec("beaconing_docs", "Beaconing Documents", 15, "Beacon placement records"),
    DocumentTypeSpec("beacon_certificate", "Beacon Certificate", 15, "Surveyor's beacon certificate"),
    # Stage 16 - New titles
    DocumentTypeSpec("title_registration_subdivision", "Subdivision Title Registration", 16, "Registration of new titles"),
    DocumentTypeSpec("new_titles", "New Titles", 16, "Titles issued for each plot"),
    DocumentTypeSpec("completion_certificate", "Completion Certificate", 16, "Subdivision completion certificate"),
)

STAGE_LABELS: Final[dict[int, str]] = {
    1: "Initial Search & Evaluation",
    2: "Survey & Mapping",
    3: "Legal Verification",
    4: "Agreement with Seller",
    5: "Sale Agreement",
    6: "LCB Process",
    7: "Valuation",
    8: "Transfer Documents",
    9: "Stamp Duty",
    10: "Title Registration",
    11: "Subdivision Decision",
    12: "Subdivision Search",
    13: "Subdivision LCB Consent",
    14: "Mutation",
    15: "Beaconing",
    16: "New Title Registration",
}

# Stages with payment obligations:
# 3 due diligence, 6 LCB fees, 9 stamp duty, 10 registry submission
FINANCIAL_STAGES: Final[frozenset[int]] = frozenset({3, 6, 9, 10})

SEQUENTIAL_GROUPS: Final[dict[int, tuple[str, ...]]] = {
    4: AGREEMENT_STAGE_DOCUMENTS,
}

STAGE_RANGES: Final[dict[WorkflowType, StageRange]] = {
    WorkflowType.DIRECT_ADDITION: StageRange(1, 10),
    WorkflowType.PURCHASE_PIPELINE: StageRange(1, 10),
    WorkflowType.HANDOVER: StageRange(1, 10),
    WorkflowType.SUBDIVISION: StageRange(10, 16),
}

# Subdivision stages 10-16 are shown as 1-7
SUBDIVISION_DISPLAY_OFFSET: Final[int] = 9

WORKFLOW_LABELS: Final[dict[WorkflowType, str]] = {
    WorkflowType.DIRECT_ADDITION: "Direct Addition",
    WorkflowType.PURCHASE_PIPELINE: "Purchase Pipeline",
    WorkflowType.HANDOVER: "Property Handover",
    WorkflowType.SUBDIVISION: "Subdivision Process",
}


# =============================================================================
# Catalogue
# =============================================================================


class StageCatalogue:
    """
    Immutable lookup over document types, stages and workflows.

    Unknown document keys and stage numbers are not errors: they simply
    have no documents, no chain and no payment obligation.
    """

    def __init__(
        self,
        document_types: tuple[DocumentTypeSpec, ...] = DOCUMENT_TYPES,
        financial_stages: frozenset[int] = FINANCIAL_STAGES,
        sequential_groups: Optional[Mapping[int, tuple[str, ...]]] = None,
        stage_ranges: Optional[Mapping[WorkflowType, StageRange]] = None,
        stage_labels: Optional[Mapping[int, str]] = None,
    ):
        self._document_types = tuple(document_types)
        self._by_key = {doc.key: doc for doc in self._document_types}
        if len(self._by_key) != len(self._document_types):
            raise ValueError("Duplicate document keys in catalogue")

        self._financial_stages = frozenset(financial_stages)
        self._sequential_groups = dict(
            SEQUENTIAL_GROUPS if sequential_groups is None else sequential_groups
        )
        self._stage_ranges = dict(STAGE_RANGES if stage_ranges is None else stage_ranges)
        self._stage_labels = dict(STAGE_LABELS if stage_labels is None else stage_labels)

        for stage, keys in self._sequential_groups.items():
            for key in keys:
                doc = self._by_key.get(key)
                if doc is None or doc.stage != stage:
                    raise ValueError(f"Sequential key {key!r} is not a stage {stage} document")

    # =========================================================================
    # Documents
    # =========================================================================

    @property
    def document_types(self) -> tuple[DocumentTypeSpec, ...]:
        return self._document_types

    def get_document_type(self, key: str) -> Optional[DocumentTypeSpec]:
        return self._by_key.get(key)

    def stage_for_document(self, key: str) -> Optional[int]:
        doc = self._by_key.get(key)
        return doc.stage if doc else None

    def document_types_for_stage(self, stage_number: int) -> tuple[DocumentTypeSpec, ...]:
        return tuple(doc for doc in self._document_types if doc.stage == stage_number)

    def stage_document_keys(self, stage_number: int) -> tuple[str, ...]:
        """Ordered document keys required by a stage."""
        return tuple(doc.key for doc in self.document_types_for_stage(stage_number))

    def sequential_keys(self, stage_number: int) -> tuple[str, ...]:
        """Ordered unlock chain for a stage (empty if the stage has none)."""
        return self._sequential_groups.get(stage_number, ())

    @property
    def sequential_groups(self) -> dict[int, tuple[str, ...]]:
        return dict(self._sequential_groups)

    def has_financial_requirement(self, stage_number: int) -> bool:
        return stage_number in self._financial_stages

    def stage_label(self, stage_number: int) -> str:
        return self._stage_labels.get(stage_number, f"Stage {stage_number}")

    # =========================================================================
    # Workflows
    # =========================================================================

    def stage_range(self, workflow_type: WorkflowType) -> StageRange:
        return self._stage_ranges[WorkflowType.parse(workflow_type)]

    def stage_numbers(self, workflow_type: WorkflowType) -> tuple[int, ...]:
        return self.stage_range(workflow_type).numbers

    def documents_for_workflow(self, workflow_type: WorkflowType) -> tuple[DocumentTypeSpec, ...]:
        """Document types whose owning stage lies in the workflow's range."""
        stage_range = self.stage_range(workflow_type)
        return tuple(doc for doc in self._document_types if doc.stage in stage_range)

    def is_doc_type_allowed_for_workflow(self, key: str, workflow_type: WorkflowType) -> bool:
        stage = self.stage_for_document(key)
        return stage is not None and stage in self.stage_range(workflow_type)


DEFAULT_CATALOGUE: Final[StageCatalogue] = StageCatalogue()


# =============================================================================
# Workflow Helpers
# =============================================================================


def get_stage_range(workflow_type: WorkflowType) -> StageRange:
    return DEFAULT_CATALOGUE.stage_range(workflow_type)


def get_stage_numbers(workflow_type: WorkflowType) -> tuple[int, ...]:
    return DEFAULT_CATALOGUE.stage_numbers(workflow_type)


def is_stage_visible(stage_number: int, workflow_type: WorkflowType) -> bool:
    return stage_number in get_stage_range(workflow_type)


def get_filtered_doc_types(workflow_type: WorkflowType) -> tuple[DocumentTypeSpec, ...]:
    return DEFAULT_CATALOGUE.documents_for_workflow(workflow_type)


def is_doc_type_allowed_for_workflow(key: str, workflow_type: WorkflowType) -> bool:
    return DEFAULT_CATALOGUE.is_doc_type_allowed_for_workflow(key, workflow_type)


def get_display_stage_number(stage_number: int, workflow_type: WorkflowType) -> int:
    """Internal stage number as shown to users (subdivision 10-16 -> 1-7)."""
    if WorkflowType.parse(workflow_type) is WorkflowType.SUBDIVISION:
        return stage_number - SUBDIVISION_DISPLAY_OFFSET
    return stage_number


def get_actual_stage_number(display_number: int, workflow_type: WorkflowType) -> int:
    """Inverse of get_display_stage_number."""
    if WorkflowType.parse(workflow_type) is WorkflowType.SUBDIVISION:
        return display_number + SUBDIVISION_DISPLAY_OFFSET
    return display_number


def get_display_range(workflow_type: WorkflowType) -> StageRange:
    stage_range = get_stage_range(workflow_type)
    return StageRange(
        get_display_stage_number(stage_range.min, workflow_type),
        get_display_stage_number(stage_range.max, workflow_type),
    )


def get_workflow_type(property_state: PropertyLifecycleState) -> WorkflowType:
    """
    Decide which workflow a property is in.

    Priority: subdivision started > handover started > purchase pipeline
    source > direct addition.
    """
    if property_state.subdivision_status and property_state.subdivision_status != "NOT_STARTED":
        return WorkflowType.SUBDIVISION
    if property_state.handover_status and property_state.handover_status != "NOT_STARTED":
        return WorkflowType.HANDOVER
    if property_state.property_source == "PURCHASE_PIPELINE":
        return WorkflowType.PURCHASE_PIPELINE
    return WorkflowType.DIRECT_ADDITION
