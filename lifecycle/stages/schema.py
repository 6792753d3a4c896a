"""
Stage Schema - Document State, Financial Status and Workflow Types

A document requirement is satisfied when at least one file has been
uploaded for it or it has been marked not applicable (N/A). Every gating
rule in this package uses that single predicate.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from lifecycle.errors import InvalidEnumValue


# =============================================================================
# Enums
# =============================================================================


class WorkflowType(Enum):
    """Property lifecycle workflow."""

    DIRECT_ADDITION = "direct_addition"
    PURCHASE_PIPELINE = "purchase_pipeline"
    SUBDIVISION = "subdivision"
    HANDOVER = "handover"

    @classmethod
    def parse(cls, value: Any) -> "WorkflowType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            normalised = value.strip().lower()
            for member in cls:
                if member.value == normalised:
                    return member
        raise InvalidEnumValue("WorkflowType", value, [m.value for m in cls])


# =============================================================================
# Stage Range
# =============================================================================


@dataclass(frozen=True)
class StageRange:
    """Inclusive range of internal stage numbers."""

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"Invalid stage range {self.min}-{self.max}")

    def __contains__(self, stage_number: object) -> bool:
        return isinstance(stage_number, int) and self.min <= stage_number <= self.max

    @property
    def numbers(self) -> tuple[int, ...]:
        return tuple(range(self.min, self.max + 1))

    def to_dict(self) -> dict[str, int]:
        return {"min": self.min, "max": self.max}


# =============================================================================
# Document State
# =============================================================================


@dataclass(frozen=True)
class DocumentStatus:
    """Per-requirement status flags."""

    is_na: bool = False


@dataclass(frozen=True)
class DocumentStateEntry:
    """
    Uploaded files and status for one document requirement.

    Only the number of documents matters here, not their contents.
    """

    documents: tuple = ()
    status: Optional[DocumentStatus] = None

    @property
    def is_na(self) -> bool:
        return bool(self.status and self.status.is_na)

    @property
    def document_count(self) -> int:
        return len(self.documents)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "DocumentStateEntry":
        """Build from the document store's wire form; status may be null."""
        if not data:
            return cls()
        status = data.get("status")
        return cls(
            documents=tuple(data.get("documents") or ()),
            status=DocumentStatus(is_na=bool(status.get("is_na"))) if status else None,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "documents": list(self.documents),
            "status": {"is_na": self.status.is_na} if self.status else None,
        }


DocumentStates = Mapping[str, DocumentStateEntry]


def is_satisfied(entry: Optional[DocumentStateEntry]) -> bool:
    """A requirement is satisfied by an upload or an N/A marker."""
    if entry is None:
        return False
    return entry.document_count > 0 or entry.is_na


def document_states_from_dict(data: Mapping[str, Any]) -> dict[str, DocumentStateEntry]:
    """Convert a raw {doc_key: {...}} mapping into typed entries."""
    return {key: DocumentStateEntry.from_dict(value) for key, value in data.items()}


# =============================================================================
# Financial Status
# =============================================================================


@dataclass(frozen=True)
class StageFinancialStatus:
    """
    Ledger verdict for one stage.

    Amounts are carried for display only; gating reads the boolean.
    """

    is_financially_complete: bool
    total_paid: Optional[float] = None
    total_required: Optional[float] = None
    pending_amount: Optional[float] = None

    @classmethod
    def not_required(cls) -> "StageFinancialStatus":
        """Status for a stage with no payment obligations."""
        return cls(is_financially_complete=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_financially_complete": self.is_financially_complete,
            "total_paid": self.total_paid,
            "total_required": self.total_required,
            "pending_amount": self.pending_amount,
        }


# =============================================================================
# Property Snapshot
# =============================================================================


@dataclass(frozen=True)
class PropertyLifecycleState:
    """Lifecycle fields used to decide a property's active workflow."""

    property_id: str
    property_source: str = "DIRECT_ADDITION"
    subdivision_status: Optional[str] = None
    handover_status: Optional[str] = None
