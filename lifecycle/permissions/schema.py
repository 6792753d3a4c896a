"""
Permission Schema - Section and Detail Access Levels

Defines the three-level permission hierarchy and the fixed-shape records
that hold it:

- PermissionLevel: none < view < edit
- DetailPermissions: one level per detail field-group
- SectionPermission: a section level plus its detail levels
- PermissionState: exactly one SectionPermission per section
- UserPermissionGrant: a state assigned to a user, globally or per property

Every record is immutable. Changes produce new records (see resolver.py).
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Final, Iterator, Optional

from lifecycle.errors import InvalidEnumValue


# =============================================================================
# Enums
# =============================================================================


class PermissionLevel(Enum):
    """Access level, totally ordered none < view < edit."""

    NONE = "none"
    VIEW = "view"
    EDIT = "edit"

    @property
    def rank(self) -> int:
        return _LEVEL_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, PermissionLevel):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: Any) -> "PermissionLevel":
        """Convert a level or its string value, raising on anything else."""
        return _parse_enum(cls, value, "PermissionLevel")


_LEVEL_RANK: Final[dict[PermissionLevel, int]] = {
    PermissionLevel.NONE: 0,
    PermissionLevel.VIEW: 1,
    PermissionLevel.EDIT: 2,
}


class Section(Enum):
    """Top-level workflow area subject to a permission level."""

    DIRECT_ADDITION = "direct_addition"
    PURCHASE_PIPELINE = "purchase_pipeline"
    SUBDIVISION_PROCESS = "subdivision_process"
    PROPERTY_HANDOVER = "property_handover"
    AUDIT_TRAIL = "audit_trail"

    @property
    def has_details(self) -> bool:
        """Audit trail exposes no detail controls."""
        return self is not Section.AUDIT_TRAIL

    @classmethod
    def parse(cls, value: Any) -> "Section":
        return _parse_enum(cls, value, "Section")


class DetailKey(Enum):
    """Field-group within a section."""

    BASIC_INFO = "basic_info"
    LOCATION = "location"
    FINANCIALS = "financials"
    DOCUMENTS = "documents"

    @classmethod
    def parse(cls, value: Any) -> "DetailKey":
        return _parse_enum(cls, value, "DetailKey")


def _parse_enum(enum_cls, value: Any, name: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        for member in enum_cls:
            if member.value == normalised:
                return member
    raise InvalidEnumValue(name, value, [m.value for m in enum_cls])


# Display names used by the permission manager
SECTION_LABELS: Final[dict[Section, str]] = {
    Section.DIRECT_ADDITION: "Direct Addition",
    Section.PURCHASE_PIPELINE: "Purchase Pipeline",
    Section.SUBDIVISION_PROCESS: "Subdivision Process",
    Section.PROPERTY_HANDOVER: "Property Handover",
    Section.AUDIT_TRAIL: "Audit Trail",
}

# Scope value for grants that apply to every property
GLOBAL_SCOPE: Final[str] = "global"


# =============================================================================
# Detail Permissions
# =============================================================================


@dataclass(frozen=True)
class DetailPermissions:
    """One level per detail key. Field names mirror DetailKey values."""

    basic_info: PermissionLevel = PermissionLevel.NONE
    location: PermissionLevel = PermissionLevel.NONE
    financials: PermissionLevel = PermissionLevel.NONE
    documents: PermissionLevel = PermissionLevel.NONE

    def __post_init__(self) -> None:
        for f in fields(self):
            object.__setattr__(self, f.name, PermissionLevel.parse(getattr(self, f.name)))

    @classmethod
    def uniform(cls, level: PermissionLevel) -> "DetailPermissions":
        """All details at the same level."""
        return cls(level, level, level, level)

    def get(self, detail: DetailKey) -> PermissionLevel:
        return getattr(self, DetailKey.parse(detail).value)

    def with_detail(self, detail: DetailKey, level: PermissionLevel) -> "DetailPermissions":
        return replace(self, **{DetailKey.parse(detail).value: PermissionLevel.parse(level)})

    def capped(self, ceiling: PermissionLevel) -> "DetailPermissions":
        """Lower every detail above the ceiling down to it."""
        return DetailPermissions(**{
            detail.value: min(level, ceiling) for detail, level in self.items()
        })

    def items(self) -> Iterator[tuple[DetailKey, PermissionLevel]]:
        for detail in DetailKey:
            yield detail, getattr(self, detail.value)

    @property
    def highest(self) -> PermissionLevel:
        return max(level for _, level in self.items())

    def to_dict(self) -> dict[str, str]:
        return {detail.value: level.value for detail, level in self.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "DetailPermissions":
        for key in data:
            DetailKey.parse(key)
        return cls(**{
            detail.value: PermissionLevel.parse(data.get(detail.value, PermissionLevel.NONE))
            for detail in DetailKey
        })


# =============================================================================
# Section Permission
# =============================================================================


@dataclass(frozen=True)
class SectionPermission:
    """
    Permission for one section.

    For audit_trail the details are held at none and never exposed
    or serialised.
    """

    section: Section
    level: PermissionLevel = PermissionLevel.NONE
    details: DetailPermissions = field(default_factory=DetailPermissions)

    def __post_init__(self) -> None:
        object.__setattr__(self, "section", Section.parse(self.section))
        object.__setattr__(self, "level", PermissionLevel.parse(self.level))
        if not self.section.has_details:
            object.__setattr__(self, "details", DetailPermissions())

    def detail_level(self, detail: DetailKey) -> PermissionLevel:
        """Level of one detail; audit_trail details are always none."""
        return self.details.get(detail)

    def to_dict(self) -> dict[str, Any]:
        return {
            "section": self.section.value,
            "level": self.level.value,
            "details": self.details.to_dict() if self.section.has_details else {},
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SectionPermission":
        section = Section.parse(data["section"])
        details = DetailPermissions()
        if section.has_details:
            details = DetailPermissions.from_dict(data.get("details") or {})
        return cls(
            section=section,
            level=PermissionLevel.parse(data.get("level", PermissionLevel.NONE)),
            details=details,
        )


# =============================================================================
# Permission State
# =============================================================================


def _empty(section: Section):
    return field(default_factory=lambda: SectionPermission(section))


@dataclass(frozen=True)
class PermissionState:
    """
    Complete section/detail permission snapshot.

    Exactly one SectionPermission per Section; field names mirror
    Section values.
    """

    direct_addition: SectionPermission = _empty(Section.DIRECT_ADDITION)
    purchase_pipeline: SectionPermission = _empty(Section.PURCHASE_PIPELINE)
    subdivision_process: SectionPermission = _empty(Section.SUBDIVISION_PROCESS)
    property_handover: SectionPermission = _empty(Section.PROPERTY_HANDOVER)
    audit_trail: SectionPermission = _empty(Section.AUDIT_TRAIL)

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value.section.value != f.name:
                raise ValueError(
                    f"Section record for {value.section.value} stored under {f.name}"
                )

    def get(self, section: Section) -> SectionPermission:
        return getattr(self, Section.parse(section).value)

    def with_section(self, permission: SectionPermission) -> "PermissionState":
        return replace(self, **{permission.section.value: permission})

    @property
    def sections(self) -> tuple[SectionPermission, ...]:
        """Section records in declaration order."""
        return tuple(self.get(section) for section in Section)

    def to_list(self) -> list[dict[str, Any]]:
        return [permission.to_dict() for permission in self.sections]

    @classmethod
    def from_sections(cls, sections: list[SectionPermission]) -> "PermissionState":
        """Build a state; sections not listed default to none."""
        return cls(**{permission.section.value: permission for permission in sections})

    @classmethod
    def from_list(cls, data: list[dict]) -> "PermissionState":
        return cls.from_sections([SectionPermission.from_dict(item) for item in data])


# =============================================================================
# User Permission Grant
# =============================================================================


@dataclass(frozen=True)
class UserPermissionGrant:
    """
    A permission state assigned to one user for one scope.

    property_id None means the grant applies to every property.
    """

    user_id: str
    email: str
    state: PermissionState
    property_id: Optional[str] = None
    assigned_at: datetime = field(default_factory=datetime.utcnow)
    assigned_by: Optional[str] = None

    @property
    def is_global(self) -> bool:
        return self.property_id is None

    @property
    def scope(self) -> str:
        """GLOBAL_SCOPE or the property ID."""
        return GLOBAL_SCOPE if self.property_id is None else self.property_id

    @property
    def key(self) -> tuple[str, Optional[str]]:
        """Replacement key: one grant per (user, property), None for global."""
        return (self.user_id, self.property_id)

    @property
    def sections(self) -> tuple[SectionPermission, ...]:
        return self.state.sections

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "property_id": self.property_id,
            "is_global": self.is_global,
            "sections": self.state.to_list(),
            "assigned_at": self.assigned_at.isoformat(),
            "assigned_by": self.assigned_by,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UserPermissionGrant":
        assigned_at = data.get("assigned_at")
        return cls(
            user_id=data["user_id"],
            email=data["email"],
            state=PermissionState.from_list(data.get("sections", [])),
            property_id=data.get("property_id"),
            assigned_at=datetime.fromisoformat(assigned_at) if assigned_at else datetime.utcnow(),
            assigned_by=data.get("assigned_by"),
        )
