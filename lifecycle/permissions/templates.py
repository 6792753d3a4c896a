"""
Role Templates - Predefined Permission Grants

Expands a named role into a complete PermissionState. Templates overwrite
the whole state; they never merge with what was there before.

Roles:
- admin: full edit access everywhere
- supervisor: view access everywhere
- staff: clerical access, edit on direct addition and handover with
  location and financials kept read-only
- member: view access to the acquisition, subdivision and handover
  workflows only
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Optional

from lifecycle.errors import InvalidEnumValue
from lifecycle.permissions.schema import (
    DetailPermissions,
    PermissionLevel,
    PermissionState,
    Section,
    SectionPermission,
)


NONE = PermissionLevel.NONE
VIEW = PermissionLevel.VIEW
EDIT = PermissionLevel.EDIT


class RoleTemplate(Enum):
    """Named permission template."""

    ADMIN = "admin"
    SUPERVISOR = "supervisor"
    STAFF = "staff"
    MEMBER = "member"

    @classmethod
    def parse(cls, value: Any) -> "RoleTemplate":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value == value.strip().lower():
                    return member
        raise InvalidEnumValue("RoleTemplate", value, [m.value for m in cls])


# Classification label for grants that match no template
CUSTOM_ROLE: Final[str] = "custom"


@dataclass(frozen=True)
class RoleTemplateInfo:
    """Display metadata for a template."""

    template: RoleTemplate
    name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {
            "key": self.template.value,
            "name": self.name,
            "description": self.description,
        }


ROLE_TEMPLATE_INFO: Final[tuple[RoleTemplateInfo, ...]] = (
    RoleTemplateInfo(
        RoleTemplate.ADMIN,
        "Administrator",
        "Full edit access to every section and detail",
    ),
    RoleTemplateInfo(
        RoleTemplate.SUPERVISOR,
        "Supervisor",
        "View-only access to every section and detail",
    ),
    RoleTemplateInfo(
        RoleTemplate.STAFF,
        "Staff",
        "Clerical access: edits direct additions and handovers, "
        "location and financials read-only",
    ),
    RoleTemplateInfo(
        RoleTemplate.MEMBER,
        "Member",
        "View access to purchase pipeline, subdivision and handover",
    ),
)


# =============================================================================
# Template Section Maps
# =============================================================================

MEMBER_SECTION_LEVELS: Final[dict[Section, PermissionLevel]] = {
    Section.DIRECT_ADDITION: NONE,
    Section.PURCHASE_PIPELINE: VIEW,
    Section.SUBDIVISION_PROCESS: VIEW,
    Section.PROPERTY_HANDOVER: VIEW,
    Section.AUDIT_TRAIL: NONE,
}

STAFF_SECTION_LEVELS: Final[dict[Section, PermissionLevel]] = {
    Section.DIRECT_ADDITION: EDIT,
    Section.PURCHASE_PIPELINE: VIEW,
    Section.SUBDIVISION_PROCESS: NONE,
    Section.PROPERTY_HANDOVER: EDIT,
    Section.AUDIT_TRAIL: NONE,
}

# Staff edit sections: clerical fields editable, sensitive fields read-only
STAFF_EDIT_DETAILS: Final[DetailPermissions] = DetailPermissions(
    basic_info=EDIT,
    location=VIEW,
    financials=VIEW,
    documents=EDIT,
)


def _uniform_state(level: PermissionLevel) -> PermissionState:
    return PermissionState.from_sections([
        SectionPermission(section, level, DetailPermissions.uniform(level))
        for section in Section
    ])


def _state_from_levels(
    levels: dict[Section, PermissionLevel],
    edit_details: Optional[DetailPermissions] = None,
) -> PermissionState:
    """Sections at edit get edit_details (all edit if omitted); others are uniform."""
    edit_details = edit_details or DetailPermissions.uniform(EDIT)
    sections = []
    for section in Section:
        level = levels[section]
        details = edit_details if level is EDIT else DetailPermissions.uniform(level)
        sections.append(SectionPermission(section, level, details))
    return PermissionState.from_sections(sections)


# =============================================================================
# Expansion
# =============================================================================


def apply_template(template: RoleTemplate) -> PermissionState:
    """
    Expand a role template into a complete permission state.

    Args:
        template: RoleTemplate or its string value

    Returns:
        New PermissionState satisfying the section/detail invariants

    Raises:
        InvalidEnumValue: If the template name is unknown
    """
    template = RoleTemplate.parse(template)

    if template is RoleTemplate.ADMIN:
        return _uniform_state(EDIT)
    if template is RoleTemplate.SUPERVISOR:
        return _uniform_state(VIEW)
    if template is RoleTemplate.MEMBER:
        return _state_from_levels(MEMBER_SECTION_LEVELS)
    return _state_from_levels(STAFF_SECTION_LEVELS, STAFF_EDIT_DETAILS)


def classify_state(state: PermissionState) -> str:
    """
    Classify a state by its section levels.

    Matches on section levels only, the way the permission table labels
    grants. Returns a RoleTemplate value or CUSTOM_ROLE.
    """
    levels = {permission.section: permission.level for permission in state.sections}

    if all(level is EDIT for level in levels.values()):
        return RoleTemplate.ADMIN.value
    if all(level is VIEW for level in levels.values()):
        return RoleTemplate.SUPERVISOR.value
    if levels == STAFF_SECTION_LEVELS:
        return RoleTemplate.STAFF.value
    if levels == MEMBER_SECTION_LEVELS:
        return RoleTemplate.MEMBER.value
    return CUSTOM_ROLE


def get_all_role_templates() -> list[dict[str, str]]:
    """Template metadata in display order."""
    return [info.to_dict() for info in ROLE_TEMPLATE_INFO]
