"""
Permission Level Resolver - Section/Detail Cascade Rules

Pure functions that change one level in a PermissionState and return a
new, internally consistent state.

Cascade rules:
- Section set to none: every detail becomes none
- Section set to view: details at edit are capped to view
- Section set to edit: details untouched
- Detail set to edit while section is below edit: section becomes edit
- Detail set to view while section is none: section becomes view
- Audit trail has no details: detail writes are no-ops

Escalation is one-way: a detail write widens its section, a section write
narrows its details. Snapshots written by other processes may be
inconsistent; the section touched by a write is always left consistent
(no detail above its section level).
"""

from __future__ import annotations

from lifecycle.permissions.schema import (
    DetailKey,
    DetailPermissions,
    PermissionLevel,
    PermissionState,
    Section,
    SectionPermission,
)


# =============================================================================
# Section Writes
# =============================================================================


def set_section_level(
    state: PermissionState,
    section: Section,
    level: PermissionLevel,
) -> PermissionState:
    """
    Set a section level and cascade it to the section's details.

    Args:
        state: Current permission snapshot
        section: Section to change
        level: New section level

    Returns:
        New PermissionState

    Raises:
        InvalidEnumValue: If section or level is not declared
    """
    section = Section.parse(section)
    level = PermissionLevel.parse(level)
    current = state.get(section)

    if level is PermissionLevel.NONE:
        details = DetailPermissions.uniform(PermissionLevel.NONE)
    else:
        # view caps edit details; edit leaves details as they are
        details = current.details.capped(level)

    return state.with_section(SectionPermission(section, level, details))


def set_all_sections(state: PermissionState, level: PermissionLevel) -> PermissionState:
    """Set every section, and every detail under it, to the same level."""
    level = PermissionLevel.parse(level)
    for section in Section:
        state = state.with_section(
            SectionPermission(section, level, DetailPermissions.uniform(level))
        )
    return state


# =============================================================================
# Detail Writes
# =============================================================================


def set_detail_level(
    state: PermissionState,
    section: Section,
    detail: DetailKey,
    level: PermissionLevel,
) -> PermissionState:
    """
    Set one detail level, widening the section when the detail needs it.

    Args:
        state: Current permission snapshot
        section: Section owning the detail
        detail: Detail to change
        level: New detail level

    Returns:
        New PermissionState (the same state for audit_trail)

    Raises:
        InvalidEnumValue: If section, detail or level is not declared
    """
    section = Section.parse(section)
    detail = DetailKey.parse(detail)
    level = PermissionLevel.parse(level)

    if not section.has_details:
        return state

    current = state.get(section)
    section_level = current.level

    if level is PermissionLevel.EDIT and section_level < PermissionLevel.EDIT:
        section_level = PermissionLevel.EDIT
    elif level is PermissionLevel.VIEW and section_level is PermissionLevel.NONE:
        section_level = PermissionLevel.VIEW

    # Written detail never exceeds the (possibly widened) section level,
    # so capping only repairs other details left inconsistent by outside writes.
    details = current.details.with_detail(detail, level).capped(section_level)

    return state.with_section(SectionPermission(section, section_level, details))


# =============================================================================
# Queries
# =============================================================================


def empty_state() -> PermissionState:
    """Every section and detail at none."""
    return PermissionState()


def has_any_permission(state: PermissionState) -> bool:
    """True if any section or detail is above none."""
    for permission in state.sections:
        if permission.level is not PermissionLevel.NONE:
            return True
        if permission.section.has_details and permission.details.highest is not PermissionLevel.NONE:
            return True
    return False


def check_invariants(state: PermissionState) -> list[str]:
    """
    List consistency violations in a snapshot.

    Returns an empty list when every section satisfies:
    - section none => every detail none
    - no detail above its section level
    """
    violations = []
    for permission in state.sections:
        if not permission.section.has_details:
            continue
        for detail, level in permission.details.items():
            if level <= permission.level:
                continue
            if permission.level is PermissionLevel.NONE:
                violations.append(
                    f"{permission.section.value}: section is none but "
                    f"{detail.value} is {level.value}"
                )
            else:
                violations.append(
                    f"{permission.section.value}: {detail.value} at {level.value} "
                    f"exceeds section level {permission.level.value}"
                )
    return violations
