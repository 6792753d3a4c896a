"""
Effective access lookup for a user across global and property grants.
"""

from __future__ import annotations

from typing import Iterable, Optional

from lifecycle.permissions.schema import (
    DetailKey,
    PermissionLevel,
    Section,
    UserPermissionGrant,
)


def find_effective_grant(
    grants: Iterable[UserPermissionGrant],
    user_id: str,
    property_id: Optional[str] = None,
) -> Optional[UserPermissionGrant]:
    """
    Pick the grant that governs a user for a property.

    A grant scoped to the property replaces the user's global grant;
    without either the user has no grant.
    """
    global_grant = None
    for grant in grants:
        if grant.user_id != user_id:
            continue
        if property_id is not None and grant.property_id == property_id:
            return grant
        if grant.is_global:
            global_grant = grant
    return global_grant


def resolve_permission(
    grants: Iterable[UserPermissionGrant],
    user_id: str,
    section: Section,
    detail: Optional[DetailKey] = None,
    property_id: Optional[str] = None,
) -> PermissionLevel:
    """
    Effective level for a (section, detail) pair.

    Detail levels never exceed their section level, even when the stored
    snapshot is inconsistent. audit_trail ignores the detail argument.
    """
    section = Section.parse(section)
    grant = find_effective_grant(grants, user_id, property_id)
    if grant is None:
        return PermissionLevel.NONE

    permission = grant.state.get(section)
    if detail is None or not section.has_details:
        return permission.level
    return min(permission.detail_level(DetailKey.parse(detail)), permission.level)


def can_view(grants, user_id, section, detail=None, property_id=None) -> bool:
    return resolve_permission(grants, user_id, section, detail, property_id) >= PermissionLevel.VIEW


def can_edit(grants, user_id, section, detail=None, property_id=None) -> bool:
    return resolve_permission(grants, user_id, section, detail, property_id) is PermissionLevel.EDIT
