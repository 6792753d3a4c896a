"""
Property Lifecycle - Granular Permission Module

Three-level (none/view/edit) access control over workflow sections and
the detail field-groups within each section, assigned per user either
globally or for a single property.

Principles:
1. Section writes narrow details, detail writes widen sections
2. Snapshots are immutable; every change returns a new state
3. Role templates overwrite, never merge
4. One grant per (user, scope), replaced in full on reassignment
"""

from lifecycle.permissions.schema import (
    PermissionLevel,
    Section,
    DetailKey,
    DetailPermissions,
    SectionPermission,
    PermissionState,
    UserPermissionGrant,
    SECTION_LABELS,
    GLOBAL_SCOPE,
)
from lifecycle.permissions.resolver import (
    set_section_level,
    set_detail_level,
    set_all_sections,
    empty_state,
    has_any_permission,
    check_invariants,
)
from lifecycle.permissions.templates import (
    RoleTemplate,
    RoleTemplateInfo,
    ROLE_TEMPLATE_INFO,
    CUSTOM_ROLE,
    apply_template,
    classify_state,
    get_all_role_templates,
)
from lifecycle.permissions.actions import (
    SetSectionLevel,
    SetDetailLevel,
    SetAllSections,
    ApplyTemplate,
    ResetPermissions,
    PermissionAction,
    reduce,
    reduce_all,
    action_from_dict,
)
from lifecycle.permissions.access import (
    find_effective_grant,
    resolve_permission,
    can_view,
    can_edit,
)
from lifecycle.permissions.repository import (
    KeyValueStore,
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    AssignedUser,
    PermissionRepository,
    get_permission_repository,
    reset_permission_repository,
    GRANTS_KEY,
)

__all__ = [
    # Schema
    "PermissionLevel",
    "Section",
    "DetailKey",
    "DetailPermissions",
    "SectionPermission",
    "PermissionState",
    "UserPermissionGrant",
    "SECTION_LABELS",
    "GLOBAL_SCOPE",
    # Resolver
    "set_section_level",
    "set_detail_level",
    "set_all_sections",
    "empty_state",
    "has_any_permission",
    "check_invariants",
    # Templates
    "RoleTemplate",
    "RoleTemplateInfo",
    "ROLE_TEMPLATE_INFO",
    "CUSTOM_ROLE",
    "apply_template",
    "classify_state",
    "get_all_role_templates",
    # Reducer
    "SetSectionLevel",
    "SetDetailLevel",
    "SetAllSections",
    "ApplyTemplate",
    "ResetPermissions",
    "PermissionAction",
    "reduce",
    "reduce_all",
    "action_from_dict",
    # Access
    "find_effective_grant",
    "resolve_permission",
    "can_view",
    "can_edit",
    # Repository
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "AssignedUser",
    "PermissionRepository",
    "get_permission_repository",
    "reset_permission_repository",
    "GRANTS_KEY",
]
