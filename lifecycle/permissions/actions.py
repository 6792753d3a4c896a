"""
Permission Form Reducer

Every change to a permission form is an action applied to an immutable
snapshot. reduce() never mutates its input, so re-entrant callers cannot
see each other's partial updates.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from lifecycle.errors import InvalidEnumValue
from lifecycle.permissions.resolver import (
    empty_state,
    set_all_sections,
    set_detail_level,
    set_section_level,
)
from lifecycle.permissions.schema import DetailKey, PermissionLevel, PermissionState, Section
from lifecycle.permissions.templates import RoleTemplate, apply_template


@dataclass(frozen=True)
class SetSectionLevel:
    section: Section
    level: PermissionLevel


@dataclass(frozen=True)
class SetDetailLevel:
    section: Section
    detail: DetailKey
    level: PermissionLevel


@dataclass(frozen=True)
class SetAllSections:
    level: PermissionLevel


@dataclass(frozen=True)
class ApplyTemplate:
    template: RoleTemplate


@dataclass(frozen=True)
class ResetPermissions:
    pass


PermissionAction = Union[
    SetSectionLevel,
    SetDetailLevel,
    SetAllSections,
    ApplyTemplate,
    ResetPermissions,
]


def reduce(state: PermissionState, action: PermissionAction) -> PermissionState:
    """Apply one action to a snapshot and return the new snapshot."""
    if isinstance(action, SetSectionLevel):
        return set_section_level(state, action.section, action.level)
    if isinstance(action, SetDetailLevel):
        return set_detail_level(state, action.section, action.detail, action.level)
    if isinstance(action, SetAllSections):
        return set_all_sections(state, action.level)
    if isinstance(action, ApplyTemplate):
        return apply_template(action.template)
    if isinstance(action, ResetPermissions):
        return empty_state()
    raise TypeError(f"Unsupported permission action: {type(action).__name__}")


def reduce_all(state: PermissionState, actions: list[PermissionAction]) -> PermissionState:
    for action in actions:
        state = reduce(state, action)
    return state


ACTION_TYPES = {
    "set_section_level": SetSectionLevel,
    "set_detail_level": SetDetailLevel,
    "set_all_sections": SetAllSections,
    "apply_template": ApplyTemplate,
    "reset": ResetPermissions,
}


def action_from_dict(data: dict[str, Any]) -> PermissionAction:
    """
    Build an action from its wire form.

    Example: {"type": "set_detail_level", "section": "purchase_pipeline",
    "detail": "financials", "level": "edit"}
    """
    action_type = data.get("type")
    if action_type not in ACTION_TYPES:
        raise InvalidEnumValue("PermissionAction", action_type, ACTION_TYPES)

    if action_type == "set_section_level":
        return SetSectionLevel(
            section=Section.parse(data.get("section")),
            level=PermissionLevel.parse(data.get("level")),
        )
    if action_type == "set_detail_level":
        return SetDetailLevel(
            section=Section.parse(data.get("section")),
            detail=DetailKey.parse(data.get("detail")),
            level=PermissionLevel.parse(data.get("level")),
        )
    if action_type == "set_all_sections":
        return SetAllSections(level=PermissionLevel.parse(data.get("level")))
    if action_type == "apply_template":
        return ApplyTemplate(template=RoleTemplate.parse(data.get("template")))
    return ResetPermissions()
