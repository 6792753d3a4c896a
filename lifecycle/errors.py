"""
Engine Exceptions

Enum-domain violations are programming errors and fail loudly.
Missing catalogue entries are never errors (they are simply not subject
to the rule being evaluated).
"""

from __future__ import annotations

from typing import Iterable, Optional


class LifecycleError(Exception):
    """Base class for all engine errors."""


class InvalidEnumValue(LifecycleError, ValueError):
    """Raised when a value lies outside its declared enum domain."""

    def __init__(self, enum_name: str, value: object, allowed: Optional[Iterable[str]] = None):
        self.enum_name = enum_name
        self.value = value
        self.allowed = tuple(allowed) if allowed is not None else ()
        message = f"Invalid {enum_name}: {value!r}"
        if self.allowed:
            message += f" (expected one of: {', '.join(self.allowed)})"
        super().__init__(message)


class PermissionAssignmentError(LifecycleError):
    """Raised when a permission assignment fails form validation."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
