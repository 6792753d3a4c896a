"""
Property lifecycle stage gating and permission cascade engine.
"""

from lifecycle.errors import LifecycleError, InvalidEnumValue, PermissionAssignmentError
from lifecycle.engine import LifecycleEngine, PropertyStageReport

__all__ = [
    "LifecycleError",
    "InvalidEnumValue",
    "PermissionAssignmentError",
    "LifecycleEngine",
    "PropertyStageReport",
]
