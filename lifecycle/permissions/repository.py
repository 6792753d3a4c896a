"""
Permission Repository - Grant Storage with Full-Replace Semantics

Grants are kept per (user, scope). Saving a grant for a (user, scope)
pair replaces the previous grant for that pair in full; nothing is
merged. Storage goes through an injected key-value store so the
repository does not care where the bytes live.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Final, Optional

from lifecycle.errors import PermissionAssignmentError
from lifecycle.permissions.resolver import check_invariants, has_any_permission
from lifecycle.permissions.schema import GLOBAL_SCOPE, PermissionState, UserPermissionGrant


logger = logging.getLogger(__name__)

# Key under which grants are stored
GRANTS_KEY: Final[str] = "granular_permissions"


# =============================================================================
# Key-Value Stores
# =============================================================================


class KeyValueStore(ABC):
    """Minimal load/save store for JSON-serialisable values."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the stored value, or None if absent."""

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store a value, replacing any previous value."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._data: dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any) -> None:
        # Serialise so callers never share nested references with the store
        self._data[key] = json.dumps(value)


class JsonFileKeyValueStore(KeyValueStore):
    """
    Store backed by a single JSON file.

    An unreadable file is logged and treated as empty.
    """

    def __init__(self, persist_path: str):
        self._persist_path = Path(persist_path)

    def _read(self) -> dict[str, Any]:
        if not self._persist_path.exists():
            return {}
        try:
            data = json.loads(self._persist_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load key-value data from %s: %s", self._persist_path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def load(self, key: str) -> Optional[Any]:
        return self._read().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        data["saved_at"] = datetime.utcnow().isoformat()
        self._persist_path.parent.mkdir(parents=True, exist_ok=True)
        self._persist_path.write_text(json.dumps(data, indent=2))


# =============================================================================
# Repository
# =============================================================================


@dataclass(frozen=True)
class AssignedUser:
    """A user selected for a permission assignment."""

    user_id: str
    email: str


class PermissionRepository:
    """
    Repository for user permission grants.

    Scopes:
        None            every grant
        GLOBAL_SCOPE    global grants only
        <property_id>   grants for that property only
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store or InMemoryKeyValueStore()

    def _load_all(self) -> list[UserPermissionGrant]:
        raw = self._store.load(GRANTS_KEY) or []
        grants = []
        for item in raw:
            try:
                grants.append(UserPermissionGrant.from_dict(item))
            except (KeyError, ValueError) as e:
                logger.warning("Skipping unreadable permission grant: %s", e)
        return grants

    def _save_all(self, grants: list[UserPermissionGrant]) -> None:
        self._store.save(GRANTS_KEY, [grant.to_dict() for grant in grants])

    # =========================================================================
    # Query Operations
    # =========================================================================

    def load_grants(self, scope: Optional[str] = None) -> list[UserPermissionGrant]:
        """
        Load grants for a scope.

        Args:
            scope: None for all, GLOBAL_SCOPE, or a property ID

        Returns:
            Grants in stored order
        """
        grants = self._load_all()
        if scope is None:
            return grants
        if scope == GLOBAL_SCOPE:
            return [grant for grant in grants if grant.is_global]
        return [grant for grant in grants if grant.property_id == scope]

    def get_grant(self, user_id: str, property_id: Optional[str] = None) -> Optional[UserPermissionGrant]:
        """Grant for exactly this (user, property) pair."""
        for grant in self._load_all():
            if grant.key == (user_id, property_id):
                return grant
        return None

    def load_grants_for_user(self, user_id: str) -> list[UserPermissionGrant]:
        return [grant for grant in self._load_all() if grant.user_id == user_id]

    # =========================================================================
    # Command Operations
    # =========================================================================

    def save_grants(self, grants: list[UserPermissionGrant]) -> None:
        """
        Save grants, replacing any existing grant with the same (user, property).

        Existing grants keep their position; new grants are appended.
        """
        existing = self._load_all()
        index_by_key = {grant.key: i for i, grant in enumerate(existing)}

        for grant in grants:
            violations = check_invariants(grant.state)
            if violations:
                logger.warning(
                    "Saving inconsistent grant for %s (%s): %s",
                    grant.user_id,
                    grant.scope,
                    violations,
                )
            if grant.key in index_by_key:
                existing[index_by_key[grant.key]] = grant
            else:
                index_by_key[grant.key] = len(existing)
                existing.append(grant)

        self._save_all(existing)
        logger.info("Saved %d permission grant(s)", len(grants))

    def assign(
        self,
        users: list[AssignedUser],
        state: PermissionState,
        property_id: Optional[str] = None,
        assigned_by: Optional[str] = None,
    ) -> list[UserPermissionGrant]:
        """
        Assign one permission state to several users for one scope.

        Raises:
            PermissionAssignmentError: If no users are selected, the state
                grants nothing, or the property ID is the reserved global scope
        """
        errors = []
        if not users:
            errors.append("Please select at least one user")
        if not has_any_permission(state):
            errors.append("Please grant at least one permission")
        if property_id == GLOBAL_SCOPE:
            errors.append(f"Property ID '{GLOBAL_SCOPE}' is reserved for global grants")
        if errors:
            raise PermissionAssignmentError(errors)

        assigned_at = datetime.utcnow()
        grants = [
            UserPermissionGrant(
                user_id=user.user_id,
                email=user.email,
                state=state,
                property_id=property_id,
                assigned_at=assigned_at,
                assigned_by=assigned_by,
            )
            for user in users
        ]
        self.save_grants(grants)
        return grants

    def delete_grant(self, user_id: str, property_id: Optional[str] = None) -> bool:
        """
        Delete the grant for a (user, scope) pair.

        Returns:
            True if deleted, False if not found
        """
        grants = self._load_all()
        remaining = [grant for grant in grants if grant.key != (user_id, property_id)]
        if len(remaining) == len(grants):
            return False
        self._save_all(remaining)
        logger.info("Deleted permission grant for %s (%s)", user_id, property_id or GLOBAL_SCOPE)
        return True


# =============================================================================
# Singleton Instance
# =============================================================================

_repository_instance: Optional[PermissionRepository] = None


def get_permission_repository(persist_path: Optional[str] = None) -> PermissionRepository:
    """
    Get the permission repository singleton.

    Args:
        persist_path: Optional JSON file path (only used on first call)
    """
    global _repository_instance
    if _repository_instance is None:
        store = JsonFileKeyValueStore(persist_path) if persist_path else InMemoryKeyValueStore()
        _repository_instance = PermissionRepository(store)
    return _repository_instance


def reset_permission_repository() -> None:
    """Reset the singleton (for testing)."""
    global _repository_instance
    _repository_instance = None
