"""
Document Store - Uploaded Files and N/A Markers per Property

The engine only reads document state. The in-memory store below doubles
as the development backend for the web app.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping, Optional

from lifecycle.stages.schema import DocumentStateEntry, DocumentStatus, document_states_from_dict


logger = logging.getLogger(__name__)


class DocumentStore(ABC):
    """Source of per-property document state."""

    @abstractmethod
    def get_document_states(self, property_id: str) -> dict[str, DocumentStateEntry]:
        """Return every known document state for a property."""

    def get_document_state(self, property_id: str, doc_key: str) -> Optional[DocumentStateEntry]:
        return self.get_document_states(property_id).get(doc_key)


class InMemoryDocumentStore(DocumentStore):
    """Document state kept in memory for development and tests."""

    def __init__(self, initial: Optional[Mapping[str, Mapping[str, Any]]] = None):
        self._states: dict[str, dict[str, DocumentStateEntry]] = {}
        for property_id, raw in (initial or {}).items():
            self._states[property_id] = document_states_from_dict(raw)

    def get_document_states(self, property_id: str) -> dict[str, DocumentStateEntry]:
        return dict(self._states.get(property_id, {}))

    def set_documents(self, property_id: str, doc_key: str, documents: Iterable[Any]) -> None:
        """Replace the uploaded files for a requirement, keeping its status."""
        states = self._states.setdefault(property_id, {})
        current = states.get(doc_key, DocumentStateEntry())
        states[doc_key] = DocumentStateEntry(documents=tuple(documents), status=current.status)
        logger.debug("Set %d document(s) for %s on %s", len(states[doc_key].documents), doc_key, property_id)

    def mark_na(self, property_id: str, doc_key: str, is_na: bool = True) -> None:
        states = self._states.setdefault(property_id, {})
        current = states.get(doc_key, DocumentStateEntry())
        states[doc_key] = DocumentStateEntry(documents=current.documents, status=DocumentStatus(is_na=is_na))

    def clear(self, property_id: str) -> None:
        self._states.pop(property_id, None)
