"""
Sequential Stage Lock Resolver

A stage's internal checklist unlocks strictly in order: a requirement is
reachable only once every earlier requirement in the same checklist is
uploaded or marked N/A.
"""

from __future__ import annotations

from typing import Optional, Sequence

from lifecycle.stages.schema import DocumentStates, is_satisfied


def is_locked(
    doc_key: str,
    document_states: DocumentStates,
    ordered_keys: Sequence[str],
) -> bool:
    """
    Check whether a document slot is locked by the checklist order.

    Args:
        doc_key: Document key to check
        document_states: Current state per document key
        ordered_keys: The checklist, in unlock order

    Returns:
        False for keys outside the checklist and for the first key;
        otherwise True if any earlier key is unsatisfied
    """
    if doc_key not in ordered_keys:
        return False

    index = list(ordered_keys).index(doc_key)
    return any(
        not is_satisfied(document_states.get(key))
        for key in ordered_keys[:index]
    )


def get_next_required(
    document_states: DocumentStates,
    ordered_keys: Sequence[str],
) -> Optional[str]:
    """First unsatisfied key in checklist order, or None when all are satisfied."""
    for key in ordered_keys:
        if not is_satisfied(document_states.get(key)):
            return key
    return None


def get_lock_states(
    document_states: DocumentStates,
    ordered_keys: Sequence[str],
) -> dict[str, bool]:
    """Lock flag for every key of a checklist."""
    locks = {}
    blocked = False
    for key in ordered_keys:
        locks[key] = blocked
        if not is_satisfied(document_states.get(key)):
            blocked = True
    return locks
