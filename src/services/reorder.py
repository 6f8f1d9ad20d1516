"""Single-element move within the category order."""

import logging
from typing import NamedTuple

from src.services.collection_cache import CollectionCache
from src.services.errors import ReorderError, ReorderReason

logger = logging.getLogger(__name__)


class SortOrderAssignment(NamedTuple):
    """A record's new sequence key."""

    id: str
    sort_order: int


def compute_order(ids: list[str], source_id: str, target_id: str) -> list[str]:
    """Move ``source_id`` into the slot ``target_id`` occupies.

    The target's index is taken before the source is removed, so the source
    lands in front of the target when moving up and behind it when moving down.
    """
    for record_id in (source_id, target_id):
        if record_id not in ids:
            raise ReorderError(ReorderReason.NOT_FOUND, record_id)

    if source_id == target_id:
        return list(ids)

    target_index = ids.index(target_id)
    reordered = [record_id for record_id in ids if record_id != source_id]
    reordered.insert(target_index, source_id)
    return reordered


class ReorderEngine:
    """Computes sequence keys for drag-and-drop moves.

    Holds the pending drag (the lifted record id) and nothing else; the cache
    is only read.
    """

    def __init__(self, cache: CollectionCache):
        self.cache = cache
        self.pending_id: str | None = None

    def reorder(self, source_id: str, target_id: str) -> list[SortOrderAssignment]:
        """Return the new sort_order of every record whose position changes.

        Assignments come in new display order. Moving a record onto itself
        changes nothing and returns an empty list.
        """
        snapshot = self.cache.snapshot()
        current = {record.id: record.sort_order for record in snapshot}
        new_order = compute_order([record.id for record in snapshot], source_id, target_id)
        if source_id == target_id:
            return []

        return [
            SortOrderAssignment(record_id, position)
            for position, record_id in enumerate(new_order)
            if current[record_id] != position
        ]

    def lift(self, record_id: str) -> None:
        """Start dragging a record."""
        if record_id not in self.cache:
            raise ReorderError(ReorderReason.NOT_FOUND, record_id)
        self.pending_id = record_id

    def cancel(self) -> None:
        """Abandon the drag without touching the store."""
        self.pending_id = None

    def drop(self, target_id: str) -> list[SortOrderAssignment]:
        """Finish the drag on ``target_id``; the pending id is always cleared."""
        source_id = self.pending_id
        try:
            if source_id is None:
                logger.debug(f"Drop on {target_id} with nothing lifted")
                return []
            return self.reorder(source_id, target_id)
        finally:
            self.pending_id = None
