"""Persist recomputed sequence keys one record at a time."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.schemas.notification import StatusNotification
from src.services.collection_cache import CollectionCache
from src.services.errors import StoreError, SyncError
from src.services.reorder import SortOrderAssignment
from src.services.status import StatusReporter

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    """Outcome of a fully applied commit."""

    committed: int
    applied: list[SortOrderAssignment]
    notification: StatusNotification | None = None


class SequenceSynchronizer:
    """Writes sort_order updates sequentially against a non-transactional store.

    This is deliberately not a batch: each update must complete before the
    next is sent so that, on failure, the number of durable leading updates
    is known exactly. Nothing already written is rolled back.
    """

    def __init__(self, cache: CollectionCache, reporter: StatusReporter | None = None):
        self.cache = cache
        self.reporter = reporter

    def commit(self, mapping: Sequence[SortOrderAssignment]) -> CommitResult:
        committed = 0
        for assignment in mapping:
            try:
                self.cache.store.update(
                    self.cache.collection,
                    assignment.id,
                    {"sort_order": assignment.sort_order},
                )
            except StoreError as e:
                logger.error(
                    f"Sort order commit stopped at {committed}/{len(mapping)} "
                    f"({assignment.id}): {e}"
                )
                self._reconcile(mapping[:committed])
                raise SyncError(committed, e) from e
            committed += 1

        self._reconcile(mapping)
        logger.info(f"Committed {committed} sort order updates to {self.cache.collection}")

        notification = None
        if self.reporter is not None:
            notification = self.reporter.success("Categories reordered successfully")
        return CommitResult(committed=committed, applied=list(mapping), notification=notification)

    def _reconcile(self, applied: Sequence[SortOrderAssignment]) -> None:
        """Apply durable assignments to the cache."""
        for assignment in applied:
            record = self.cache.get(assignment.id)
            if record is None:
                continue
            self.cache.upsert(record.model_copy(update={"sort_order": assignment.sort_order}))
