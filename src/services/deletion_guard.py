"""Referential-integrity check before removing a category."""

import logging
from dataclasses import dataclass

from src.config import get_settings
from src.services.collection_cache import CollectionCache
from src.services.errors import DeleteError, DeleteReason, StoreError

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    """A completed deletion."""

    id: str
    name: str | None


class DeletionGuard:
    """Blocks deletion of categories still referenced by articles.

    There is no cross-collection transaction: an article created between the
    check and the delete is not detected. Deletion never cascades and leaves
    a gap in sort_order that is not renumbered.
    """

    def __init__(self, cache: CollectionCache, referencing_collection: str | None = None):
        self.cache = cache
        self.referencing_collection = (
            referencing_collection or get_settings().articles_collection
        )

    def can_delete(self, record_id: str) -> bool:
        """True unless at least one referencing record points at ``record_id``."""
        try:
            rows = self.cache.store.query(
                self.referencing_collection, {"category": record_id}, limit=1
            )
        except StoreError as e:
            raise DeleteError(DeleteReason.STORE_FAILURE, str(e), cause=e) from e
        return not rows

    def delete(self, record_id: str) -> DeleteResult:
        if not self.can_delete(record_id):
            logger.warning(
                f"Refusing to delete {record_id}: referenced by {self.referencing_collection}"
            )
            raise DeleteError(
                DeleteReason.IN_USE,
                f"Category {record_id} is still used by {self.referencing_collection}",
            )

        try:
            self.cache.store.delete(self.cache.collection, record_id)
        except StoreError as e:
            raise DeleteError(DeleteReason.STORE_FAILURE, str(e), cause=e) from e

        record = self.cache.get(record_id)
        self.cache.remove(record_id)
        logger.info(f"Deleted {self.cache.collection} record {record_id}")
        return DeleteResult(id=record_id, name=record.name if record else None)
