"""In-memory canonical category list."""

import logging

from pydantic import ValidationError

from src.config import get_settings
from src.schemas.category import CategoryRecord
from src.services.errors import LoadError, StoreError
from src.services.record_store import RecordStore

logger = logging.getLogger(__name__)


class CollectionCache:
    """The ordered category sequence every other component reads from.

    ``upsert`` and ``remove`` are the only mutators. They do not enforce
    ``sort_order`` contiguity; that only holds once a reorder commit has
    fully completed.
    """

    def __init__(self, store: RecordStore, collection: str | None = None):
        self.store = store
        self.collection = collection or get_settings().categories_collection
        self._records: dict[str, CategoryRecord] = {}
        self.version = 0

    def load(self) -> None:
        """Replace the cache with a full fetch ordered by sort_order."""
        try:
            rows = self.store.list(self.collection, order_by="sort_order")
        except StoreError as e:
            logger.error(f"Failed to load {self.collection}: {e}")
            raise LoadError(e) from e

        try:
            records = [CategoryRecord.model_validate(row) for row in rows]
        except ValidationError as e:
            logger.error(f"Malformed record in {self.collection}: {e}")
            raise LoadError(e) from e

        self._records = {record.id: record for record in records}
        self.version += 1
        logger.info(f"Loaded {len(self._records)} records from {self.collection}")

    def upsert(self, record: CategoryRecord) -> None:
        self._records[record.id] = record
        self.version += 1

    def remove(self, record_id: str) -> None:
        if self._records.pop(record_id, None) is not None:
            self.version += 1

    def get(self, record_id: str) -> CategoryRecord | None:
        return self._records.get(record_id)

    def snapshot(self) -> tuple[CategoryRecord, ...]:
        """Records ordered by sort_order ascending, ties in insertion order."""
        return tuple(sorted(self._records.values(), key=lambda r: r.sort_order))

    def ids(self) -> list[str]:
        return [record.id for record in self.snapshot()]

    def next_sort_order(self) -> int:
        """The position after the current last record."""
        if not self._records:
            return 0
        return max(record.sort_order for record in self._records.values()) + 1

    def slug_taken(self, slug: str, exclude_id: str | None = None) -> bool:
        return any(
            record.slug == slug and record.id != exclude_id for record in self._records.values()
        )

    def sort_order_taken(self, sort_order: int) -> bool:
        return any(record.sort_order == sort_order for record in self._records.values())

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records
