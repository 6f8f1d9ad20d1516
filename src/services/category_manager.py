"""Category list management: the boundary where engine errors become notifications."""

import logging
import re
import threading
from dataclasses import dataclass, field
from typing import Any

from src.config import get_settings
from src.schemas.category import CategoryRecord
from src.schemas.notification import StatusNotification
from src.services.collection_cache import CollectionCache
from src.services.deletion_guard import DeletionGuard
from src.services.errors import (
    CategoryEngineError,
    DeleteError,
    DeleteReason,
    LoadError,
    ReorderError,
    StoreError,
    SyncError,
)
from src.services.record_store import RecordStore
from src.services.reorder import ReorderEngine, SortOrderAssignment
from src.services.search import SearchProjection
from src.services.sequence_sync import SequenceSynchronizer
from src.services.status import StatusReporter

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("name", "slug", "description", "color", "icon", "is_active")
REQUIRED_FIELDS = ("name", "slug", "is_active")

IN_USE_MESSAGE = (
    "Cannot delete this category because it is still being used by articles. "
    "Please reassign those articles first."
)
DUPLICATE_SLUG_MESSAGE = "A category with this slug already exists."
POSITION_TAKEN_MESSAGE = "Another category already has this position."


def slugify(name: str) -> str:
    """Derive a URL-safe slug from a category name."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


@dataclass
class OperationOutcome:
    """Result of a user-initiated operation.

    ``reason`` is set when ``ok`` is false: not_found, in_use, duplicate_slug,
    position_taken, invalid, store_failure, partial_sync or load_failed.
    """

    ok: bool
    notification: StatusNotification | None = None
    category: CategoryRecord | None = None
    assignments: list[SortOrderAssignment] = field(default_factory=list)
    reason: str | None = None
    error: CategoryEngineError | None = None


@dataclass
class CategoryState:
    """Everything one admin session owns: the cache, the pending drag and the query."""

    cache: CollectionCache
    reorder: ReorderEngine
    search: SearchProjection

    @property
    def pending_id(self) -> str | None:
        return self.reorder.pending_id


class CategoryManager:
    """Serializes and reports every category operation for one session.

    Operations never raise store-facing errors; they return an
    ``OperationOutcome`` carrying the notification that was emitted.
    Nothing is retried.
    """

    def __init__(
        self,
        store: RecordStore,
        reporter: StatusReporter | None = None,
        collection: str | None = None,
        referencing_collection: str | None = None,
    ):
        settings = get_settings()
        collection = collection or settings.categories_collection
        cache = CollectionCache(store, collection)
        self.state = CategoryState(
            cache=cache,
            reorder=ReorderEngine(cache),
            search=SearchProjection(cache),
        )
        self.reporter = reporter or StatusReporter(collection)
        self.synchronizer = SequenceSynchronizer(cache, self.reporter)
        self.guard = DeletionGuard(cache, referencing_collection)
        self.loaded = False
        self._lock = threading.Lock()

    @property
    def cache(self) -> CollectionCache:
        return self.state.cache

    @property
    def store(self) -> RecordStore:
        return self.state.cache.store

    def refresh(self) -> OperationOutcome:
        """Reload the whole list from the store."""
        with self._lock:
            try:
                self.cache.load()
            except LoadError as e:
                notification = self.reporter.error(f"Failed to load categories: {e}")
                return OperationOutcome(
                    ok=False, notification=notification, reason="load_failed", error=e
                )
            self.loaded = True
            return OperationOutcome(ok=True)

    def ensure_loaded(self) -> OperationOutcome:
        if self.loaded:
            return OperationOutcome(ok=True)
        return self.refresh()

    def search(self, query: str | None = None) -> list[CategoryRecord]:
        """Set the query (when given) and return the current projection."""
        if query is not None:
            self.state.search.query = query
        return list(self.state.search.results())

    def _not_found(self, record_id: str) -> OperationOutcome:
        notification = self.reporter.error(f"Category {record_id} not found")
        return OperationOutcome(ok=False, notification=notification, reason="not_found")

    def toggle_active(self, record_id: str) -> OperationOutcome:
        with self._lock:
            record = self.cache.get(record_id)
            if record is None:
                return self._not_found(record_id)

            is_active = not record.is_active
            try:
                self.store.update(self.cache.collection, record_id, {"is_active": is_active})
            except StoreError as e:
                notification = self.reporter.error(f"Failed to update category status: {e}")
                return OperationOutcome(
                    ok=False, notification=notification, reason="store_failure", error=e
                )

            updated = record.model_copy(update={"is_active": is_active})
            self.cache.upsert(updated)
            state = "activated" if is_active else "deactivated"
            notification = self.reporter.success(f"Category {state} successfully")
            return OperationOutcome(ok=True, notification=notification, category=updated)

    def update_fields(self, record_id: str, changes: dict[str, Any]) -> OperationOutcome:
        """Edit non-ordering fields; sort_order only changes through reorder."""
        with self._lock:
            record = self.cache.get(record_id)
            if record is None:
                return self._not_found(record_id)

            fields = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
            cleared = [key for key in REQUIRED_FIELDS if key in fields and fields[key] is None]
            if cleared:
                notification = self.reporter.error(f"Category {cleared[0]} cannot be empty")
                return OperationOutcome(ok=False, notification=notification, reason="invalid")
            if "slug" in fields and self.cache.slug_taken(fields["slug"], exclude_id=record_id):
                notification = self.reporter.error(DUPLICATE_SLUG_MESSAGE)
                return OperationOutcome(
                    ok=False, notification=notification, reason="duplicate_slug"
                )
            if not fields:
                return OperationOutcome(ok=True, category=record)

            try:
                self.store.update(self.cache.collection, record_id, fields)
            except StoreError as e:
                notification = self.reporter.error(f"Failed to update category: {e}")
                return OperationOutcome(
                    ok=False, notification=notification, reason="store_failure", error=e
                )

            updated = record.model_copy(update=fields)
            self.cache.upsert(updated)
            notification = self.reporter.success("Category updated successfully")
            return OperationOutcome(ok=True, notification=notification, category=updated)

    def create(self, data: dict[str, Any]) -> OperationOutcome:
        """Insert a new category at the end of the list unless a position is given."""
        with self._lock:
            slug = data.get("slug") or slugify(data["name"])
            if not slug:
                notification = self.reporter.error("Category slug cannot be empty")
                return OperationOutcome(ok=False, notification=notification, reason="invalid")
            if self.cache.slug_taken(slug):
                notification = self.reporter.error(DUPLICATE_SLUG_MESSAGE)
                return OperationOutcome(
                    ok=False, notification=notification, reason="duplicate_slug"
                )

            sort_order = data.get("sort_order")
            if sort_order is not None and self.cache.sort_order_taken(sort_order):
                notification = self.reporter.error(POSITION_TAKEN_MESSAGE)
                return OperationOutcome(
                    ok=False, notification=notification, reason="position_taken"
                )
            fields = {
                "name": data["name"],
                "slug": slug,
                "description": data.get("description") or None,
                "color": data.get("color"),
                "icon": data.get("icon"),
                "sort_order": self.cache.next_sort_order() if sort_order is None else sort_order,
                "is_active": data.get("is_active", True),
            }
            try:
                row = self.store.insert(self.cache.collection, fields)
            except StoreError as e:
                notification = self.reporter.error(f"Failed to create category: {e}")
                return OperationOutcome(
                    ok=False, notification=notification, reason="store_failure", error=e
                )

            record = CategoryRecord.model_validate(row)
            self.cache.upsert(record)
            notification = self.reporter.success("Category created successfully")
            return OperationOutcome(ok=True, notification=notification, category=record)

    def lift(self, record_id: str) -> OperationOutcome:
        with self._lock:
            return self._lift(record_id)

    def _lift(self, record_id: str) -> OperationOutcome:
        try:
            self.state.reorder.lift(record_id)
        except ReorderError as e:
            logger.warning(f"Ignoring drag of unknown category {record_id}")
            return OperationOutcome(ok=False, reason="not_found", error=e)
        return OperationOutcome(ok=True)

    def cancel_drag(self) -> OperationOutcome:
        with self._lock:
            self.state.reorder.cancel()
            return OperationOutcome(ok=True)

    def drop(self, target_id: str) -> OperationOutcome:
        with self._lock:
            return self._drop(target_id)

    def _drop(self, target_id: str) -> OperationOutcome:
        try:
            mapping = self.state.reorder.drop(target_id)
        except ReorderError as e:
            logger.warning(f"Ignoring stale reorder onto {target_id}: {e}")
            return OperationOutcome(ok=False, reason="not_found", error=e)
        if not mapping:
            return OperationOutcome(ok=True)

        try:
            result = self.synchronizer.commit(mapping)
        except SyncError as e:
            notification = self.reporter.error(
                f"Failed to reorder categories: {e} "
                f"({e.partial_index} of {len(mapping)} positions saved)"
            )
            return OperationOutcome(
                ok=False,
                notification=notification,
                assignments=list(mapping[: e.partial_index]),
                reason="partial_sync",
                error=e,
            )
        return OperationOutcome(
            ok=True, notification=result.notification, assignments=result.applied
        )

    def move(self, source_id: str, target_id: str) -> OperationOutcome:
        """Lift ``source_id`` and drop it on ``target_id`` as one operation."""
        with self._lock:
            lifted = self._lift(source_id)
            if not lifted.ok:
                return lifted
            return self._drop(target_id)

    def can_delete(self, record_id: str) -> bool:
        return self.guard.can_delete(record_id)

    def delete(self, record_id: str) -> OperationOutcome:
        with self._lock:
            record = self.cache.get(record_id)
            if record is None:
                return self._not_found(record_id)

            try:
                self.guard.delete(record_id)
            except DeleteError as e:
                if e.reason == DeleteReason.IN_USE:
                    notification = self.reporter.error(IN_USE_MESSAGE)
                    return OperationOutcome(
                        ok=False, notification=notification, reason="in_use", error=e
                    )
                notification = self.reporter.error(f"Failed to delete category: {e}")
                return OperationOutcome(
                    ok=False, notification=notification, reason="store_failure", error=e
                )

            notification = self.reporter.success("Category deleted successfully")
            return OperationOutcome(ok=True, notification=notification, category=record)

    def notifications(self) -> list[StatusNotification]:
        return self.reporter.active()
