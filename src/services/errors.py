"""Error taxonomy for the category engine."""

from enum import StrEnum


class CategoryEngineError(Exception):
    """Base class for category engine failures."""


class StoreError(CategoryEngineError):
    """A record store call failed."""


class LoadError(CategoryEngineError):
    """The full collection fetch failed; the previous cache is kept."""

    def __init__(self, cause: Exception):
        super().__init__(str(cause))
        self.cause = cause


class ReorderReason(StrEnum):
    NOT_FOUND = "not_found"


class ReorderError(CategoryEngineError):
    """A reorder referenced an id that is not in the cache."""

    def __init__(self, reason: ReorderReason, missing_id: str):
        super().__init__(f"{reason.value}: {missing_id}")
        self.reason = reason
        self.missing_id = missing_id


class SyncError(CategoryEngineError):
    """A sequence commit stopped part way.

    ``partial_index`` is the number of leading updates that are durable.
    """

    def __init__(self, partial_index: int, cause: Exception):
        super().__init__(str(cause))
        self.partial_index = partial_index
        self.cause = cause


class DeleteReason(StrEnum):
    IN_USE = "in_use"
    STORE_FAILURE = "store_failure"


class DeleteError(CategoryEngineError):
    """A deletion was blocked by a reference or failed in the store."""

    def __init__(self, reason: DeleteReason, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.reason = reason
        self.cause = cause
