"""Category schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.schemas.notification import StatusNotification

DEFAULT_COLOR = "#6b7280"
DEFAULT_ICON = "folder-open"


class CategoryRecord(BaseModel):
    """A named, orderable category as held in the collection cache.

    Optional display fields default to ``None``; search treats a missing
    description as the empty string. Records are frozen, so every change
    produces a new record via ``model_copy(update=...)``.
    """

    model_config = ConfigDict(from_attributes=True, extra="ignore", frozen=True)

    id: str
    name: str
    slug: str
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    sort_order: int = Field(0, ge=0)
    is_active: bool = True


class CategoryCreate(BaseModel):
    """Create a new category."""

    name: str = Field(..., min_length=1, max_length=255)
    slug: str | None = Field(None, max_length=255, pattern=r"^[a-z0-9-]*$")
    description: str | None = None
    color: str | None = Field(DEFAULT_COLOR, max_length=20)
    icon: str | None = Field(DEFAULT_ICON, max_length=64)
    sort_order: int | None = Field(None, ge=0)
    is_active: bool = True


class CategoryUpdate(BaseModel):
    """Update a category's non-ordering fields."""

    name: str | None = Field(None, min_length=1, max_length=255)
    slug: str | None = Field(None, min_length=1, max_length=255, pattern=r"^[a-z0-9-]+$")
    description: str | None = None
    color: str | None = Field(None, max_length=20)
    icon: str | None = Field(None, max_length=64)
    is_active: bool | None = None

    @field_validator("name", "slug", "is_active")
    @classmethod
    def _reject_null(cls, value: Any):
        # Omit a field to leave it unchanged; these columns can't be cleared.
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ReorderRequest(BaseModel):
    """Move one category onto the position of another."""

    source_id: str
    target_id: str


class SortOrderAssignmentResponse(BaseModel):
    """A single new sequence key."""

    id: str
    sort_order: int


class CategoryListResponse(BaseModel):
    """Search projection over the category list."""

    query: str
    total: int
    categories: list[CategoryRecord]


class CategoryOperationResponse(BaseModel):
    """Outcome of a category mutation, with the notification it produced."""

    ok: bool
    notification: StatusNotification | None = None
    category: CategoryRecord | None = None
    assignments: list[SortOrderAssignmentResponse] = Field(default_factory=list)
    pending_id: str | None = None


class DeleteCheckResponse(BaseModel):
    """Whether a category can currently be deleted."""

    id: str
    can_delete: bool
