"""Category management API endpoints (admin only)."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_category_manager
from src.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryOperationResponse,
    CategoryUpdate,
    DeleteCheckResponse,
    ReorderRequest,
    SortOrderAssignmentResponse,
)
from src.schemas.notification import StatusNotification
from src.services.category_manager import CategoryManager, OperationOutcome
from src.services.errors import DeleteError

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])

REASON_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "in_use": status.HTTP_409_CONFLICT,
    "duplicate_slug": status.HTTP_409_CONFLICT,
    "position_taken": status.HTTP_409_CONFLICT,
    "invalid": status.HTTP_400_BAD_REQUEST,
    "store_failure": status.HTTP_502_BAD_GATEWAY,
    "partial_sync": status.HTTP_502_BAD_GATEWAY,
    "load_failed": status.HTTP_502_BAD_GATEWAY,
}

Manager = Annotated[CategoryManager, Depends(get_category_manager)]


def to_response(outcome: OperationOutcome, manager: CategoryManager) -> CategoryOperationResponse:
    """Convert an outcome to a response, raising for failures."""
    if not outcome.ok:
        if outcome.notification is not None:
            detail = outcome.notification.message
        else:
            detail = "Category not found"
        raise HTTPException(
            status_code=REASON_STATUS.get(outcome.reason or "", status.HTTP_400_BAD_REQUEST),
            detail=detail,
        )

    return CategoryOperationResponse(
        ok=True,
        notification=outcome.notification,
        category=outcome.category,
        assignments=[
            SortOrderAssignmentResponse(id=a.id, sort_order=a.sort_order)
            for a in outcome.assignments
        ],
        pending_id=manager.state.pending_id,
    )


@router.get("", response_model=CategoryListResponse)
def list_categories(
    manager: Manager,
    q: Annotated[str | None, Query(max_length=255)] = None,
):
    """Get categories in display order.

    ``q`` replaces the session's search term; omit it to keep the last one and
    send an empty value to clear it.
    """
    categories = manager.search(q)
    return CategoryListResponse(
        query=manager.state.search.query, total=len(categories), categories=categories
    )


@router.post("/refresh", response_model=CategoryListResponse)
def refresh_categories(manager: Manager):
    """Reload the category list from the store."""
    outcome = manager.refresh()
    if not outcome.ok:
        to_response(outcome, manager)
    categories = manager.search()
    return CategoryListResponse(
        query=manager.state.search.query, total=len(categories), categories=categories
    )


@router.get("/notifications", response_model=list[StatusNotification])
def list_notifications(manager: Manager):
    """Get status notifications that have not expired yet."""
    return manager.notifications()


@router.post("", response_model=CategoryOperationResponse, status_code=status.HTTP_201_CREATED)
def create_category(category_data: CategoryCreate, manager: Manager):
    """Create a new category at the end of the list."""
    return to_response(manager.create(category_data.model_dump()), manager)


@router.post("/reorder", response_model=CategoryOperationResponse)
def reorder_categories(reorder: ReorderRequest, manager: Manager):
    """Move one category into another's position and save the new order."""
    return to_response(manager.move(reorder.source_id, reorder.target_id), manager)


@router.post("/drag/cancel", response_model=CategoryOperationResponse)
def cancel_drag(manager: Manager):
    """Abandon the current drag without saving anything."""
    return to_response(manager.cancel_drag(), manager)


@router.post("/{category_id}/lift", response_model=CategoryOperationResponse)
def lift_category(category_id: str, manager: Manager):
    """Start dragging a category."""
    return to_response(manager.lift(category_id), manager)


@router.post("/{category_id}/drop", response_model=CategoryOperationResponse)
def drop_category(category_id: str, manager: Manager):
    """Drop the dragged category onto this one."""
    return to_response(manager.drop(category_id), manager)


@router.post("/{category_id}/toggle", response_model=CategoryOperationResponse)
def toggle_category(category_id: str, manager: Manager):
    """Activate or deactivate a category."""
    return to_response(manager.toggle_active(category_id), manager)


@router.put("/{category_id}", response_model=CategoryOperationResponse)
def update_category(category_id: str, category_data: CategoryUpdate, manager: Manager):
    """Update a category's details."""
    changes = category_data.model_dump(exclude_unset=True)
    return to_response(manager.update_fields(category_id, changes), manager)


@router.get("/{category_id}/can-delete", response_model=DeleteCheckResponse)
def check_category_deletable(category_id: str, manager: Manager):
    """Check whether any article still uses the category."""
    if category_id not in manager.cache:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Category not found")
    try:
        can_delete = manager.can_delete(category_id)
    except DeleteError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return DeleteCheckResponse(id=category_id, can_delete=can_delete)


@router.delete("/{category_id}", response_model=CategoryOperationResponse)
def delete_category(category_id: str, manager: Manager):
    """Delete a category that no article references."""
    return to_response(manager.delete(category_id), manager)
