"""Pydantic schemas for API requests and responses."""

from src.schemas.auth import AuthResponse, Token, UserLogin, UserRegister, UserResponse
from src.schemas.category import (
    CategoryCreate,
    CategoryListResponse,
    CategoryOperationResponse,
    CategoryRecord,
    CategoryUpdate,
    DeleteCheckResponse,
    ReorderRequest,
)
from src.schemas.notification import NotificationKind, StatusNotification

__all__ = [
    "UserRegister",
    "UserLogin",
    "Token",
    "AuthResponse",
    "UserResponse",
    "CategoryRecord",
    "CategoryCreate",
    "CategoryUpdate",
    "CategoryListResponse",
    "CategoryOperationResponse",
    "DeleteCheckResponse",
    "ReorderRequest",
    "NotificationKind",
    "StatusNotification",
]
