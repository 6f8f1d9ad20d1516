"""Enums for model fields."""

from enum import Enum


class UserRole(str, Enum):
    """Roles stored on users."""

    USER = "user"
    ADMIN = "admin"

    def can_manage_categories(self) -> bool:
        """Check if this role may edit the category list."""
        return self == UserRole.ADMIN
