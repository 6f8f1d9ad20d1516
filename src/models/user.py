"""User model."""

from sqlalchemy import Column, Integer, String

from src.database import Base
from src.models.enums import UserRole
from src.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """User model for authentication and admin gating."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)

    @property
    def is_admin(self) -> bool:
        """Check if the user may manage categories."""
        return UserRole(self.role).can_manage_categories()
