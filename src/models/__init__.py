"""SQLAlchemy models."""

from src.models.article import Article
from src.models.category import Category
from src.models.user import User

__all__ = ["Article", "Category", "User"]
