"""Article model."""

import uuid

from sqlalchemy import Column, String, Text

from src.database import Base
from src.models.mixins import TimestampMixin


class Article(Base, TimestampMixin):
    """Article model.

    ``category`` holds a category id as a plain string with no foreign key
    constraint; the category deletion guard is the only thing keeping it valid.
    """

    __tablename__ = "articles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(500), nullable=False)
    slug = Column(String(500), nullable=False, unique=True)
    content = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="draft")
    category = Column(String(36), nullable=True, index=True)
