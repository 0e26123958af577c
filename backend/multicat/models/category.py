from enum import IntEnum
from typing import Union
from sqlalchemy import Column, Integer, String, ForeignKey, Index
from sqlalchemy.orm import relationship
from multicat.core.database import Base


class PublishState(IntEnum):
    """Publication state of a category as stored by the host taxonomy."""

    PUBLISHED = 1
    UNPUBLISHED = 0
    ARCHIVED = 2
    TRASHED = -2


def is_selectable(state: Union[PublishState, int]) -> bool:
    """Trashed categories (and anything below) are not offered as choices."""
    return int(state) > PublishState.TRASHED


def is_unpublished(state: Union[PublishState, int]) -> bool:
    return int(state) == PublishState.UNPUBLISHED


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    extension = Column(String, nullable=False, default="com_content", index=True)
    title = Column(String, nullable=False)
    level = Column(Integer, nullable=False, default=1)  # Root children are level 1
    published = Column(Integer, nullable=False, default=int(PublishState.PUBLISHED))

    # Nested-set bounds: B is a descendant of A iff A.lft < B.lft and B.rgt < A.rgt
    lft = Column(Integer, nullable=False, default=0)
    rgt = Column(Integer, nullable=False, default=0)

    # Relationships
    parent = relationship("Category", remote_side=[id])
    articles = relationship("Article", back_populates="category")

    __table_args__ = (Index("ix_categories_extension_lft", "extension", "lft"),)
