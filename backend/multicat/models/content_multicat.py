from sqlalchemy import Column, Integer, ForeignKey, Index, Table
from multicat.core.database import Base


# Additional categories of a content item; the primary category is never stored here
content_multicat = Table(
    "content_multicat",
    Base.metadata,
    Column(
        "content_id",
        Integer,
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "category_id",
        Integer,
        ForeignKey("categories.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Index("ix_content_multicat_category_id", "category_id"),
)
