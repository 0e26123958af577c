from pydantic import BaseModel, field_validator
from typing import List, Optional

from multicat.core.ids import to_int_list


class Category(BaseModel):
    id: int
    parent_id: Optional[int] = None
    extension: str
    title: str
    level: int
    published: int
    lft: int
    rgt: int

    class Config:
        from_attributes = True


class CategoryOption(BaseModel):
    """A selectable choice in the additional-categories form field."""

    id: int
    label: str  # Indented by depth, e.g. "— — Child"
    unpublished: bool = False


class CategoryFilter(BaseModel):
    """
    Category filter requested by a listing.

    An empty ``category_ids`` means no filter was requested. Tokens that are
    not integers are kept as 0 so that a filter made only of garbage still
    counts as requested and resolves to nothing.
    """

    category_ids: List[int] = []
    include_subcategories: bool = False
    max_levels: Optional[int] = None

    @field_validator("category_ids", mode="before")
    @classmethod
    def coerce_category_ids(cls, v):
        return to_int_list(v)

    @field_validator("max_levels", mode="before")
    @classmethod
    def coerce_max_levels(cls, v):
        if v is None or v == "":
            return None
        try:
            return int(v)
        except (TypeError, ValueError):
            return None

    @property
    def requested(self) -> bool:
        return len(self.category_ids) > 0


class ExpandedCategories(BaseModel):
    category_ids: Optional[List[int]] = None  # None when no filter was requested
