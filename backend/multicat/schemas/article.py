from pydantic import BaseModel, field_validator
from datetime import datetime
from typing import List, Optional

from multicat.core.ids import to_int_list
from multicat.schemas.category import CategoryOption


class ArticleBase(BaseModel):
    title: str
    introtext: Optional[str] = None
    state: int = 1


class ArticleCreate(ArticleBase):
    category_id: int
    additional_category_ids: List[int] = []

    @field_validator("additional_category_ids", mode="before")
    @classmethod
    def coerce_additional_category_ids(cls, v):
        return to_int_list(v)


class ArticleUpdate(BaseModel):
    title: Optional[str] = None
    introtext: Optional[str] = None
    state: Optional[int] = None
    category_id: Optional[int] = None
    # Omitted: keep the stored selections (still re-checked against the primary)
    additional_category_ids: Optional[List[int]] = None

    @field_validator("additional_category_ids", mode="before")
    @classmethod
    def coerce_additional_category_ids(cls, v):
        if v is None:
            return None
        return to_int_list(v)


class Article(ArticleBase):
    id: int
    category_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ArticleDetail(Article):
    additional_category_ids: List[int] = []
    effective_category_ids: List[int] = []


class ArticleSaveResult(ArticleDetail):
    associations_saved: bool = True


class ArticleCategories(BaseModel):
    primary_category_id: int
    additional_category_ids: List[int]
    effective_category_ids: List[int]


class ArticleForm(BaseModel):
    """Prefill data and choices for the additional-categories field."""

    additional_category_ids: List[int] = []
    options: List[CategoryOption] = []
