from multicat.schemas.category import (
    Category,
    CategoryOption,
    CategoryFilter,
    ExpandedCategories,
)
from multicat.schemas.article import (
    Article,
    ArticleCreate,
    ArticleUpdate,
    ArticleDetail,
    ArticleSaveResult,
    ArticleCategories,
    ArticleForm,
)

__all__ = [
    "Category",
    "CategoryOption",
    "CategoryFilter",
    "ExpandedCategories",
    "Article",
    "ArticleCreate",
    "ArticleUpdate",
    "ArticleDetail",
    "ArticleSaveResult",
    "ArticleCategories",
    "ArticleForm",
]
