from .category import Category, PublishState, is_selectable, is_unpublished
from .article import Article
from .content_multicat import content_multicat

__all__ = [
    "Category",
    "PublishState",
    "is_selectable",
    "is_unpublished",
    "Article",
    "content_multicat",
]
