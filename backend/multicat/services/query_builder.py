import logging
from typing import Iterable, List, Optional
from sqlalchemy import false, or_
from sqlalchemy.orm import Query

from multicat.core.exceptions import StoreUnavailableError
from multicat.core.ids import sanitize_category_ids
from multicat.core.logging_config import DiagnosticsLogger
from multicat.models.article import Article
from multicat.models.content_multicat import content_multicat
from multicat.schemas.category import CategoryFilter
from multicat.services.descendant_expander import (
    DescendantExpander,
    normalize_max_depth,
)

logger = logging.getLogger(__name__)

MULTICAT_ALIAS = "omc"


class EffectiveCategoryQueryBuilder:
    """
    Restricts a content query to items whose primary category or any
    additional category is in a resolved id set.
    """

    def __init__(self, id_column=Article.id, category_column=Article.category_id):
        self.id_column = id_column
        self.category_column = category_column

    def build_filter(self, query: Query, resolved_ids: Optional[Iterable[int]]) -> Query:
        """
        Apply the resolved category filter to ``query``.

        Args:
            query: Base query selecting content items
            resolved_ids: None when no filter was requested; otherwise the
                expanded id set, where an empty set matches nothing

        Returns:
            The filtered query, each item appearing at most once
        """
        if resolved_ids is None:
            return query

        category_ids = sanitize_category_ids(resolved_ids)

        if not category_ids:
            return query.filter(false())

        omc = content_multicat.alias(MULTICAT_ALIAS)

        return (
            query.outerjoin(omc, omc.c.content_id == self.id_column)
            .filter(
                or_(
                    self.category_column.in_(category_ids),
                    omc.c.category_id.in_(category_ids),
                )
            )
            .group_by(self.id_column)
        )


def resolve_category_filter(
    expander: DescendantExpander,
    category_filter: Optional[CategoryFilter],
    diagnostics: Optional[DiagnosticsLogger] = None,
) -> Optional[List[int]]:
    """
    Resolve a listing's category filter to the ids used in the query.

    Returns None when no filter was requested and an empty list when the
    requested ids resolve to nothing. If the descendant lookup fails the
    sanitized seeds are used as they are.
    """
    if category_filter is None or not category_filter.requested:
        return None

    max_depth = normalize_max_depth(
        category_filter.include_subcategories, category_filter.max_levels
    )

    try:
        return expander.expand(
            category_filter.category_ids,
            category_filter.include_subcategories,
            max_depth,
        )
    except StoreUnavailableError as e:
        if diagnostics:
            diagnostics.log_event(
                "multicat.categories.expand_failed",
                "Failed to expand category filter.",
                level=logging.WARNING,
                error=str(e),
            )
        return sanitize_category_ids(category_filter.category_ids)
