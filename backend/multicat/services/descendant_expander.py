import logging
from typing import Any, List, Optional
from sqlalchemy import and_
from sqlalchemy.orm import Session, aliased
from sqlalchemy.exc import SQLAlchemyError

from multicat.core.config import settings
from multicat.core.exceptions import StoreUnavailableError
from multicat.core.ids import sanitize_category_ids
from multicat.models.category import Category

logger = logging.getLogger(__name__)


class DescendantExpander:
    """Expands seed categories with their nested-set descendants."""

    def __init__(self, db: Session, extension: Optional[str] = None):
        self.db = db
        self.extension = extension or settings.CATEGORY_EXTENSION

    def expand(
        self,
        seed_ids: Any,
        include_descendants: bool,
        max_depth: Optional[int] = None,
    ) -> List[int]:
        """
        Return the seed ids plus qualifying descendants, ascending.

        Args:
            seed_ids: Requested category ids; non-positive or non-numeric ids are dropped
            include_descendants: When False the sanitized seeds are returned without a lookup
            max_depth: Levels below each seed to include; None (or negative) means unlimited

        Raises:
            StoreUnavailableError: If the descendant lookup fails
        """
        seeds = sanitize_category_ids(seed_ids)

        if not seeds:
            return []

        if not include_descendants:
            return seeds

        parent = aliased(Category, name="parent")
        child = aliased(Category, name="child")

        # Strict containment: a seed is not its own descendant
        query = (
            self.db.query(child.id)
            .join(
                parent,
                and_(child.lft > parent.lft, child.rgt < parent.rgt),
            )
            .filter(
                parent.id.in_(seeds),
                parent.extension == self.extension,
                child.extension == self.extension,
            )
        )

        # Depth is measured from each seed's own level
        if max_depth is not None and max_depth >= 0:
            query = query.filter(child.level <= parent.level + max_depth)

        try:
            descendants = [row[0] for row in query.distinct().all()]
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Failed to expand categories", cause=e)

        logger.debug(
            f"Expanded {len(seeds)} seed categories to {len(descendants)} descendants "
            f"(max_depth={max_depth})"
        )

        return sorted(set(seeds).union(descendants))


def normalize_max_depth(
    include_subcategories: bool, max_levels: Optional[int]
) -> Optional[int]:
    """
    Map a listing's max_levels setting to an expansion depth.

    Absent or non-positive max_levels means "all levels" when subcategories
    are included and "no expansion" otherwise.
    """
    if max_levels is None or max_levels <= 0:
        return None if include_subcategories else 0
    return max_levels
