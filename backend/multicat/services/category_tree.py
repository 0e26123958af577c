"""
Read access to the host category taxonomy.

Categories are kept as a nested set (lft/rgt bounds plus a level), so a
pre-order walk of the tree is simply "order by lft".
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from multicat.core.config import settings
from multicat.core.exceptions import StoreUnavailableError
from multicat.models.category import (
    Category,
    PublishState,
    is_selectable,
    is_unpublished,
)
from multicat.schemas.category import CategoryOption

logger = logging.getLogger(__name__)

INDENT = "— "
UNPUBLISHED_MARKER = "[Unpublished]"


class CategoryTreeAccessor:
    """Lists the categories of one taxonomy in tree order."""

    def __init__(self, db: Session, extension: Optional[str] = None):
        self.db = db
        self.extension = extension or settings.CATEGORY_EXTENSION

    def list_categories(self) -> List[Category]:
        """
        Return selectable categories ordered by nested-set position.

        Raises:
            StoreUnavailableError: If the categories could not be read
        """
        try:
            return (
                self.db.query(Category)
                .filter(
                    Category.extension == self.extension,
                    Category.published > int(PublishState.TRASHED),
                )
                .order_by(Category.lft.asc())
                .all()
            )
        except SQLAlchemyError as e:
            raise StoreUnavailableError("Failed to load categories", cause=e)

    @staticmethod
    def build_options(categories: List[Category]) -> List[CategoryOption]:
        """Turn categories into form choices, indented by depth."""
        options = []
        for category in categories:
            if not is_selectable(category.published):
                continue

            prefix = INDENT * max(0, category.level - 1)
            label = f"{prefix}{category.title}".strip()
            unpublished = is_unpublished(category.published)
            if unpublished:
                label = f"{label} {UNPUBLISHED_MARKER}"

            options.append(
                CategoryOption(id=category.id, label=label, unpublished=unpublished)
            )
        return options

    def get_options(self) -> List[CategoryOption]:
        return self.build_options(self.list_categories())

    def rebuild_tree(self) -> int:
        """
        Recompute lft, rgt and level for this taxonomy from parent_id.

        Top-level categories (no parent inside the taxonomy) get level 1 and
        siblings keep their current relative order (by lft, then id).

        Returns:
            Number of categories renumbered
        """
        categories = (
            self.db.query(Category)
            .filter(Category.extension == self.extension)
            .order_by(Category.lft.asc(), Category.id.asc())
            .all()
        )
        by_id = {category.id: category for category in categories}

        children: Dict[Optional[int], List[Category]] = defaultdict(list)
        for category in categories:
            parent_key = category.parent_id if category.parent_id in by_id else None
            children[parent_key].append(category)

        counter = 1

        def visit(node: Category, level: int) -> None:
            nonlocal counter
            node.level = level
            node.lft = counter
            counter += 1
            for child in children.get(node.id, []):
                visit(child, level + 1)
            node.rgt = counter
            counter += 1

        for root in children.get(None, []):
            visit(root, 1)

        self.db.commit()
        logger.info(
            f"Rebuilt nested set for '{self.extension}' ({len(categories)} categories)"
        )
        return len(categories)
