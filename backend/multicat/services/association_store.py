"""
Persistence for the additional categories of content items.

Rows live in the content_multicat bridge table. A save never diffs: all
rows of the item are deleted and the new set inserted in one transaction.
"""

import logging
from typing import Any, Iterable, List
from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from multicat.core.exceptions import AssociationWriteError, StoreUnavailableError
from multicat.core.ids import sanitize_category_ids
from multicat.models.content_multicat import content_multicat

logger = logging.getLogger(__name__)


class AssociationStore:
    """CRUD for the content_multicat bridge table."""

    def __init__(self, db: Session):
        self.db = db

    def get_associations(self, content_id: int) -> List[int]:
        """
        Return the additional category ids of a content item, ascending.

        Raises:
            StoreUnavailableError: If the bridge table could not be read
        """
        statement = select(content_multicat.c.category_id).where(
            content_multicat.c.content_id == content_id
        )
        try:
            rows = self.db.execute(statement).scalars().all()
        except SQLAlchemyError as e:
            raise StoreUnavailableError(
                f"Failed to load associations for content {content_id}", cause=e
            )
        return sanitize_category_ids(rows)

    def replace_associations(self, content_id: int, category_ids: Any) -> List[int]:
        """
        Replace every association of a content item.

        An empty set clears all rows. Non-positive ids and duplicates are
        dropped before writing.

        Returns:
            The ids actually written

        Raises:
            AssociationWriteError: If the write failed; nothing is committed
        """
        clean_ids = sanitize_category_ids(category_ids)

        try:
            self.db.execute(
                delete(content_multicat).where(
                    content_multicat.c.content_id == content_id
                )
            )
            if clean_ids:
                self.db.execute(
                    insert(content_multicat),
                    [
                        {"content_id": content_id, "category_id": category_id}
                        for category_id in clean_ids
                    ],
                )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise AssociationWriteError(
                f"Failed to replace associations for content {content_id}", cause=e
            )

        logger.info(
            f"Stored {len(clean_ids)} additional categories for content {content_id}"
        )
        return clean_ids

    @staticmethod
    def effective_categories(
        primary_category_id: int, additional_ids: Iterable[int]
    ) -> List[int]:
        """Primary category first, then the additional ones without repeating it."""
        effective = []
        if primary_category_id and primary_category_id > 0:
            effective.append(primary_category_id)
        for category_id in sanitize_category_ids(additional_ids):
            if category_id != primary_category_id:
                effective.append(category_id)
        return effective

    def get_effective_categories(
        self, content_id: int, primary_category_id: int
    ) -> List[int]:
        """
        Raises:
            StoreUnavailableError: If the bridge table could not be read
        """
        return self.effective_categories(
            primary_category_id, self.get_associations(content_id)
        )
