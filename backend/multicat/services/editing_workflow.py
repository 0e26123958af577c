"""
Editing workflow for additional categories.

Three phases per content item edit:

1. Load: pick the selections shown in the form.
2. Validate: sanitize submitted ids and drop the item's primary category.
3. Persist: replace the stored associations.

Failures in any phase are logged through the diagnostics handle and never
abort the host's own save or form rendering.
"""

import logging
from typing import Any, List, MutableMapping, Optional, Protocol

from multicat.core.exceptions import AssociationWriteError, StoreUnavailableError
from multicat.core.ids import sanitize_category_ids, to_int_list
from multicat.core.logging_config import DiagnosticsLogger
from multicat.schemas.article import ArticleCategories, ArticleForm
from multicat.schemas.category import CategoryOption
from multicat.services.association_store import AssociationStore
from multicat.services.category_tree import CategoryTreeAccessor

logger = logging.getLogger(__name__)

PENDING_EDIT_KEY = "multicat.article.edit"


class PendingEditCache(Protocol):
    def get(self, key: str) -> Optional[List[int]]: ...

    def set(self, key: str, category_ids: Any) -> None: ...

    def clear(self, key: str) -> None: ...


class SessionPendingEditCache:
    """Pending selections kept in the user's session between a failed save and the next form."""

    def __init__(self, session: MutableMapping[str, Any]):
        self.session = session

    def get(self, key: str) -> Optional[List[int]]:
        if key not in self.session:
            return None
        return to_int_list(self.session[key])

    def set(self, key: str, category_ids: Any) -> None:
        self.session[key] = to_int_list(category_ids)

    def clear(self, key: str) -> None:
        self.session.pop(key, None)


class AssociationEditingWorkflow:
    def __init__(
        self,
        store: AssociationStore,
        tree: CategoryTreeAccessor,
        diagnostics: DiagnosticsLogger,
        pending_cache: Optional[PendingEditCache] = None,
    ):
        self.store = store
        self.tree = tree
        self.diagnostics = diagnostics
        self.pending_cache = pending_cache

    def load_selections(
        self, content_id: Optional[int] = None, submitted: Any = None
    ) -> List[int]:
        """
        Selections to prefill, in order of preference: what was just
        submitted, what is stored for an existing item, what a failed save
        left in the pending-edit cache.
        """
        selected: List[int] = []

        if submitted is not None:
            selected = to_int_list(submitted)
        elif content_id:
            try:
                selected = self.store.get_associations(content_id)
            except StoreUnavailableError as e:
                self.diagnostics.log_event(
                    "multicat.associations.read_failed",
                    "Failed to load stored additional categories.",
                    level=logging.WARNING,
                    content_id=content_id,
                    error=str(e),
                )
        elif self.pending_cache is not None:
            pending = self.pending_cache.get(PENDING_EDIT_KEY)
            if pending is not None:
                selected = pending

        return sanitize_category_ids(selected)

    def load_options(self) -> List[CategoryOption]:
        try:
            return self.tree.get_options()
        except StoreUnavailableError as e:
            self.diagnostics.log_event(
                "multicat.categories.read_failed",
                "Failed to load category options.",
                level=logging.WARNING,
                error=str(e),
            )
            return []

    def prepare_form(
        self, content_id: Optional[int] = None, submitted: Any = None
    ) -> ArticleForm:
        return ArticleForm(
            additional_category_ids=self.load_selections(content_id, submitted),
            options=self.load_options(),
        )

    @staticmethod
    def validate_selections(primary_category_id: Optional[int], submitted: Any) -> List[int]:
        """Sanitized submitted ids without the primary category."""
        primary = primary_category_id or 0
        return [
            category_id
            for category_id in sanitize_category_ids(submitted)
            if category_id != primary
        ]

    def persist(
        self, content_id: Optional[int], primary_category_id: Optional[int], submitted: Any
    ) -> bool:
        """
        Validate and store the submitted selections for a saved item.

        Returns:
            True when the associations were written, False otherwise
        """
        if not content_id:
            return False

        filtered = self.validate_selections(primary_category_id, submitted)

        try:
            self.store.replace_associations(content_id, filtered)
        except AssociationWriteError as e:
            self.diagnostics.log_event(
                "multicat.associations.write_failed",
                "Failed to persist additional categories.",
                level=logging.ERROR,
                content_id=content_id,
                error=str(e),
            )
            return False

        self.forget_pending()
        return True

    def revalidate(self, content_id: int, primary_category_id: int) -> bool:
        """
        Re-check stored selections after a save that did not submit any,
        dropping the primary category if it is now among them.
        """
        try:
            current = self.store.get_associations(content_id)
        except StoreUnavailableError as e:
            self.diagnostics.log_event(
                "multicat.associations.read_failed",
                "Failed to load stored additional categories.",
                level=logging.WARNING,
                content_id=content_id,
                error=str(e),
            )
            return False

        if primary_category_id not in current:
            return True
        return self.persist(content_id, primary_category_id, current)

    def remember_pending(self, submitted: Any) -> None:
        """Keep selections from a save the host rejected, for the next form."""
        if self.pending_cache is not None:
            self.pending_cache.set(PENDING_EDIT_KEY, submitted)

    def forget_pending(self) -> None:
        if self.pending_cache is not None:
            self.pending_cache.clear(PENDING_EDIT_KEY)

    def describe(self, content_id: int, primary_category_id: int) -> ArticleCategories:
        try:
            effective = self.store.get_effective_categories(
                content_id, primary_category_id
            )
        except StoreUnavailableError as e:
            self.diagnostics.log_event(
                "multicat.associations.read_failed",
                "Failed to load stored additional categories.",
                level=logging.WARNING,
                content_id=content_id,
                error=str(e),
            )
            effective = AssociationStore.effective_categories(primary_category_id, [])

        return ArticleCategories(
            primary_category_id=primary_category_id,
            additional_category_ids=[
                category_id for category_id in effective if category_id != primary_category_id
            ],
            effective_category_ids=effective,
        )
