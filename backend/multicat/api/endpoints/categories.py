from fastapi import APIRouter, Depends
from typing import List, Optional
import logging

from multicat.api.dependencies import get_expander, get_tree
from multicat.api.validation import CategoryIdsParam, MaxLevelsParam
from multicat.core.exceptions import StoreUnavailableError
from multicat.core.logging_config import DiagnosticsLogger, get_diagnostics
from multicat.schemas.category import (
    Category as CategorySchema,
    CategoryFilter,
    CategoryOption,
    ExpandedCategories,
)
from multicat.services.category_tree import CategoryTreeAccessor
from multicat.services.descendant_expander import DescendantExpander
from multicat.services.query_builder import resolve_category_filter

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[CategorySchema])
def get_categories(
    tree: CategoryTreeAccessor = Depends(get_tree),
    diagnostics: DiagnosticsLogger = Depends(get_diagnostics),
):
    """Get selectable categories in tree order (pre-order walk)."""
    try:
        return tree.list_categories()
    except StoreUnavailableError as e:
        diagnostics.log_event(
            "multicat.categories.read_failed",
            "Failed to load categories.",
            level=logging.WARNING,
            error=str(e),
        )
        return []


@router.get("/options", response_model=List[CategoryOption])
def get_category_options(
    tree: CategoryTreeAccessor = Depends(get_tree),
    diagnostics: DiagnosticsLogger = Depends(get_diagnostics),
):
    """Get form choices for additional categories, indented by depth."""
    try:
        return tree.get_options()
    except StoreUnavailableError as e:
        diagnostics.log_event(
            "multicat.categories.read_failed",
            "Failed to load category options.",
            level=logging.WARNING,
            error=str(e),
        )
        return []


@router.get("/expand", response_model=ExpandedCategories)
def expand_categories(
    category_id: Optional[List[str]] = CategoryIdsParam,
    include_subcategories: bool = False,
    max_levels: Optional[str] = MaxLevelsParam,
    expander: DescendantExpander = Depends(get_expander),
    diagnostics: DiagnosticsLogger = Depends(get_diagnostics),
):
    """
    Resolve a category filter the same way article listings do.

    Returns ``category_ids: null`` when no category was requested and an
    empty list when the requested categories resolve to nothing.
    """
    category_filter = CategoryFilter(
        category_ids=category_id or [],
        include_subcategories=include_subcategories,
        max_levels=max_levels,
    )
    resolved = resolve_category_filter(expander, category_filter, diagnostics)
    return ExpandedCategories(category_ids=resolved)
