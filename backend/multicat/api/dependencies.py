from fastapi import Depends, Request
from sqlalchemy.orm import Session

from multicat.core.database import get_db
from multicat.core.logging_config import DiagnosticsLogger, get_diagnostics
from multicat.services.association_store import AssociationStore
from multicat.services.category_tree import CategoryTreeAccessor
from multicat.services.descendant_expander import DescendantExpander
from multicat.services.editing_workflow import (
    AssociationEditingWorkflow,
    SessionPendingEditCache,
)


def get_pending_cache(request: Request) -> SessionPendingEditCache:
    return SessionPendingEditCache(request.session)


def get_tree(db: Session = Depends(get_db)) -> CategoryTreeAccessor:
    return CategoryTreeAccessor(db)


def get_expander(db: Session = Depends(get_db)) -> DescendantExpander:
    return DescendantExpander(db)


def get_workflow(
    db: Session = Depends(get_db),
    diagnostics: DiagnosticsLogger = Depends(get_diagnostics),
    pending_cache: SessionPendingEditCache = Depends(get_pending_cache),
) -> AssociationEditingWorkflow:
    return AssociationEditingWorkflow(
        store=AssociationStore(db),
        tree=CategoryTreeAccessor(db),
        diagnostics=diagnostics,
        pending_cache=pending_cache,
    )
