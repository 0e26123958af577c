from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import desc
from typing import List, Optional
import logging

from multicat.api.dependencies import get_expander, get_workflow
from multicat.api.validation import (
    CategoryIdsParam,
    LimitParam,
    MaxLevelsParam,
    SkipParam,
    SubmittedCategoryIdsParam,
)
from multicat.core.config import settings
from multicat.core.database import get_db
from multicat.core.logging_config import DiagnosticsLogger, get_diagnostics
from multicat.models.article import Article
from multicat.models.category import Category, is_selectable
from multicat.schemas.article import (
    Article as ArticleSchema,
    ArticleCategories,
    ArticleCreate,
    ArticleDetail,
    ArticleForm,
    ArticleSaveResult,
    ArticleUpdate,
)
from multicat.schemas.category import CategoryFilter
from multicat.services.descendant_expander import DescendantExpander
from multicat.services.editing_workflow import AssociationEditingWorkflow
from multicat.services.query_builder import (
    EffectiveCategoryQueryBuilder,
    resolve_category_filter,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def _get_article_or_404(db: Session, article_id: int) -> Article:
    article = db.query(Article).filter(Article.id == article_id).first()
    if not article:
        raise HTTPException(status_code=404, detail="Article not found")
    return article


def _primary_category_exists(db: Session, category_id: int) -> bool:
    category = (
        db.query(Category)
        .filter(
            Category.id == category_id,
            Category.extension == settings.CATEGORY_EXTENSION,
        )
        .first()
    )
    return category is not None and is_selectable(category.published)


def _detail(
    article: Article, workflow: AssociationEditingWorkflow, **extra
) -> dict:
    categories = workflow.describe(article.id, article.category_id)
    data = ArticleSchema.model_validate(article).model_dump()
    data.update(
        additional_category_ids=categories.additional_category_ids,
        effective_category_ids=categories.effective_category_ids,
        **extra,
    )
    return data


@router.get("/", response_model=List[ArticleSchema])
def get_articles(
    skip: int = SkipParam,
    limit: int = LimitParam,
    category_id: Optional[List[str]] = CategoryIdsParam,
    include_subcategories: bool = False,
    max_levels: Optional[str] = MaxLevelsParam,
    published_only: bool = False,
    db: Session = Depends(get_db),
    expander: DescendantExpander = Depends(get_expander),
    diagnostics: DiagnosticsLogger = Depends(get_diagnostics),
):
    """Get articles, optionally filtered by category.

    An article matches a category filter through its primary category or
    any of its additional categories. Pass category_id several times to
    filter by more than one category; include_subcategories and max_levels
    widen the filter down the category tree. Each article is listed once.
    """
    query = db.query(Article)

    if published_only:
        query = query.filter(Article.state == 1)

    category_filter = CategoryFilter(
        category_ids=category_id or [],
        include_subcategories=include_subcategories,
        max_levels=max_levels,
    )
    resolved = resolve_category_filter(expander, category_filter, diagnostics)
    query = EffectiveCategoryQueryBuilder().build_filter(query, resolved)

    query = query.order_by(desc(Article.created_at), desc(Article.id))
    return query.offset(skip).limit(limit).all()


@router.get("/form", response_model=ArticleForm)
def get_new_article_form(
    additional_category_id: Optional[List[str]] = SubmittedCategoryIdsParam,
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """Form data for a new article: prefilled selections and category choices."""
    return workflow.prepare_form(None, additional_category_id)


@router.post("/", response_model=ArticleSaveResult)
def create_article(
    article_data: ArticleCreate,
    db: Session = Depends(get_db),
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """
    Create an article, then store its additional categories.

    A failure to store the additional categories does not fail the request;
    ``associations_saved`` reports it instead.
    """
    if not _primary_category_exists(db, article_data.category_id):
        workflow.remember_pending(article_data.additional_category_ids)
        raise HTTPException(status_code=400, detail="Primary category not found")

    article = Article(
        title=article_data.title,
        introtext=article_data.introtext,
        state=article_data.state,
        category_id=article_data.category_id,
    )
    db.add(article)
    db.commit()
    db.refresh(article)

    saved = workflow.persist(
        article.id, article.category_id, article_data.additional_category_ids
    )
    logger.info(f"Created article {article.id} in category {article.category_id}")

    return _detail(article, workflow, associations_saved=saved)


@router.get("/{article_id}", response_model=ArticleDetail)
def get_article(
    article_id: int,
    db: Session = Depends(get_db),
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """Get an article with its additional and effective categories."""
    article = _get_article_or_404(db, article_id)
    return _detail(article, workflow)


@router.put("/{article_id}", response_model=ArticleSaveResult)
def update_article(
    article_id: int,
    article_update: ArticleUpdate,
    db: Session = Depends(get_db),
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """
    Update an article, then replace its additional categories.

    When additional_category_ids is omitted the stored selections are kept,
    minus the primary category if it changed to one of them.
    """
    article = _get_article_or_404(db, article_id)

    update_data = article_update.model_dump(exclude_unset=True)
    submitted = update_data.pop("additional_category_ids", None)

    if "category_id" in update_data and not _primary_category_exists(
        db, update_data["category_id"]
    ):
        if submitted is not None:
            workflow.remember_pending(submitted)
        raise HTTPException(status_code=400, detail="Primary category not found")

    for key, value in update_data.items():
        setattr(article, key, value)

    db.commit()
    db.refresh(article)

    if submitted is None:
        saved = workflow.revalidate(article.id, article.category_id)
    else:
        saved = workflow.persist(article.id, article.category_id, submitted)

    return _detail(article, workflow, associations_saved=saved)


@router.get("/{article_id}/form", response_model=ArticleForm)
def get_article_form(
    article_id: int,
    additional_category_id: Optional[List[str]] = SubmittedCategoryIdsParam,
    db: Session = Depends(get_db),
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """Form data for an existing article."""
    _get_article_or_404(db, article_id)
    return workflow.prepare_form(article_id, additional_category_id)


@router.get("/{article_id}/categories", response_model=ArticleCategories)
def get_article_categories(
    article_id: int,
    db: Session = Depends(get_db),
    workflow: AssociationEditingWorkflow = Depends(get_workflow),
):
    """Get the primary, additional and effective categories of an article."""
    article = _get_article_or_404(db, article_id)
    return workflow.describe(article.id, article.category_id)
