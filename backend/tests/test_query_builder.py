"""Tests for effective-category filtering of article queries."""

import pytest
from unittest.mock import Mock
from sqlalchemy.exc import OperationalError

from multicat.core.exceptions import StoreUnavailableError
from multicat.models.article import Article
from multicat.schemas.category import CategoryFilter
from multicat.services.association_store import AssociationStore
from multicat.services.descendant_expander import DescendantExpander
from multicat.services.query_builder import (
    EffectiveCategoryQueryBuilder,
    resolve_category_filter,
)


@pytest.fixture
def flat_categories(category_factory):
    for category_id in (4, 7, 9):
        category_factory(
            f"Category {category_id}",
            level=1,
            lft=category_id * 2,
            rgt=category_id * 2 + 1,
            id=category_id,
        )


@pytest.fixture
def articles(db_session, flat_categories):
    """
    first: primary 4, additional 9
    second: primary 7, additional 4 and 9
    third: primary 7
    """
    first = Article(title="First", category_id=4)
    second = Article(title="Second", category_id=7)
    third = Article(title="Third", category_id=7)
    db_session.add_all([first, second, third])
    db_session.commit()

    store = AssociationStore(db_session)
    store.replace_associations(first.id, [9])
    store.replace_associations(second.id, [4, 9])
    return {"first": first, "second": second, "third": third}


def titles(query):
    return sorted(article.title for article in query.all())


@pytest.mark.unit
class TestEffectiveCategoryQueryBuilder:
    def test_absent_filter_returns_base_query(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, None)

        assert filtered is base
        assert titles(filtered) == ["First", "Second", "Third"]

    def test_empty_resolved_filter_matches_nothing(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [])

        assert filtered.all() == []

    def test_invalid_ids_only_match_nothing(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [0, -4])

        assert filtered.all() == []

    def test_matches_by_association(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [9])

        assert titles(filtered) == ["First", "Second"]

    def test_primary_and_association_match_once(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [4, 9])

        results = filtered.all()
        ids = [article.id for article in results]
        assert len(ids) == len(set(ids))
        assert sorted(article.title for article in results) == ["First", "Second"]

    def test_matches_by_primary_category(self, db_session, articles):
        base = db_session.query(Article)
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [7])

        assert titles(filtered) == ["Second", "Third"]

    def test_keeps_base_conditions(self, db_session, articles):
        base = db_session.query(Article).filter(Article.title != "Second")
        filtered = EffectiveCategoryQueryBuilder().build_filter(base, [9])

        assert titles(filtered) == ["First"]


@pytest.mark.unit
class TestResolveCategoryFilter:
    def test_no_filter_requested(self, db_session):
        expander = DescendantExpander(db_session)
        assert resolve_category_filter(expander, None) is None
        assert resolve_category_filter(expander, CategoryFilter()) is None

    def test_malformed_ids_resolve_to_nothing(self, db_session):
        expander = DescendantExpander(db_session)
        category_filter = CategoryFilter(category_ids=["abc", "-2"])

        assert category_filter.requested
        assert resolve_category_filter(expander, category_filter) == []

    def test_subcategories_with_level_limit(self, db_session, category_tree):
        expander = DescendantExpander(db_session)
        category_filter = CategoryFilter(
            category_ids=[str(category_tree["R"].id)],
            include_subcategories=True,
            max_levels=1,
        )

        resolved = resolve_category_filter(expander, category_filter)

        assert resolved == sorted(
            [category_tree["R"].id, category_tree["A"].id, category_tree["C"].id]
        )

    def test_zero_levels_means_all_levels(self, db_session, category_tree):
        expander = DescendantExpander(db_session)
        category_filter = CategoryFilter(
            category_ids=[category_tree["A"].id],
            include_subcategories=True,
            max_levels=0,
        )

        resolved = resolve_category_filter(expander, category_filter)

        assert resolved == [category_tree["A"].id, category_tree["B"].id]

    def test_expansion_failure_falls_back_to_seeds(self, db_session, diagnostics):
        expander = Mock(spec=DescendantExpander)
        expander.expand.side_effect = StoreUnavailableError(
            "Failed to expand categories",
            cause=OperationalError("SELECT", {}, Exception("down")),
        )
        diagnostics.log_event = Mock()

        resolved = resolve_category_filter(
            expander,
            CategoryFilter(category_ids=[5, 2, 5], include_subcategories=True),
            diagnostics,
        )

        assert resolved == [2, 5]
        diagnostics.log_event.assert_called_once()
        assert (
            diagnostics.log_event.call_args.args[0]
            == "multicat.categories.expand_failed"
        )
