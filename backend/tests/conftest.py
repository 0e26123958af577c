"""
Pytest configuration and fixtures for multicat tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite:///:memory:")

import pytest
from typing import Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from multicat.core.database import Base, get_db
from multicat.core.logging_config import DiagnosticsLogger
from multicat.models.article import Article
from multicat.models.category import Category, PublishState


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


def make_category(
    db: Session,
    title: str,
    level: int,
    lft: int,
    rgt: int,
    parent: Category = None,
    published: int = PublishState.PUBLISHED,
    extension: str = "com_content",
    id: int = None,
) -> Category:
    category = Category(
        id=id,
        title=title,
        level=level,
        lft=lft,
        rgt=rgt,
        parent_id=parent.id if parent else None,
        published=int(published),
        extension=extension,
    )
    db.add(category)
    db.commit()
    db.refresh(category)
    return category


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def diagnostics() -> DiagnosticsLogger:
    return DiagnosticsLogger(enabled=True)


@pytest.fixture(scope="function")
def test_app(db_session, diagnostics):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
    from starlette.middleware.sessions import SessionMiddleware
    from multicat.api.endpoints import articles, categories

    test_app = FastAPI(title="Multicat - Test", version="1.0.0")
    test_app.state.diagnostics = diagnostics
    test_app.add_middleware(SessionMiddleware, secret_key="test_secret_key")

    test_app.include_router(articles.router, prefix="/api/articles", tags=["articles"])
    test_app.include_router(
        categories.router, prefix="/api/categories", tags=["categories"]
    )

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(scope="function")
def category_tree(db_session) -> Dict[str, Category]:
    """
    R (level 1, [1,10])
    ├── A (level 2, [2,5])
    │   └── B (level 3, [3,4])
    └── C (level 2, [6,9])
    """
    root = make_category(db_session, "R", level=1, lft=1, rgt=10)
    a = make_category(db_session, "A", level=2, lft=2, rgt=5, parent=root)
    b = make_category(db_session, "B", level=3, lft=3, rgt=4, parent=a)
    c = make_category(db_session, "C", level=2, lft=6, rgt=9, parent=root)
    return {"R": root, "A": a, "B": b, "C": c}


@pytest.fixture(scope="function")
def test_article(db_session, category_tree) -> Article:
    """An article whose primary category is A."""
    article = Article(
        title="Test Article",
        introtext="Intro text",
        category_id=category_tree["A"].id,
        state=1,
    )
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)
    return article


@pytest.fixture(scope="function")
def category_factory(db_session):
    """Create categories with explicit nested-set bounds."""

    def factory(title: str, level: int, lft: int, rgt: int, **kwargs) -> Category:
        return make_category(db_session, title, level, lft, rgt, **kwargs)

    return factory
