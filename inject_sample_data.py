#!/usr/bin/env python3
"""
Script to inject a sample category tree and cross-posted articles into the database.

Uses the application's own settings (POSTGRES_* or DATABASE_URL_OVERRIDE).

Usage: python3 inject_sample_data.py
"""

import sys

from sqlalchemy.exc import SQLAlchemyError

from multicat.core.config import settings
from multicat.core.database import Base, SessionLocal, engine
from multicat.core.exceptions import AssociationWriteError
from multicat.models import Article, Category
from multicat.services.association_store import AssociationStore
from multicat.services.category_tree import CategoryTreeAccessor


# Sample taxonomy: (title, parent title)
SAMPLE_CATEGORIES = [
    ("News", None),
    ("World", "News"),
    ("Europe", "World"),
    ("Asia", "World"),
    ("Sport", "News"),
    ("Football", "Sport"),
    ("Technology", None),
    ("Science", "Technology"),
]

# Sample articles: (title, primary category, additional categories)
SAMPLE_ARTICLES = [
    ("Champions League final preview", "Football", ["Europe"]),
    ("Chip exports reshape trade", "Technology", ["Asia", "World"]),
    ("New telescope images released", "Science", []),
    ("Election results across the continent", "Europe", ["News"]),
]


def inject_sample_data():
    """Create the sample tree, renumber it and attach additional categories."""
    print("🔌 Connecting to database...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        existing = (
            db.query(Category)
            .filter(Category.extension == settings.CATEGORY_EXTENSION)
            .count()
        )
        if existing:
            print(f"⊘ {existing} categories already present, nothing to do.")
            return

        by_title = {}
        for title, parent_title in SAMPLE_CATEGORIES:
            category = Category(
                title=title,
                extension=settings.CATEGORY_EXTENSION,
                parent_id=by_title[parent_title].id if parent_title else None,
            )
            db.add(category)
            db.flush()
            by_title[title] = category
            print(f"✓ Added category: {title} (ID: {category.id})")
        db.commit()

        CategoryTreeAccessor(db).rebuild_tree()
        print("✓ Nested set rebuilt")
        print()

        store = AssociationStore(db)
        for title, primary, additional in SAMPLE_ARTICLES:
            article = Article(title=title, category_id=by_title[primary].id)
            db.add(article)
            db.commit()
            db.refresh(article)

            written = store.replace_associations(
                article.id, [by_title[name].id for name in additional]
            )
            print(f"✓ Added article: {title} (ID: {article.id})")
            print(f"  Primary: {primary}, additional: {len(written)}")

        print()
        print(f"✓ Successfully added {len(SAMPLE_ARTICLES)} sample article(s)")

    except (SQLAlchemyError, AssociationWriteError) as e:
        print(f"❌ Error: {e}")
        db.rollback()
        sys.exit(1)

    finally:
        db.close()
        print()
        print("✓ Database connection closed")


if __name__ == "__main__":
    print("=" * 60)
    print("  Multi-category Sample Data Injection Script")
    print("=" * 60)
    print()

    inject_sample_data()
