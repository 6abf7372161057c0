"""Seed provider sources and default categories

Revision ID: 0002_reference_data
Revises: 0001_initial
Create Date: 2026-10-12 09:30:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "0002_reference_data"
down_revision = "0001_initial"
branch_labels = None
depends_on = None


SOURCES = [
    ("NewsAPI", "newsapi", "newsapi", "https://newsapi.org", "News from over 70,000 sources"),
    ("The Guardian", "the-guardian", "the-guardian", "https://www.theguardian.com", "Latest news from The Guardian"),
    ("New York Times", "nytimes", "nytimes", "https://www.nytimes.com", "All the news that's fit to print"),
    ("BBC News", "bbc-news", "bbc-news", "https://www.bbc.com/news", "BBC News - trusted news source"),
    ("OpenNews", "opennews", "opennews", "https://www.opennews.org", "Open news from various sources"),
]

CATEGORIES = [
    "Technology",
    "Politics",
    "Sports",
    "Business",
    "Entertainment",
    "Science",
    "Health",
    "World",
    "Environment",
    "Education",
]

sources_table = sa.table(
    "sources",
    sa.column("name", sa.Text),
    sa.column("slug", sa.Text),
    sa.column("api_identifier", sa.Text),
    sa.column("url", sa.Text),
    sa.column("description", sa.Text),
)

categories_table = sa.table(
    "categories",
    sa.column("name", sa.Text),
    sa.column("slug", sa.Text),
    sa.column("description", sa.Text),
)


def upgrade() -> None:
    op.bulk_insert(
        sources_table,
        [
            {
                "name": name,
                "slug": slug,
                "api_identifier": api_identifier,
                "url": url,
                "description": description,
            }
            for name, slug, api_identifier, url, description in SOURCES
        ],
    )
    op.bulk_insert(
        categories_table,
        [
            {"name": name, "slug": name.lower(), "description": f"News about {name}"}
            for name in CATEGORIES
        ],
    )


def downgrade() -> None:
    op.execute(
        categories_table.delete().where(
            categories_table.c.slug.in_([name.lower() for name in CATEGORIES])
        )
    )
    op.execute(
        sources_table.delete().where(
            sources_table.c.api_identifier.in_([row[2] for row in SOURCES])
        )
    )
