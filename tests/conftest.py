from datetime import datetime, timezone
from typing import Any, Dict, List

import pytest

from newsseo.config import SiteSettings, StaticPage
from newsseo.core.article import Article, Author
from newsseo.core.store import ArticleStore


def make_article(**overrides: Any) -> Article:
    fields: Dict[str, Any] = {
        "slug": "election-2024",
        "title": "Election Results",
        "content": "The votes are in.\n\nTurnout was **high** across the country.",
        "author": Author(name="Jane Reporter"),
        "created_at": "2024-11-06T08:00:00Z",
        "updated_at": "2024-11-06T10:00:00Z",
        "image_url": None,
    }
    fields.update(overrides)
    return Article(**fields)


@pytest.fixture
def settings() -> SiteSettings:
    return SiteSettings(
        base_url="https://news.example.com",
        site_name="Example News",
        publisher_name="Example News Group",
        publisher_logo_url="https://news.example.com/logo.png",
        static_pages=[
            StaticPage(path="/", priority=1.0, changefreq="daily"),
            StaticPage(path="/about", priority=0.8, changefreq="monthly"),
            StaticPage(path="/categories", priority=0.8, changefreq="weekly"),
        ],
    )


@pytest.fixture
def election_article() -> Article:
    return make_article()


@pytest.fixture
def articles() -> List[Article]:
    return [
        make_article(),
        make_article(
            slug="storm-warning",
            title="Storm Warning Issued",
            content="Heavy rain expected.",
            author=Author(name="Sam Weather"),
            created_at=datetime(2024, 11, 7, 6, 30, tzinfo=timezone.utc),
            updated_at=datetime(2024, 11, 7, 9, 15, tzinfo=timezone.utc),
            image_url="https://cdn.example.com/storm.jpg",
        ),
    ]


@pytest.fixture
def store(tmp_path) -> ArticleStore:
    return ArticleStore(tmp_path / "articles.db")


@pytest.fixture
def populated_store(store, articles) -> ArticleStore:
    for article in articles:
        store.publish(article)
    return store
