"""
Article storage for newsseo.
"""
import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from newsseo.core.article import Article, Author, format_timestamp
from newsseo.core.exceptions import ArticleNotFoundError, DuplicateSlugError, InvalidArticleError

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

_COLUMNS = "slug, title, content, image_url, author_name, created_at, updated_at"


def _utc(dt: datetime) -> str:
    """Stored timestamps are normalized to UTC so they sort as text."""
    return format_timestamp(dt.astimezone(timezone.utc))


class ArticleStore:
    """
    SQLite-backed store of published articles.

    Articles are never deleted; iteration order is publication order.
    """
    def __init__(self, db_path: Union[str, Path] = "articles.db"):
        self.db_path = Path(db_path)
        self._init_db()

    def _init_db(self):
        """Initialize the SQLite database."""
        if self.db_path.parent != Path('.'):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS articles (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    slug TEXT NOT NULL UNIQUE,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    image_url TEXT,
                    author_name TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    @staticmethod
    def _row_to_article(row: Tuple) -> Article:
        slug, title, content, image_url, author_name, created_at, updated_at = row
        return Article(
            slug=slug,
            title=title,
            content=content,
            author=Author(name=author_name),
            created_at=created_at,
            updated_at=updated_at,
            image_url=image_url,
        )

    def publish(self, article: Article) -> Article:
        """
        Insert a new article.

        Args:
            article: The article to publish

        Returns:
            The stored article

        Raises:
            InvalidArticleError: If the slug is not a valid URL slug
            DuplicateSlugError: If an article with the same slug exists
        """
        if not SLUG_PATTERN.match(article.slug or ''):
            raise InvalidArticleError("slug must be lowercase words joined by hyphens", slug=article.slug)

        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    f"INSERT INTO articles ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        article.slug,
                        article.title,
                        article.content,
                        article.image_url,
                        article.author.name,
                        _utc(article.created_at),
                        _utc(article.updated_at),
                    )
                )
        except sqlite3.IntegrityError as e:
            raise DuplicateSlugError(article.slug) from e

        logger.info(f"Published article {article.slug}")
        return article

    def update(self, slug: str, /, updated_at: Optional[datetime] = None, **changes) -> Article:
        """
        Edit an article's mutable fields and bump its ``updated_at``.

        Args:
            slug: Slug of the article to edit
            updated_at: Edit time, defaults to now
            **changes: Any of title, content, image_url, author

        Returns:
            The updated article
        """
        allowed = {'title', 'content', 'image_url', 'author'}
        unknown = set(changes) - allowed
        if unknown:
            raise InvalidArticleError(f"cannot edit field(s): {', '.join(sorted(unknown))}", slug=slug)

        current = self.get(slug)
        if current is None:
            raise ArticleNotFoundError(slug)

        article = current.edited(updated_at=updated_at, **changes)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(
                """
                UPDATE articles
                SET title = ?, content = ?, image_url = ?, author_name = ?, updated_at = ?
                WHERE slug = ?
                """,
                (
                    article.title,
                    article.content,
                    article.image_url,
                    article.author.name,
                    _utc(article.updated_at),
                    slug,
                )
            )

        logger.info(f"Updated article {slug}")
        return article

    def get(self, slug: str) -> Optional[Article]:
        """
        Get an article by slug.

        Returns:
            The article, or None if no article has this slug
        """
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.execute(f"SELECT {_COLUMNS} FROM articles WHERE slug = ?", (slug,))
            row = cursor.fetchone()
        return self._row_to_article(row) if row else None

    def all(self) -> List[Article]:
        """All articles in publication order."""
        with sqlite3.connect(self.db_path) as conn:
            rows = conn.execute(f"SELECT {_COLUMNS} FROM articles ORDER BY id").fetchall()
        return [self._row_to_article(row) for row in rows]

    def count(self) -> int:
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0]

    def fingerprint(self) -> Tuple[int, Optional[str], float]:
        """
        Cheap summary of the store contents.

        Edits never move ``updated_at`` backwards, so the summed timestamps
        grow whenever any article's last-modified date changes.

        Returns:
            (article count, latest updated_at, sum of updated_at epochs)
        """
        with sqlite3.connect(self.db_path) as conn:
            return conn.execute(
                "SELECT COUNT(*), MAX(updated_at), TOTAL(strftime('%s', updated_at)) FROM articles"
            ).fetchone()

    def import_records(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        Publish articles from plain mappings.

        Records whose slug already exists update the stored article instead,
        so importing the same file twice is harmless.

        Args:
            records: Iterable of article mappings (see Article.from_dict)

        Returns:
            Number of records processed
        """
        processed = 0
        for record in records:
            article = Article.from_dict(record)
            if self.get(article.slug) is None:
                self.publish(article)
            else:
                self.update(
                    article.slug,
                    updated_at=article.updated_at,
                    title=article.title,
                    content=article.content,
                    image_url=article.image_url,
                    author=article.author,
                )
            processed += 1

        logger.info(f"Imported {processed} articles into {self.db_path}")
        return processed
