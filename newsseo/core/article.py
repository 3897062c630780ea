"""
Article data model for newsseo.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Union

from newsseo.core.exceptions import InvalidArticleError


def parse_timestamp(value: Union[str, datetime]) -> datetime:
    """
    Parse an ISO-8601 timestamp into a timezone-aware datetime.

    Naive values are assumed to be UTC. A trailing ``Z`` is accepted.
    """
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidArticleError(f"unparseable timestamp {value!r}") from e
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    """
    Format a datetime as a W3C datetime string.

    UTC values use the ``Z`` suffix (``2024-11-06T10:00:00Z``); other offsets
    are kept as they are.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if dt.utcoffset() == timedelta(0):
        return dt.astimezone(timezone.utc).replace(tzinfo=None).isoformat(timespec='seconds') + 'Z'
    return dt.isoformat(timespec='seconds')


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


@dataclass(frozen=True)
class Author:
    """
    Author of an article, referenced by name only.
    """
    name: str

    @classmethod
    def from_value(cls, value: Any) -> "Author":
        if isinstance(value, Author):
            return value
        if isinstance(value, dict):
            return cls(name=str(value.get('name') or ''))
        return cls(name=str(value or ''))


@dataclass
class Article:
    """
    Represents one published news story.

    ``updated_at`` is never earlier than ``created_at``.
    """
    slug: str
    title: str
    content: str
    author: Author
    created_at: datetime
    updated_at: Optional[datetime] = None
    image_url: Optional[str] = None

    def __post_init__(self):
        self.author = Author.from_value(self.author)
        self.created_at = parse_timestamp(self.created_at)
        self.updated_at = parse_timestamp(self.updated_at) if self.updated_at is not None else self.created_at
        if self.updated_at < self.created_at:
            raise InvalidArticleError("updated_at is earlier than created_at", slug=self.slug)
        if not self.image_url:
            self.image_url = None

    @property
    def path(self) -> str:
        """Site-relative path of the canonical article page."""
        return f"/articles/{self.slug}"

    @property
    def amp_path(self) -> str:
        """Site-relative path of the mobile-optimized variant."""
        return f"/articles/{self.slug}/amp"

    def edited(self, updated_at: Optional[datetime] = None, **changes) -> "Article":
        """
        Return a copy with ``changes`` applied and ``updated_at`` bumped.

        The slug cannot be changed once published.
        """
        if 'slug' in changes and changes['slug'] != self.slug:
            raise InvalidArticleError("slug is immutable once published", slug=self.slug)
        changes.pop('slug', None)
        stamp = parse_timestamp(updated_at) if updated_at is not None else utcnow()
        # Clock skew must not move updated_at backwards
        stamp = max(stamp, self.updated_at)
        return replace(self, updated_at=stamp, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        """
        Build an Article from a plain mapping (JSON or YAML import).

        Accepts both snake_case and camelCase keys.
        """
        def pick(*keys):
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return None

        created_at = pick('created_at', 'createdAt')
        if created_at is None:
            raise InvalidArticleError("created_at is required", slug=data.get('slug'))

        return cls(
            slug=str(data.get('slug') or ''),
            title=str(data.get('title') or ''),
            content=str(data.get('content') or ''),
            author=Author.from_value(data.get('author')),
            created_at=created_at,
            updated_at=pick('updated_at', 'updatedAt'),
            image_url=pick('image_url', 'imageUrl'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'slug': self.slug,
            'title': self.title,
            'content': self.content,
            'author': self.author.name,
            'created_at': format_timestamp(self.created_at),
            'updated_at': format_timestamp(self.updated_at),
            'image_url': self.image_url,
        }
