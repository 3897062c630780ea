"""
schema.org structured data (JSON-LD) for articles.
"""
import json
from typing import Any, Dict

from newsseo.config import SiteSettings
from newsseo.core.article import Article, format_timestamp
from newsseo.core.exceptions import StructuredDataError

SCHEMA_CONTEXT = "https://schema.org"


def build_news_article(article: Article, settings: SiteSettings) -> Dict[str, Any]:
    """
    Describe an article as a schema.org NewsArticle.

    Args:
        article: The article to describe
        settings: Site settings providing the base URL and publisher

    Returns:
        JSON-serializable dict; the ``image`` key is present only when the
        article has an image

    Raises:
        StructuredDataError: If the article has no title or slug
    """
    missing = [name for name in ('title', 'slug') if not (getattr(article, name) or '').strip()]
    if missing:
        raise StructuredDataError(missing, slug=article.slug or None)

    canonical_url = settings.absolute_url(article.path)
    data = {
        "@context": SCHEMA_CONTEXT,
        "@type": "NewsArticle",
        "mainEntityOfPage": {
            "@type": "WebPage",
            "@id": canonical_url
        },
        "url": canonical_url,
        "headline": article.title,
        "datePublished": format_timestamp(article.created_at),
        "dateModified": format_timestamp(article.updated_at),
        "author": {
            "@type": "Person",
            "name": article.author.name
        },
        "publisher": {
            "@type": "Organization",
            "name": settings.publisher_name,
            "logo": {
                "@type": "ImageObject",
                "url": settings.publisher_logo_url
            }
        }
    }
    if article.image_url:
        data["image"] = article.image_url
    return data


def to_script_tag(data: Dict[str, Any]) -> str:
    """Serialize structured data into a ``<script type="application/ld+json">`` block."""
    blob = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
    # Markup characters are escaped so article text cannot close or open elements
    for char, escaped in (("&", "\\u0026"), ("<", "\\u003c"), (">", "\\u003e")):
        blob = blob.replace(char, escaped)
    return f'<script type="application/ld+json">{blob}</script>'
