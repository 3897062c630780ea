"""
HTML rendering for the canonical (non-mobile) article page.
"""
import html
import logging
from typing import Optional

import mistune

from newsseo.config import SiteSettings
from newsseo.core.article import Article, format_timestamp
from newsseo.core.exceptions import StructuredDataError
from newsseo.formatters.structured_data import build_news_article, to_script_tag

# Configure logging
logger = logging.getLogger(__name__)

# Article bodies are Markdown that may contain inline HTML
_markdown = mistune.create_markdown(escape=False)


def markdown_to_html(content: str) -> str:
    """
    Convert an article body from Markdown to HTML.

    Args:
        content: Markdown source, possibly with inline HTML

    Returns:
        HTML fragment
    """
    if not content:
        return ""
    return _markdown(content)


PAGE_STYLE = """
        body {
            font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, Helvetica, Arial, sans-serif;
            max-width: 760px;
            margin: 0 auto;
            padding: 20px;
            line-height: 1.6;
            color: #333;
            font-size: 16px;
        }

        h1 {
            font-size: 2.25em;
            font-weight: 700;
            color: #1a1a1a;
            margin-top: 1em;
            margin-bottom: 0.5em;
        }

        a {
            color: #0066cc;
            text-decoration: none;
        }

        a:hover {
            text-decoration: underline;
        }

        img {
            max-width: 100%;
            height: auto;
            border-radius: 4px;
            margin: 20px 0;
        }

        .metadata {
            margin: 1rem 0;
            padding: 0.75rem 1rem;
            background-color: #f8f9fa;
            border-radius: 6px;
            font-size: 0.95em;
            line-height: 1.4;
            color: #666;
        }

        blockquote {
            border-left: 4px solid #0066cc;
            margin: 20px 0;
            padding: 10px 20px;
            background-color: #f8f9fa;
            color: #2d3748;
        }
"""


class ArticlePageRenderer:
    """
    Renders the full article page with its SEO head.

    The page embeds the article's JSON-LD, a canonical link and a
    ``rel="amphtml"`` pointer to the mobile-optimized variant.
    """
    def __init__(self, settings: SiteSettings):
        self.settings = settings

    def _structured_data(self, article: Article) -> str:
        try:
            return to_script_tag(build_news_article(article, self.settings))
        except StructuredDataError as e:
            logger.warning(f"Omitting structured data for {article.slug!r}: {e}")
            return ""

    def format_metadata(self, article: Article) -> str:
        """
        Format the byline block.

        Args:
            article: Article to describe

        Returns:
            HTML for the metadata block
        """
        items = [f'<strong>By:</strong> {html.escape(article.author.name)}']
        items.append(
            f'<strong>Published:</strong> <time datetime="{format_timestamp(article.created_at)}">'
            f'{article.created_at.strftime("%B %d, %Y")}</time>'
        )
        if article.updated_at > article.created_at:
            items.append(
                f'<strong>Updated:</strong> <time datetime="{format_timestamp(article.updated_at)}">'
                f'{article.updated_at.strftime("%B %d, %Y")}</time>'
            )
        return '<div class="metadata">' + '&nbsp;&nbsp;•&nbsp;&nbsp;'.join(items) + '</div>'

    def render(self, article: Article, description: Optional[str] = None) -> str:
        """
        Render an article page.

        Args:
            article: The article to render
            description: Optional meta description

        Returns:
            Complete HTML document
        """
        title = html.escape(article.title)
        canonical_url = html.escape(self.settings.absolute_url(article.path))
        amp_url = html.escape(self.settings.absolute_url(article.amp_path))

        description_tag = ""
        if description:
            description_tag = f'\n    <meta name="description" content="{html.escape(description)}">'

        image_html = ""
        if article.image_url:
            image_html = f'\n    <img src="{html.escape(article.image_url)}" alt="{title}">'

        html_content = f"""<!DOCTYPE html>
<html lang="{html.escape(self.settings.language)}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} | {html.escape(self.settings.site_name)}</title>{description_tag}
    <link rel="canonical" href="{canonical_url}">
    <link rel="amphtml" href="{amp_url}">
    {self._structured_data(article)}
    <style>{PAGE_STYLE}    </style>
</head>
<body>
<article>
    <h1>{title}</h1>
    {self.format_metadata(article)}{image_html}
    <div class="content">
{markdown_to_html(article.content)}
    </div>
</article>
</body>
</html>"""

        logger.debug(f"Rendered article page for {article.slug}")
        return html_content
