"""
Accelerated Mobile Pages (AMP) rendering for articles.
"""
import html
import logging
import re
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from newsseo.config import SiteSettings
from newsseo.core.article import Article
from newsseo.formatters.html import markdown_to_html
from newsseo.formatters.structured_data import build_news_article, to_script_tag

# Configure logging
logger = logging.getLogger(__name__)

AMP_RUNTIME_URL = "https://cdn.ampproject.org/v0.js"

AMP_BOILERPLATE = (
    "<style amp-boilerplate>body{-webkit-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "-moz-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "-ms-animation:-amp-start 8s steps(1,end) 0s 1 normal both;"
    "animation:-amp-start 8s steps(1,end) 0s 1 normal both}"
    "@-webkit-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-moz-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-ms-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@-o-keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}"
    "@keyframes -amp-start{from{visibility:hidden}to{visibility:visible}}</style>"
    "<noscript><style amp-boilerplate>body{-webkit-animation:none;-moz-animation:none;"
    "-ms-animation:none;animation:none}</style></noscript>"
)

AMP_CUSTOM_STYLE = (
    "body{font-family:-apple-system,BlinkMacSystemFont,\"Segoe UI\",Roboto,Helvetica,Arial,sans-serif;"
    "margin:0 auto;padding:16px;max-width:720px;line-height:1.6;color:#333}"
    "h1{font-size:1.9em;font-weight:700;color:#1a1a1a;margin:0.5em 0}"
    "a{color:#0066cc;text-decoration:none}"
    ".byline{color:#666;font-size:0.9em}"
    "blockquote{border-left:4px solid #0066cc;margin:20px 0;padding:10px 20px;background-color:#f8f9fa}"
)

# Elements that are invalid in AMP documents or need an extension script
DISALLOWED_TAGS = [
    'script', 'style', 'noscript', 'iframe', 'frame', 'frameset', 'object', 'embed',
    'param', 'applet', 'form', 'input', 'button', 'select', 'option', 'textarea',
    'base', 'link', 'meta', 'video', 'audio', 'source', 'track', 'canvas', 'svg',
]

_UNSAFE_URL = re.compile(r'^(javascript|vbscript|data):', re.IGNORECASE)

# Browsers drop control characters and whitespace before reading a URL scheme
_URL_IGNORED_CHARS = re.compile(r'[\x00-\x20]')

URL_ATTRIBUTES = ('href', 'src', 'srcset', 'poster', 'xlink:href', 'action', 'formaction')

_MARKUP_NODES = (Comment, CData, Declaration, Doctype, ProcessingInstruction)


def _is_unsafe_url(attr: str, value) -> bool:
    candidates = str(value).split(',') if attr == 'srcset' else [str(value)]
    return any(_UNSAFE_URL.match(_URL_IGNORED_CHARS.sub('', candidate)) for candidate in candidates)


def _dimension(value, default: int) -> int:
    try:
        number = int(str(value).strip().rstrip('px'))
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


class AmpRenderer:
    """
    Renders a restricted-markup AMP variant of an article.

    The only scripts emitted are the AMP runtime loader and the JSON-LD
    block; everything else is stripped from the article body.
    """
    def __init__(self, settings: SiteSettings):
        self.settings = settings

    def _amp_img(self, soup: BeautifulSoup, src: str, alt: str = "",
                 width: Optional[object] = None, height: Optional[object] = None):
        return soup.new_tag('amp-img', attrs={
            'src': src,
            'alt': alt,
            'width': str(_dimension(width, self.settings.amp_image_width)),
            'height': str(_dimension(height, self.settings.amp_image_height)),
            'layout': 'responsive',
        })

    def sanitize(self, body_html: str) -> str:
        """
        Strip constructs that are not allowed in AMP from an HTML fragment.

        Args:
            body_html: HTML fragment rendered from the article body

        Returns:
            AMP-safe HTML fragment
        """
        soup = BeautifulSoup(body_html, 'html.parser')

        # Comments and declarations are parsed differently by browsers
        for node in soup.find_all(string=lambda s: isinstance(s, _MARKUP_NODES)):
            node.extract()

        for element in soup.find_all(DISALLOWED_TAGS):
            # Nested matches are gone once their parent is decomposed
            if not element.decomposed:
                element.decompose()

        for tag in soup.find_all(True):
            for attr in list(tag.attrs):
                if attr.lower().startswith('on') or attr.lower() == 'style':
                    del tag[attr]
            for attr in URL_ATTRIBUTES:
                if tag.get(attr) and _is_unsafe_url(attr, tag[attr]):
                    logger.debug(f"Removed unsafe {attr} from <{tag.name}>")
                    del tag[attr]

        for img in soup.find_all('img'):
            if not img.get('src'):
                img.decompose()
                continue
            img.replace_with(self._amp_img(
                soup, img['src'], img.get('alt', ''), img.get('width'), img.get('height')
            ))

        return str(soup).strip()

    def render_body(self, content: str) -> str:
        """
        Render the article body as AMP-safe HTML.

        Non-empty content never renders to an empty body: if sanitizing
        removes everything, the escaped source text is shown instead.
        """
        body = self.sanitize(markdown_to_html(content))
        if content and content.strip():
            soup = BeautifulSoup(body, 'html.parser')
            if not soup.get_text(strip=True) and not soup.find('amp-img'):
                logger.warning("Article body was empty after AMP sanitizing, falling back to plain text")
                body = f"<p>{html.escape(content.strip())}</p>"
        return body

    def render(self, article: Article) -> str:
        """
        Render the AMP page for an article.

        Args:
            article: The article to render

        Returns:
            Complete AMP HTML document

        Raises:
            StructuredDataError: If the article has no title or slug
        """
        structured_data = to_script_tag(build_news_article(article, self.settings))
        title = html.escape(article.title)
        canonical_url = html.escape(self.settings.absolute_url(article.path))

        hero = ""
        if article.image_url:
            soup = BeautifulSoup("", 'html.parser')
            hero = "\n    " + str(self._amp_img(soup, article.image_url, article.title))

        page = f"""<!doctype html>
<html ⚡ lang="{html.escape(self.settings.language)}">
<head>
    <meta charset="utf-8">
    <script async src="{AMP_RUNTIME_URL}"></script>
    <title>{title}</title>
    <link rel="canonical" href="{canonical_url}">
    <meta name="viewport" content="width=device-width">
    {structured_data}
    <style amp-custom>{AMP_CUSTOM_STYLE}</style>
    {AMP_BOILERPLATE}
</head>
<body>
<article>
    <h1>{title}</h1>
    <p class="byline">By {html.escape(article.author.name)}</p>{hero}
    <div class="content">
{self.render_body(article.content)}
    </div>
</article>
</body>
</html>"""

        logger.debug(f"Rendered AMP page for {article.slug}")
        return page
