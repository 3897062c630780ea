"""
Sitemap generation for newsseo.
"""
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Union

from newsseo.config import SiteSettings
from newsseo.core.article import Article, format_timestamp

logger = logging.getLogger(__name__)

SITEMAP_NS = 'http://www.sitemaps.org/schemas/sitemap/0.9'

CHANGE_FREQUENCIES = ('always', 'hourly', 'daily', 'weekly', 'monthly', 'yearly', 'never')


def format_priority(priority: float) -> str:
    """Render a priority with at least one decimal place and no rounding."""
    text = f"{priority:.1f}"
    return text if float(text) == priority else f"{priority:g}"


@dataclass
class SitemapEntry:
    """
    One ``<url>`` element of the sitemap.
    """
    loc: str
    priority: float
    changefreq: Optional[str] = None
    lastmod: Optional[str] = None


class SitemapGenerator:
    """
    Builds the XML sitemap from the static pages and all articles.
    """
    def __init__(self, settings: SiteSettings):
        self.settings = settings

    def entries(self, articles: Iterable[Article]) -> List[SitemapEntry]:
        """
        Build the sitemap entries.

        Static pages come first in configured order, followed by one entry
        per article in the order given.

        Args:
            articles: Articles to list

        Returns:
            List of sitemap entries
        """
        result = [
            SitemapEntry(
                loc=self.settings.absolute_url(page.path),
                priority=page.priority,
                changefreq=page.changefreq,
            )
            for page in self.settings.static_pages
        ]

        for article in articles:
            result.append(SitemapEntry(
                loc=self.settings.absolute_url(article.path),
                priority=self.settings.article_priority,
                changefreq=self.settings.article_changefreq,
                lastmod=format_timestamp(article.updated_at),
            ))

        return result

    def render(self, articles: Iterable[Article]) -> bytes:
        """
        Render the sitemap document.

        Args:
            articles: Articles to list

        Returns:
            UTF-8 encoded XML with declaration
        """
        entries = self.entries(articles)

        urlset = ET.Element('urlset', xmlns=SITEMAP_NS)
        for entry in entries:
            url = ET.SubElement(urlset, 'url')
            # Child order follows the sitemaps.org schema
            ET.SubElement(url, 'loc').text = entry.loc
            if entry.lastmod:
                ET.SubElement(url, 'lastmod').text = entry.lastmod
            if entry.changefreq:
                if entry.changefreq not in CHANGE_FREQUENCIES:
                    logger.warning(f"Non-standard changefreq {entry.changefreq!r} for {entry.loc}")
                ET.SubElement(url, 'changefreq').text = entry.changefreq
            ET.SubElement(url, 'priority').text = format_priority(entry.priority)

        ET.indent(urlset)
        logger.debug(f"Rendered sitemap with {len(entries)} entries")
        return ET.tostring(urlset, encoding='utf-8', xml_declaration=True)

    def write(self, articles: Iterable[Article], path: Union[str, Path]) -> Path:
        """
        Write the sitemap to a file.

        Args:
            articles: Articles to list
            path: Output file path

        Returns:
            The path written
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(self.render(articles))
        logger.info(f"Wrote sitemap to {target}")
        return target

    def render_robots(self) -> str:
        """
        Render a robots.txt that advertises the sitemap.
        """
        return "\n".join([
            "User-agent: *",
            "Allow: /",
            f"Sitemap: {self.settings.sitemap_url}",
            "",
        ])
