from dataclasses import replace
import xml.etree.ElementTree as ET

from newsseo.config import StaticPage
from newsseo.formatters.sitemap import SITEMAP_NS, SitemapGenerator

NS = {"sm": SITEMAP_NS}


def _parse(document: bytes):
    root = ET.fromstring(document)
    return [
        {child.tag.split("}")[1]: child.text for child in url}
        for url in root.findall("sm:url", NS)
    ]


def test_entry_count_is_articles_plus_static_pages(settings, articles):
    entries = SitemapGenerator(settings).entries(articles)
    assert len(entries) == len(articles) + len(settings.static_pages)


def test_empty_article_set_lists_only_static_pages(settings):
    urls = _parse(SitemapGenerator(settings).render([]))

    assert [u["loc"] for u in urls] == [
        "https://news.example.com/",
        "https://news.example.com/about",
        "https://news.example.com/categories",
    ]
    assert all("lastmod" not in u for u in urls)


def test_static_pages_come_first_then_articles_in_order(settings, articles):
    urls = _parse(SitemapGenerator(settings).render(articles))

    assert [u["loc"] for u in urls[3:]] == [
        "https://news.example.com/articles/election-2024",
        "https://news.example.com/articles/storm-warning",
    ]
    assert [u["priority"] for u in urls[:3]] == ["1.0", "0.8", "0.8"]


def test_article_entry_fields(settings, election_article):
    urls = _parse(SitemapGenerator(settings).render([election_article]))
    entry = urls[-1]

    assert entry == {
        "loc": "https://news.example.com/articles/election-2024",
        "lastmod": "2024-11-06T10:00:00Z",
        "changefreq": "daily",
        "priority": "0.9",
    }


def test_document_is_well_formed_with_declaration(settings, articles):
    document = SitemapGenerator(settings).render(articles)

    assert document.startswith(b"<?xml")
    root = ET.fromstring(document)
    assert root.tag == f"{{{SITEMAP_NS}}}urlset"


def test_child_order_follows_schema(settings, election_article):
    root = ET.fromstring(SitemapGenerator(settings).render([election_article]))
    last = root.findall("sm:url", NS)[-1]
    assert [child.tag.split("}")[1] for child in last] == ["loc", "lastmod", "changefreq", "priority"]


def test_special_characters_are_escaped(settings):
    settings_with_query = replace(
        settings,
        base_url="https://news.example.com/?edition=us&lang=en",
        static_pages=settings.static_pages[:1],
    )
    document = SitemapGenerator(settings_with_query).render([])
    assert b"&amp;" in document
    ET.fromstring(document)


def test_write_creates_file(settings, articles, tmp_path):
    target = SitemapGenerator(settings).write(articles, tmp_path / "public" / "sitemap.xml")
    assert len(_parse(target.read_bytes())) == 5


def test_robots_advertises_sitemap(settings):
    robots = SitemapGenerator(settings).render_robots()
    assert "Sitemap: https://news.example.com/sitemap.xml" in robots
    assert robots.startswith("User-agent: *")


def test_configured_priorities_are_not_rounded(settings):
    precise = replace(settings, static_pages=[StaticPage(path="/", priority=0.85), StaticPage(path="/about", priority=1.0)])
    urls = _parse(SitemapGenerator(precise).render([]))

    assert [u["priority"] for u in urls] == ["0.85", "1.0"]
