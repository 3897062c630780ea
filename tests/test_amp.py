import json

import pytest
from bs4 import BeautifulSoup

from newsseo.core.exceptions import StructuredDataError
from newsseo.formatters.amp import AMP_RUNTIME_URL, AmpRenderer

from tests.conftest import make_article


def _scripts(page: str):
    return BeautifulSoup(page, "html.parser").find_all("script")


def _assert_only_allowed_scripts(page: str):
    for script in _scripts(page):
        is_runtime = script.get("src") == AMP_RUNTIME_URL and script.has_attr("async")
        is_json_ld = script.get("type") == "application/ld+json"
        assert is_runtime or is_json_ld, str(script)


def test_page_structure(settings, election_article):
    page = AmpRenderer(settings).render(election_article)
    soup = BeautifulSoup(page, "html.parser")

    assert page.startswith("<!doctype html>")
    assert soup.html.has_attr("⚡")
    assert soup.find("link", rel="canonical")["href"] == "https://news.example.com/articles/election-2024"
    assert soup.find("h1").get_text() == "Election Results"
    assert soup.find("style", attrs={"amp-boilerplate": True}) is not None
    assert soup.find("style", attrs={"amp-custom": True}) is not None
    assert "high" in soup.find("div", class_="content").get_text()


def test_structured_data_is_embedded(settings, election_article):
    page = AmpRenderer(settings).render(election_article)
    block = BeautifulSoup(page, "html.parser").find("script", type="application/ld+json")

    data = json.loads(block.string)
    assert data["headline"] == "Election Results"
    assert "image" not in data


def test_no_image_element_without_image_url(settings, election_article):
    page = AmpRenderer(settings).render(election_article)
    soup = BeautifulSoup(page, "html.parser")

    assert soup.find("amp-img") is None
    assert soup.find("img") is None


def test_hero_image_is_responsive_amp_img(settings):
    page = AmpRenderer(settings).render(make_article(image_url="https://cdn.example.com/results.jpg"))
    hero = BeautifulSoup(page, "html.parser").find("amp-img")

    assert hero["src"] == "https://cdn.example.com/results.jpg"
    assert hero["layout"] == "responsive"
    assert hero["width"] == "1200"
    assert hero["height"] == "675"


def test_only_runtime_and_json_ld_scripts(settings):
    article = make_article(content=(
        "Intro paragraph.\n\n"
        "<script>alert('x')</script>\n\n"
        "<p onclick=\"steal()\" style=\"color:red\">Styled</p>\n\n"
        "<iframe src=\"https://ads.example.com\"></iframe>\n\n"
        "<form><input name=\"q\"><button>Go</button></form>\n\n"
        "[bad link](javascript:alert(1))\n\n"
        "<!--><script>alert(2)</script>-->\n\n"
        "<!-- <script>alert(3)</script> -->"
    ))
    page = AmpRenderer(settings).render(article)
    soup = BeautifulSoup(page, "html.parser")

    assert len(_scripts(page)) == 2
    _assert_only_allowed_scripts(page)
    assert "<script" not in soup.find("div", class_="content").decode_contents()
    assert soup.find("iframe") is None
    assert soup.find("form") is None
    assert soup.find("input") is None
    assert soup.find(attrs={"onclick": True}) is None
    styled = soup.find("p", string="Styled")
    assert styled is not None and not styled.has_attr("style")
    assert not any(a.get("href", "").startswith("javascript:") for a in soup.find_all("a"))


def test_inline_images_become_amp_img(settings):
    article = make_article(content='Photo below.\n\n<img src="https://cdn.example.com/a.jpg" alt="A" width="640" height="480">')
    body = BeautifulSoup(AmpRenderer(settings).render(article), "html.parser").find("div", class_="content")

    assert body.find("img") is None
    amp_img = body.find("amp-img")
    assert amp_img["src"] == "https://cdn.example.com/a.jpg"
    assert amp_img["width"] == "640"
    assert amp_img["height"] == "480"


def test_image_without_src_is_dropped(settings):
    renderer = AmpRenderer(settings)
    assert "amp-img" not in renderer.sanitize('<p>Text</p><img alt="broken">')


@pytest.mark.parametrize("content", [
    "Plain text body.",
    "<script>alert('only a script')</script>",
    "<style>p { color: red }</style>",
    "<iframe src=\"https://example.com\"></iframe>",
])
def test_non_empty_content_never_renders_empty(settings, content):
    page = AmpRenderer(settings).render(make_article(content=content))
    body = BeautifulSoup(page, "html.parser").find("div", class_="content")

    assert body.get_text(strip=True)
    _assert_only_allowed_scripts(page)


def test_title_is_escaped(settings):
    page = AmpRenderer(settings).render(make_article(title="<b>Breaking</b> & more"))
    soup = BeautifulSoup(page, "html.parser")
    assert soup.find("h1").get_text() == "<b>Breaking</b> & more"
    assert soup.find("h1").find("b") is None


def test_missing_title_propagates(settings):
    with pytest.raises(StructuredDataError):
        AmpRenderer(settings).render(make_article(title=""))


@pytest.mark.parametrize("markup", [
    "<!--><script>alert(1)</script>-->",
    "<!-- <script>alert(1)</script> -->",
    "<![CDATA[<script>alert(1)</script>]]>",
    "<!DOCTYPE html>",
])
def test_comments_and_declarations_are_removed(settings, markup):
    body = AmpRenderer(settings).sanitize(f"<p>Intro.</p>{markup}")

    assert "<script" not in body
    assert "<!" not in body
    assert body.startswith("<p>Intro.</p>")


@pytest.mark.parametrize("markup", [
    '<a href="java&#9;script:alert(1)">x</a>',
    '<a href="java&#10;script:alert(1)">x</a>',
    '<a href=" &#1;javascript:alert(1)">x</a>',
    '<a xlink:href="javascript:alert(1)">x</a>',
    '<img src="https://cdn.example.com/a.jpg" srcset="https://cdn.example.com/a.jpg 1x, javascript:alert(1) 2x">',
    '<amp-video poster="vbscript:msgbox(1)"></amp-video>',
])
def test_scheme_obfuscated_urls_are_removed(settings, markup):
    soup = BeautifulSoup(AmpRenderer(settings).sanitize(markup), "html.parser")

    for tag in soup.find_all(True):
        for value in tag.attrs.values():
            cleaned = "".join(ch for ch in str(value) if ord(ch) > 0x20).lower()
            assert "script:" not in cleaned
