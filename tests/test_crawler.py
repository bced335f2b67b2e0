"""
Tests for the site crawler.

HTTP is mocked through a fake requests session.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from aeo_guru.crawl.crawler import (
    collect_sitemap_urls,
    crawl_site,
    extract_page,
    fetch_html,
    normalize_url,
)
from aeo_guru.crawl.language import detect_language

PAGE_HTML = """
<html lang="en-US">
<head><title>Acme Widgets</title><style>.x { color: red }</style></head>
<body>
  <nav><a href="/about">About</a></nav>
  <h1>Widgets for everyone</h1>
  <p>Our widgets are sturdy.</p>
  <p>They ship worldwide.</p>
  <a href="/pricing#plans">Pricing</a>
  <a href="mailto:sales@acme.test">Mail</a>
  <a href="https://other.test/page">Partner</a>
  <script>var tracking = 1;</script>
  <footer>Copyright</footer>
</body>
</html>
"""


def make_session(pages):
    """Session whose get() serves HTML from a dict and 404s otherwise."""
    session = Mock(spec=requests.Session)

    def get(url, **kwargs):
        response = Mock()
        if url in pages:
            response.text = pages[url]
            response.raise_for_status.return_value = None
        else:
            response.raise_for_status.side_effect = requests.HTTPError(f"404 for {url}")
        return response

    session.get.side_effect = get
    return session


class TestExtractPage:

    def test_extracts_title_h1_content(self):
        page = extract_page("https://acme.test/", PAGE_HTML)

        assert page.title == "Acme Widgets"
        assert page.h1 == "Widgets for everyone"
        assert "Our widgets are sturdy." in page.content
        assert "They ship worldwide." in page.content
        assert "tracking" not in page.content
        assert "Copyright" not in page.content
        assert "color: red" not in page.content

    def test_paragraphs_separated_by_blank_lines(self):
        page = extract_page("https://acme.test/", PAGE_HTML)
        assert "Our widgets are sturdy.\n\nThey ship worldwide." in page.content

    def test_links_are_absolute_and_defragmented(self):
        page = extract_page("https://acme.test/", PAGE_HTML)

        assert "https://acme.test/about" in page.links
        assert "https://acme.test/pricing" in page.links
        assert "https://other.test/page" in page.links
        assert not any(link.startswith("mailto:") for link in page.links)

    def test_language_from_html_attribute(self):
        page = extract_page("https://acme.test/", PAGE_HTML)
        assert page.lang == "en"

    def test_language_detected_without_attribute(self):
        html = (
            "<html><body><p>Die Katze sitzt auf der Matte und schaut aus dem Fenster, "
            "während draußen der Regen fällt und die Kinder in der Schule sind.</p></body></html>"
        )
        page = extract_page("https://acme.test/de", html)
        assert page.lang == "de"


class TestFetch:

    def test_fetch_html_uses_timeout_and_user_agent(self):
        session = make_session({"https://acme.test/": "<html></html>"})
        assert fetch_html("https://acme.test/", session) == "<html></html>"

        _, kwargs = session.get.call_args
        assert kwargs["timeout"] == 20
        assert kwargs["allow_redirects"] is True
        assert "User-Agent" in kwargs["headers"]

    def test_fetch_html_raises_on_error_status(self):
        with pytest.raises(requests.HTTPError):
            fetch_html("https://acme.test/missing", make_session({}))

    def test_normalize_url(self):
        assert normalize_url(" https://acme.test/a#top ") == "https://acme.test/a"


class TestSitemap:

    def test_urlset(self):
        xml = """<?xml version="1.0"?>
        <urlset>
          <url><loc>https://acme.test/a</loc></url>
          <url><loc>https://acme.test/b#x</loc></url>
          <url><loc>https://acme.test/a</loc></url>
        </urlset>"""
        session = make_session({"https://acme.test/sitemap.xml": xml})

        urls = collect_sitemap_urls("https://acme.test/sitemap.xml", session=session)

        assert urls == ["https://acme.test/a", "https://acme.test/b"]

    def test_sitemap_index_is_followed(self):
        index = """<sitemapindex>
          <sitemap><loc>https://acme.test/s1.xml</loc></sitemap>
          <sitemap><loc>https://acme.test/s2.xml</loc></sitemap>
        </sitemapindex>"""
        s1 = "<urlset><url><loc>https://acme.test/one</loc></url></urlset>"
        s2 = "<urlset><url><loc>https://acme.test/two</loc></url></urlset>"
        session = make_session({
            "https://acme.test/sitemap.xml": index,
            "https://acme.test/s1.xml": s1,
            "https://acme.test/s2.xml": s2,
        })

        urls = collect_sitemap_urls("https://acme.test/sitemap.xml", session=session)

        assert urls == ["https://acme.test/one", "https://acme.test/two"]

    def test_limit(self):
        xml = "<urlset>" + "".join(
            f"<url><loc>https://acme.test/{i}</loc></url>" for i in range(10)
        ) + "</urlset>"
        session = make_session({"https://acme.test/sitemap.xml": xml})

        assert len(collect_sitemap_urls("https://acme.test/sitemap.xml", limit=3, session=session)) == 3

    def test_unreachable_sitemap_yields_nothing(self):
        assert collect_sitemap_urls("https://acme.test/sitemap.xml", session=make_session({})) == []


class TestCrawlSite:

    def test_breadth_first_same_origin(self):
        pages = {
            "https://acme.test/": '<html><body><a href="/a">A</a><a href="https://ext.test/">E</a></body></html>',
            "https://acme.test/a": '<html><body><p>A</p><a href="/b">B</a><a href="/">Home</a></body></html>',
            "https://acme.test/b": "<html><body><p>B</p></body></html>",
        }
        session = make_session(pages)

        result = crawl_site("https://acme.test/", limit=10, delay=0, session=session)

        assert [p.url for p in result] == ["https://acme.test/", "https://acme.test/a", "https://acme.test/b"]
        requested = [c.args[0] for c in session.get.call_args_list]
        assert "https://ext.test/" not in requested

    def test_limit_and_failures(self):
        pages = {
            "https://acme.test/": '<html><body><a href="/missing">M</a><a href="/a">A</a><a href="/b">B</a></body></html>',
            "https://acme.test/a": "<html><body><p>A</p></body></html>",
            "https://acme.test/b": "<html><body><p>B</p></body></html>",
        }
        result = crawl_site("https://acme.test/", limit=2, delay=0, session=make_session(pages))
        assert [p.url for p in result] == ["https://acme.test/", "https://acme.test/a"]

    @patch("aeo_guru.crawl.crawler.time.sleep")
    def test_delay_between_fetches(self, mock_sleep):
        pages = {
            "https://acme.test/": '<html><body><a href="/a">A</a></body></html>',
            "https://acme.test/a": "<html><body><p>A</p></body></html>",
        }
        crawl_site("https://acme.test/", limit=5, delay=0.5, session=make_session(pages))
        mock_sleep.assert_called_once_with(0.5)


class TestDetectLanguage:

    def test_short_text_falls_back(self):
        assert detect_language("Hi") == "en"
        assert detect_language("", fallback="fr") == "fr"

    def test_english(self):
        text = "The quick brown fox jumps over the lazy dog while the farmer watches from the porch."
        assert detect_language(text) == "en"

    def test_detection_error_falls_back(self):
        from langdetect.lang_detect_exception import LangDetectException

        with patch("aeo_guru.crawl.language.detect", side_effect=LangDetectException(0, "no features")):
            assert detect_language("12345 67890 12345 67890 !!!", fallback="es") == "es"

    def test_regional_variant_reduced(self):
        with patch("aeo_guru.crawl.language.detect", return_value="zh-cn"):
            assert detect_language("这是一个很长的中文句子，用来测试语言检测功能是否正常工作。") == "zh"

    def test_unsupported_language_falls_back(self):
        with patch("aeo_guru.crawl.language.detect", return_value="sw"):
            assert detect_language("Habari ya asubuhi rafiki yangu mpendwa sana") == "en"
