"""Tests for page loading."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from webclipper.errors import FetchError
from webclipper.fetch import PageLoader, decode_html, detect_encoding


def make_response(content: bytes, status_code: int = 200, content_type: str = "text/html", encoding=None):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.headers = {"Content-Type": content_type}
    response.encoding = encoding
    return response


class TestEncoding:
    """Tests for charset detection."""

    def test_detects_meta_charset(self):
        """Test <meta charset> and http-equiv forms."""
        assert detect_encoding(b'<meta charset="euc-kr">') == "euc-kr"
        assert detect_encoding(b'<meta http-equiv="Content-Type" content="text/html; charset=Shift_JIS">') == "Shift_JIS"

    def test_default_encoding(self):
        """Test the fallback."""
        assert detect_encoding(b"<p>x</p>") == "utf-8"

    def test_decode_with_sniffed_charset(self):
        """Test decoding non-UTF-8 bytes."""
        html = '<meta charset="euc-kr"><p>안녕</p>'.encode("euc-kr")

        assert "안녕" in decode_html(html)

    def test_unknown_charset_falls_back(self):
        """Test that a bogus charset does not raise."""
        assert decode_html(b'<meta charset="nope"><p>x</p>') == '<meta charset="nope"><p>x</p>'


class TestPageLoaderUrls:
    """Tests for loading URLs."""

    def test_load_url(self):
        """Test a successful fetch."""
        response = make_response(b"<title>Hi</title>", content_type="text/html; charset=utf-8", encoding="utf-8")

        with patch("webclipper.fetch.requests.get", return_value=response) as mock_get:
            page = PageLoader(user_agent="test-agent", timeout=3).load("https://example.com/post")

        assert page.html == "<title>Hi</title>"
        assert page.url == "https://example.com/post"
        assert page.selection_html is None
        _, kwargs = mock_get.call_args
        assert kwargs["timeout"] == 3
        assert kwargs["headers"]["User-Agent"] == "test-agent"

    def test_recorded_url_override(self):
        """Test that --url style overrides win."""
        response = make_response(b"<p>x</p>")

        with patch("webclipper.fetch.requests.get", return_value=response):
            page = PageLoader().load("https://mirror.example.com/p", url="https://example.com/p", selection_html="<b>s</b>")

        assert page.url == "https://example.com/p"
        assert page.selection_html == "<b>s</b>"

    def test_http_error(self):
        """Test that HTTP errors raise FetchError."""
        with patch("webclipper.fetch.requests.get", return_value=make_response(b"", status_code=404)):
            with pytest.raises(FetchError) as exc_info:
                PageLoader().load("https://example.com/missing")

        assert exc_info.value.status_code == 404
        assert "HTTP 404" in str(exc_info.value)

    def test_connection_error(self):
        """Test that request failures raise FetchError."""
        with patch("webclipper.fetch.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(FetchError, match="refused"):
                PageLoader().load("http://localhost:1/")


class TestPageLoaderFiles:
    """Tests for loading local files."""

    def test_load_file(self, tmp_path):
        """Test loading a saved page."""
        path = tmp_path / "page.html"
        path.write_text("<h1>Saved</h1>", encoding="utf-8")

        page = PageLoader().load(str(path))

        assert page.html == "<h1>Saved</h1>"
        assert page.url == path.resolve().as_uri()

    def test_load_file_with_url(self, tmp_path):
        """Test recording the original address of a saved page."""
        path = tmp_path / "page.html"
        path.write_text("<h1>Saved</h1>", encoding="utf-8")

        page = PageLoader().load(str(path), url="https://example.com/post")

        assert page.url == "https://example.com/post"
        assert page.hostname == "example.com"

    def test_missing_file(self, tmp_path):
        """Test that unreadable files raise FetchError."""
        with pytest.raises(FetchError):
            PageLoader().load(str(tmp_path / "missing.html"))
