"""
Tests for the fetch strategies.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import requests

sys.path.insert(0, str(Path(__file__).parent.parent))

from config_manager import SourceConfig
from ingestion.errors import FetchError
from ingestion.fetchers import (
    FileFetcher,
    FixtureFetcher,
    HttpFetcher,
    build_fetcher,
)


def http_response(status=200, content=b"<sdnList/>"):
    response = MagicMock()
    response.status_code = status
    response.content = content
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


class TestHttpFetcher:
    """Tests for live downloads."""

    def test_returns_body(self):
        """Successful GET returns the raw bytes with the configured timeout."""
        with patch("ingestion.fetchers.requests.get", return_value=http_response()) as get:
            content = HttpFetcher("https://example.test/sdn.xml", timeout=5).fetch_raw("OFAC")

        assert content == b"<sdnList/>"
        args, kwargs = get.call_args
        assert args[0] == "https://example.test/sdn.xml"
        assert kwargs["timeout"] == 5
        assert "Authorization" not in kwargs["headers"]

    def test_bearer_token(self):
        """A configured token is sent as a bearer credential."""
        with patch("ingestion.fetchers.requests.get", return_value=http_response()) as get:
            HttpFetcher("https://example.test", token="s3cret").fetch_raw("EU")

        assert get.call_args.kwargs["headers"]["Authorization"] == "Bearer s3cret"

    def test_session_is_used(self):
        """An injected session replaces the module-level requests.get."""
        session = MagicMock()
        session.get.return_value = http_response(content=b"{}")

        assert HttpFetcher("https://example.test", session=session).fetch_raw("INTERPOL") == b"{}"
        session.get.assert_called_once()

    def test_timeout(self):
        """Timeouts surface as FetchError naming the timeout."""
        with patch("ingestion.fetchers.requests.get", side_effect=requests.Timeout()):
            with pytest.raises(FetchError, match="Timed out after 3s"):
                HttpFetcher("https://example.test", timeout=3).fetch_raw("UN")

    def test_http_status(self):
        """Non-2xx responses surface as FetchError with the status."""
        with patch("ingestion.fetchers.requests.get", return_value=http_response(status=503)):
            with pytest.raises(FetchError, match="HTTP 503"):
                HttpFetcher("https://example.test").fetch_raw("UN")

    def test_connection_error(self):
        """Network failures surface as FetchError."""
        with patch("ingestion.fetchers.requests.get", side_effect=requests.ConnectionError("refused")):
            with pytest.raises(FetchError, match="Failed to fetch"):
                HttpFetcher("https://example.test").fetch_raw("UN")


class TestLocalFetchers:
    """Tests for fixture and file fetchers."""

    def test_fixture_is_sample(self):
        """Bundled payloads are flagged as sample data."""
        fetcher = FixtureFetcher("eu_consolidated_sample.xml")
        assert fetcher.is_sample is True
        assert fetcher.fetch_raw("EU").lstrip().startswith(b"<?xml")

    def test_missing_fixture(self, tmp_path):
        """A missing fixture file is a FetchError."""
        with pytest.raises(FetchError):
            FixtureFetcher("nope.xml", directory=tmp_path).fetch_raw("EU")

    def test_file_fetcher(self, tmp_path):
        """Operator-supplied files are live data."""
        path = tmp_path / "sdn.xml"
        path.write_bytes(b"<sdnList/>")
        fetcher = FileFetcher(str(path))

        assert fetcher.is_sample is False
        assert fetcher.fetch_raw("OFAC") == b"<sdnList/>"

    def test_missing_file(self, tmp_path):
        """Unreadable files are a FetchError."""
        with pytest.raises(FetchError, match="Cannot read OFAC file"):
            FileFetcher(str(tmp_path / "missing.xml")).fetch_raw("OFAC")


class TestBuildFetcher:
    """Tests for mode dispatch."""

    def test_http_mode_reads_token_env(self, monkeypatch):
        """The token comes from the named environment variable."""
        monkeypatch.setenv("TEST_LIST_TOKEN", "abc")
        fetcher = build_fetcher(SourceConfig(mode="http", url="https://x.test", timeout_seconds=7, token_env="TEST_LIST_TOKEN"))

        assert isinstance(fetcher, HttpFetcher)
        assert fetcher.token == "abc"
        assert fetcher.timeout == 7

    def test_fixture_mode(self):
        """Fixture mode uses the source's bundled file."""
        fetcher = build_fetcher(SourceConfig(mode="fixture"), "interpol_red_notices_sample.json")
        assert isinstance(fetcher, FixtureFetcher)
        assert fetcher.path.name == "interpol_red_notices_sample.json"

    def test_fixture_mode_without_fixture(self):
        """Sources without bundled data cannot run in fixture mode."""
        with pytest.raises(ValueError):
            build_fetcher(SourceConfig(mode="fixture"))

    def test_file_mode(self, tmp_path):
        """File mode reads the configured path."""
        fetcher = build_fetcher(SourceConfig(mode="file", path=str(tmp_path / "un.xml")))
        assert isinstance(fetcher, FileFetcher)

    def test_unknown_mode(self):
        """Unknown modes are rejected."""
        with pytest.raises(ValueError, match="Unknown fetch mode"):
            build_fetcher(SourceConfig(mode="carrier-pigeon"))
