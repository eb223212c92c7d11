"""
Fetch strategies for list payloads

Adapters never talk to the network directly; they are handed a Fetcher that
returns the raw payload bytes:
- HttpFetcher: live download with requests (per-source timeout)
- FixtureFetcher: sample payload shipped in ingestion/fixtures
- FileFetcher: operator-supplied offline copy of a list
"""

import logging
import os
from pathlib import Path
from typing import Optional

import requests

from config_manager import SourceConfig
from ingestion.errors import FetchError

logger = logging.getLogger(__name__)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class Fetcher:
    """Base fetch strategy"""

    # True when the payload is demonstration data rather than a live list
    is_sample = False

    def fetch_raw(self, source: str) -> bytes:
        """Return the raw payload for ``source``

        Raises:
            FetchError: If the payload cannot be obtained
        """
        raise NotImplementedError

    def describe(self) -> str:
        return self.__class__.__name__


class HttpFetcher(Fetcher):
    """HTTP GET with a timeout; non-2xx, network errors and timeouts raise FetchError"""

    def __init__(
        self,
        url: str,
        timeout: float = 120,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        self.url = url
        self.timeout = timeout
        self.token = token
        self._session = session

    def fetch_raw(self, source: str) -> bytes:
        headers = {"Accept": "application/xml, application/json;q=0.9, */*;q=0.8"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        get = self._session.get if self._session is not None else requests.get
        logger.info(f"Downloading {source} list from {self.url}")
        try:
            response = get(self.url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.Timeout as e:
            raise FetchError(f"Timed out after {self.timeout}s fetching {self.url}") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise FetchError(f"HTTP {status} fetching {self.url}") from e
        except requests.RequestException as e:
            raise FetchError(f"Failed to fetch {self.url}: {e}") from e

        size_mb = len(response.content) / (1024 * 1024)
        logger.info(f"✓ Downloaded {source} list ({size_mb:.1f} MB)")
        return response.content

    def describe(self) -> str:
        return f"HTTP {self.url}"


class FixtureFetcher(Fetcher):
    """Sample payload bundled with the package"""

    is_sample = True

    def __init__(self, filename: str, directory: Optional[Path] = None):
        self.path = (directory or FIXTURES_DIR) / filename

    def fetch_raw(self, source: str) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise FetchError(f"Sample data for {source} not available: {self.path.name}") from e

    def describe(self) -> str:
        return f"fixture {self.path.name}"


class FileFetcher(Fetcher):
    """Local copy of a list"""

    def __init__(self, path: str):
        self.path = Path(path)

    def fetch_raw(self, source: str) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise FetchError(f"Cannot read {source} file {self.path}: {e}") from e

    def describe(self) -> str:
        return f"file {self.path}"


def build_fetcher(config: SourceConfig, fixture_name: Optional[str] = None) -> Fetcher:
    """Create the fetch strategy selected by a source's configuration

    Args:
        config: Source fetch settings
        fixture_name: Bundled sample file for sources that ship one

    Returns:
        Fetcher instance

    Raises:
        ValueError: If the mode cannot be served for this source
    """
    if config.mode == "http":
        if not config.url:
            raise ValueError("http mode requires a url")
        token = os.environ.get(config.token_env) if config.token_env else None
        return HttpFetcher(config.url, timeout=config.timeout_seconds, token=token)

    if config.mode == "fixture":
        if not fixture_name:
            raise ValueError("no bundled sample data for this source")
        return FixtureFetcher(fixture_name)

    if config.mode == "file":
        if not config.path:
            raise ValueError("file mode requires a path")
        return FileFetcher(config.path)

    raise ValueError(f"Unknown fetch mode: {config.mode}")
