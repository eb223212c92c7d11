"""
Source adapter shared by all four lists

A SourceAdapter pairs a fetch strategy with the list's parser and
normalizer. The list-specific behaviour lives in plain functions in
ofac.py, un.py, eu.py and interpol.py and is wired up in registry.py.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from lxml import etree

from database.models import ListSource
from ingestion.errors import FetchError, ParseError
from ingestion.fetchers import Fetcher
from ingestion.records import NormalizedEntity

logger = logging.getLogger(__name__)

Record = Dict[str, Any]
LoggerLike = Union[logging.Logger, logging.LoggerAdapter]
Parser = Callable[[bytes], List[Record]]
Normalizer = Callable[[Record, datetime, LoggerLike], NormalizedEntity]


class SourceLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the list name and tags records with ``list_source``"""

    def __init__(self, log: logging.Logger, source: ListSource):
        super().__init__(log, {"list_source": source.value})

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.update(self.extra)
        kwargs["extra"] = extra
        return f"[{self.extra['list_source']}] {msg}", kwargs


def source_logger(log: Optional[LoggerLike], source: ListSource) -> SourceLoggerAdapter:
    """Wrap an injected logger (or the module default) for one list"""
    if isinstance(log, logging.LoggerAdapter):
        log = log.logger
    return SourceLoggerAdapter(log or logger, source)


class SourceAdapter:
    """Fetch, parse and normalize one sanctions list"""

    def __init__(
        self,
        source: ListSource,
        fetcher: Fetcher,
        parser: Parser,
        normalizer: Normalizer,
        label: Optional[str] = None,
        logger: Optional[LoggerLike] = None
    ):
        self.source = source
        self.fetcher = fetcher
        self.label = label or source.value
        self._parser = parser
        self._normalizer = normalizer
        self.log = source_logger(logger, source)

    @property
    def is_sample(self) -> bool:
        """True when running over bundled demonstration data"""
        return self.fetcher.is_sample

    def fetch_and_parse(self) -> List[Record]:
        """Fetch the payload and split it into raw records

        Returns:
            Raw records in the list's native shape (possibly empty)

        Raises:
            FetchError: Payload could not be obtained
            ParseError: Payload is empty, malformed, or lacks its root element
        """
        self.log.info(f"Fetching {self.label} data via {self.fetcher.describe()}")
        content = self.fetcher.fetch_raw(self.source.value)
        if not content or not content.strip():
            raise ParseError(f"Empty {self.label} payload")

        try:
            records = self._parser(content)
        except (ParseError, FetchError):
            raise
        except etree.XMLSyntaxError as e:
            raise ParseError(f"Malformed {self.label} XML: {e}") from e
        except ValueError as e:
            raise ParseError(f"Malformed {self.label} payload: {e}") from e

        self.log.info(f"✓ Parsed {len(records)} raw {self.label} records")
        return records

    def normalize(self, record: Record, synced_at: datetime) -> NormalizedEntity:
        """Map one raw record to the canonical shape

        Raises:
            RecordError: If the record is individually malformed
        """
        return self._normalizer(record, synced_at, self.log)

    def __repr__(self) -> str:
        return f"<SourceAdapter({self.source.value}, {self.fetcher.describe()})>"
