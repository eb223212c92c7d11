"""
Ingestion Package for the Watchlist Sync pipeline

This package provides:
- Fetch strategies (HTTP, bundled sample data, local file)
- Source adapters and field normalizers for OFAC, UN, EU and Interpol
- SyncOrchestrator: atomic replace of one list plus its history entry
- FanOutCoordinator: concurrent sync of every list
"""

from ingestion.errors import (
    SyncError,
    FetchError,
    ParseError,
    RecordError,
    DateParseError,
    PersistenceError,
    SyncCancelled,
)
from ingestion.records import NormalizedEntity, SyncResult, AggregateSyncResult
from ingestion.fetchers import Fetcher, HttpFetcher, FixtureFetcher, FileFetcher, build_fetcher
from ingestion.base import SourceAdapter, SourceLoggerAdapter
from ingestion.registry import SOURCES, FAN_OUT_ORDER, SourceDefinition, build_adapter, get_definition
from ingestion.orchestrator import SyncOrchestrator, build_orchestrator
from ingestion.coordinator import FanOutCoordinator

__all__ = [
    # Errors
    'SyncError',
    'FetchError',
    'ParseError',
    'RecordError',
    'DateParseError',
    'PersistenceError',
    'SyncCancelled',
    # Records
    'NormalizedEntity',
    'SyncResult',
    'AggregateSyncResult',
    # Fetching
    'Fetcher',
    'HttpFetcher',
    'FixtureFetcher',
    'FileFetcher',
    'build_fetcher',
    # Adapters
    'SourceAdapter',
    'SourceLoggerAdapter',
    'SOURCES',
    'FAN_OUT_ORDER',
    'SourceDefinition',
    'build_adapter',
    'get_definition',
    # Orchestration
    'SyncOrchestrator',
    'build_orchestrator',
    'FanOutCoordinator',
]
