"""
Per-list sync orchestration

fetch -> parse -> normalize -> validate non-empty -> atomic replace -> history.

run() always returns a SyncResult. The only exception it lets through is
SyncCancelled, raised when the coordinator's cancel event is set; a
cancelled run rolls back and records no history.
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from config_manager import ConfigManager
from database.models import SyncSource, SyncStatus
from database.store import SanctionsStore
from ingestion.base import LoggerLike, Record, SourceAdapter, source_logger
from ingestion.errors import FetchError, ParseError, PersistenceError, SyncCancelled
from ingestion.records import NormalizedEntity, SyncResult
from ingestion.registry import SourceDefinition, build_adapter, get_definition
from xml_utils import sanitize_for_logging

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncOrchestrator:
    """Runs one list's sync end to end"""

    def __init__(
        self,
        adapter: SourceAdapter,
        store: SanctionsStore,
        definition: Optional[SourceDefinition] = None,
        logger: Optional[LoggerLike] = None,
        cancel_event: Optional[threading.Event] = None,
        clock: Callable[[], datetime] = utc_now
    ):
        self.adapter = adapter
        self.store = store
        self.definition = definition or get_definition(adapter.source)
        self.cancel_event = cancel_event or threading.Event()
        self._clock = clock
        self.log = source_logger(logger, adapter.source)

    @property
    def source(self):
        return self.adapter.source

    def run(self) -> SyncResult:
        """Sync the list and record the outcome in the history log

        Raises:
            SyncCancelled: If the cancel event was set before commit
        """
        label = self.definition.label
        synced_at = self._clock()
        self.log.info(f"Starting {label} data synchronization...")

        try:
            self._check_cancelled("before fetch")
            records = self.adapter.fetch_and_parse()
            if not records:
                return self._fail(self.definition.empty_message)

            entities = self._normalize_all(records, synced_at)
            if not entities:
                return self._fail(f"No valid entities found in {label} data")

            self._check_cancelled("before replace")
            self._replace(entities)

        except SyncCancelled:
            self.log.warning(f"{label} sync cancelled, no changes committed")
            raise
        except (FetchError, ParseError, PersistenceError) as e:
            return self._fail(self.definition.failure_message(str(e)))
        except Exception as e:
            self.log.exception(f"✗ Unexpected error during {label} sync")
            return self._fail(self.definition.failure_message(str(e) or e.__class__.__name__))

        count = len(entities)
        message = self.definition.success_message(count, is_sample=self.adapter.is_sample)
        self.log.info(f"✓ {message}")
        self.store.append_sync_history(
            SyncSource(self.source.value), SyncStatus.SUCCESS, message, records_affected=count
        )
        return SyncResult(self.source, True, message, records_affected=count)

    def _normalize_all(self, records: Sequence[Record], synced_at: datetime) -> List[NormalizedEntity]:
        """Normalize every record, skipping malformed ones and repeated reference numbers"""
        entities: List[NormalizedEntity] = []
        seen = set()
        skipped = 0

        for position, record in enumerate(records, 1):
            try:
                entity = self.adapter.normalize(record, synced_at)
            except Exception as e:
                skipped += 1
                self.log.warning(
                    f"Skipping record {position}: {sanitize_for_logging(str(e))}"
                )
                continue

            if entity.reference_number in seen:
                skipped += 1
                self.log.warning(
                    f"Skipping duplicate reference number {sanitize_for_logging(entity.reference_number)}"
                )
                continue

            seen.add(entity.reference_number)
            entities.append(entity)

        self.log.info(f"Mapped {len(entities)} entities for insertion ({skipped} skipped)")
        return entities

    def _replace(self, entities: Sequence[NormalizedEntity]) -> None:
        """Replace the list's partition in a single transaction

        Raises:
            PersistenceError: If the transaction fails
            SyncCancelled: If cancelled before commit (the transaction rolls back)
        """
        rows = [entity.to_row() for entity in entities]
        try:
            with self.store.transaction() as tx:
                deleted = tx.delete_entities(self.source)
                self.log.info(f"Deleted {deleted} existing {self.definition.label} records")
                tx.insert_entities(rows)
                self.log.info(f"Inserted {len(rows)} {self.definition.label} records")
                self._check_cancelled("before commit")
        except SQLAlchemyError as e:
            raise PersistenceError(f"Database error while replacing {self.definition.label} data: {e}") from e

    def _check_cancelled(self, stage: str) -> None:
        if self.cancel_event.is_set():
            raise SyncCancelled(f"{self.definition.label} sync cancelled {stage}")

    def _fail(self, message: str) -> SyncResult:
        self.log.error(f"✗ {message}")
        self.store.append_sync_history(
            SyncSource(self.source.value), SyncStatus.FAILURE, message, records_affected=0
        )
        return SyncResult(self.source, False, message, records_affected=0)


def build_orchestrator(
    source,
    store: SanctionsStore,
    config: Optional[ConfigManager] = None,
    logger: Optional[LoggerLike] = None,
    cancel_event: Optional[threading.Event] = None
) -> SyncOrchestrator:
    """Create the orchestrator for one list with its configured adapter"""
    adapter = build_adapter(source, config=config, logger=logger)
    return SyncOrchestrator(
        adapter,
        store,
        logger=logger,
        cancel_event=cancel_event,
    )
