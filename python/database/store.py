"""
Sanctions store used by the sync pipeline and the read API

Write side (consumed by the sync orchestrators):
- transaction() / run_in_transaction(fn): one atomic unit per source replace
- StoreTransaction.delete_entities / insert_entities: operate inside that unit
- append_sync_history: own short transaction; failures are logged, never raised

Read side (consumed by the HTTP layer):
- search_entities, get_entity, get_stats, list_sync_history
"""

import logging
import math
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database.connection import DatabaseSessionProvider
from database.models import ListSource, SyncSource, SyncStatus, EntityType
from database.repositories import (
    SanctionedEntityRepository,
    SyncHistoryRepository,
    DEFAULT_BATCH_SIZE,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreTransaction:
    """Entity writes bound to one open transaction."""

    def __init__(self, session: Session, batch_size: int = DEFAULT_BATCH_SIZE):
        self.session = session
        self.batch_size = batch_size
        self._entities = SanctionedEntityRepository(session)

    def delete_entities(self, list_source: ListSource) -> int:
        """Delete all rows of a list partition; returns the count."""
        return self._entities.delete_by_source(list_source)

    def insert_entities(self, rows: Sequence[Dict[str, Any]]) -> None:
        """Insert rows in batches of ``batch_size``."""
        self._entities.bulk_insert(rows, batch_size=self.batch_size)


class SanctionsStore:
    """Relational store of canonical entities plus the sync history log."""

    def __init__(
        self,
        provider: DatabaseSessionProvider,
        batch_size: int = DEFAULT_BATCH_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        self._provider = provider
        self.batch_size = batch_size
        self._log = logger or logging.getLogger(__name__)

    @property
    def provider(self) -> DatabaseSessionProvider:
        return self._provider

    # ============================================
    # WRITE SIDE
    # ============================================

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """
        Atomic unit around entity writes.

        Commits when the block exits normally; any exception raised inside
        the block (including during batching) rolls everything back and
        propagates.
        """
        with self._provider.session_scope() as session:
            yield StoreTransaction(session, self.batch_size)

    def run_in_transaction(self, fn: Callable[[StoreTransaction], T]) -> T:
        """Run ``fn`` inside transaction() and return its result."""
        with self.transaction() as tx:
            return fn(tx)

    def append_sync_history(
        self,
        source: SyncSource,
        status: SyncStatus,
        message: str,
        records_affected: Optional[int] = None,
        created_at: Optional[datetime] = None
    ) -> bool:
        """
        Append a history entry in its own transaction.

        Returns:
            True when written, False when the write failed (already logged)
        """
        try:
            with self._provider.session_scope() as session:
                SyncHistoryRepository(session).append(
                    source=SyncSource(source),
                    status=SyncStatus(status),
                    message=message,
                    records_affected=records_affected,
                    created_at=created_at
                )
            return True
        except SQLAlchemyError as e:
            self._log.error(f"✗ Failed to record sync history for {source}: {e}")
            return False

    # ============================================
    # READ SIDE
    # ============================================

    def search_entities(
        self,
        name: Optional[str] = None,
        list_sources: Optional[Sequence[ListSource]] = None,
        entity_types: Optional[Sequence[EntityType]] = None,
        nationalities: Optional[Sequence[str]] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Dict[str, Any]:
        """
        Paged entity search.

        Returns:
            Dict with results, total, page, pageSize, totalPages
        """
        with self._provider.session_scope() as session:
            entities, total = SanctionedEntityRepository(session).search(
                name=name,
                list_sources=list_sources,
                entity_types=entity_types,
                nationalities=nationalities,
                page=page,
                page_size=page_size
            )
            results = [entity.to_dict() for entity in entities]

        return {
            "results": results,
            "total": total,
            "page": page,
            "pageSize": page_size,
            "totalPages": math.ceil(total / page_size) if total else 0,
        }

    def get_entity(self, entity_id: int) -> Optional[Dict[str, Any]]:
        """Entity detail by surrogate key, or None."""
        with self._provider.session_scope() as session:
            entity = SanctionedEntityRepository(session).get_by_id(entity_id)
            return entity.to_dict() if entity else None

    def list_entities(self, list_source: ListSource) -> List[Dict[str, Any]]:
        """Every row of one partition, ordered by reference number."""
        with self._provider.session_scope() as session:
            return [e.to_dict() for e in SanctionedEntityRepository(session).list_by_source(list_source)]

    def get_stats(self) -> Dict[str, Any]:
        """Counts by list and type, last update per list, total rows."""
        with self._provider.session_scope() as session:
            repo = SanctionedEntityRepository(session)
            counts_by_source = repo.count_by_source()
            counts_by_type = repo.count_by_type()
            last_updated = repo.last_updated_by_source()

        return {
            "countsBySource": counts_by_source,
            "countsByType": counts_by_type,
            "lastUpdatedAtBySource": {
                source: value.isoformat() if value else None
                for source, value in last_updated.items()
            },
            "totalRecords": sum(counts_by_source.values()),
        }

    def list_sync_history(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent history entries, newest first."""
        with self._provider.session_scope() as session:
            return [entry.to_dict() for entry in SyncHistoryRepository(session).list_recent(limit=limit)]
