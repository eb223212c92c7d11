"""
Repository Pattern for Watchlist Sync Database Operations

Provides the data access layer used by the sync pipeline (partition
delete / batched insert, history append) and by the read API (search,
detail, statistics, history listing).
"""

import logging
import math
from typing import List, Optional, Dict, Any, Sequence, Tuple
from datetime import datetime

from sqlalchemy import select, func, delete, insert
from sqlalchemy.orm import Session

from database.models import (
    SanctionedEntity,
    SyncHistory,
    ListSource,
    SyncSource,
    EntityType,
    SyncStatus
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 1000
MAX_PAGE_SIZE = 100


class RepositoryError(Exception):
    """Base exception for repository errors."""
    pass


def _escape_like(value: str) -> str:
    """Escape LIKE wildcards so user text matches literally."""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# ============================================
# ENTITY REPOSITORY
# ============================================

class SanctionedEntityRepository:
    """Repository for sanctioned entity operations."""

    def __init__(self, session: Session):
        self.session = session

    def delete_by_source(self, list_source: ListSource) -> int:
        """
        Delete every row of one list partition.

        Args:
            list_source: Partition to clear

        Returns:
            Number of rows deleted
        """
        result = self.session.execute(
            delete(SanctionedEntity).where(SanctionedEntity.list_source == list_source)
        )
        return result.rowcount or 0

    def bulk_insert(
        self,
        rows: Sequence[Dict[str, Any]],
        batch_size: int = DEFAULT_BATCH_SIZE
    ) -> int:
        """
        Insert entity rows in batches.

        Args:
            rows: Column dicts keyed by model attribute name
            batch_size: Rows per INSERT statement

        Returns:
            Number of rows inserted
        """
        if batch_size < 1:
            raise RepositoryError(f"batch_size must be >= 1, got {batch_size}")

        total_batches = math.ceil(len(rows) / batch_size)
        for index, start in enumerate(range(0, len(rows), batch_size), start=1):
            batch = list(rows[start:start + batch_size])
            self.session.execute(insert(SanctionedEntity), batch)
            logger.debug(f"Inserted batch {index} of {total_batches} ({len(batch)} rows)")

        return len(rows)

    def get_by_id(self, entity_id: int) -> Optional[SanctionedEntity]:
        """
        Get entity by ID.

        Args:
            entity_id: Surrogate key

        Returns:
            SanctionedEntity or None
        """
        return self.session.get(SanctionedEntity, entity_id)

    def get_by_reference(
        self,
        list_source: ListSource,
        reference_number: str
    ) -> Optional[SanctionedEntity]:
        """Get entity by its natural key (source + reference number)."""
        query = select(SanctionedEntity).where(
            SanctionedEntity.list_source == list_source,
            SanctionedEntity.reference_number == reference_number
        )
        return self.session.execute(query).scalar_one_or_none()

    def list_by_source(self, list_source: ListSource) -> List[SanctionedEntity]:
        """All rows of one partition ordered by reference number."""
        query = select(SanctionedEntity).where(
            SanctionedEntity.list_source == list_source
        ).order_by(SanctionedEntity.reference_number)
        return list(self.session.execute(query).scalars().all())

    def search(
        self,
        name: Optional[str] = None,
        list_sources: Optional[Sequence[ListSource]] = None,
        entity_types: Optional[Sequence[EntityType]] = None,
        nationalities: Optional[Sequence[str]] = None,
        page: int = 1,
        page_size: int = 20
    ) -> Tuple[List[SanctionedEntity], int]:
        """
        Filter entities with offset/limit pagination.

        Name is a case-insensitive substring match; the list filters are
        exact IN matches. Results are ordered by name.

        Args:
            name: Substring of the entity name
            list_sources: Restrict to these lists
            entity_types: Restrict to these types
            nationalities: Restrict to these nationality values
            page: 1-based page number
            page_size: Rows per page (max 100)

        Returns:
            Tuple of (entities on the page, total matching rows)
        """
        if page < 1:
            raise RepositoryError("page must be >= 1")
        if page_size < 1 or page_size > MAX_PAGE_SIZE:
            raise RepositoryError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

        conditions = []
        if name:
            conditions.append(SanctionedEntity.name.ilike(f"%{_escape_like(name)}%", escape="\\"))
        if list_sources:
            conditions.append(SanctionedEntity.list_source.in_(list(list_sources)))
        if entity_types:
            conditions.append(SanctionedEntity.entity_type.in_(list(entity_types)))
        if nationalities:
            conditions.append(SanctionedEntity.nationality.in_(list(nationalities)))

        count_query = select(func.count()).select_from(SanctionedEntity).where(*conditions)
        total = self.session.execute(count_query).scalar_one()

        query = select(SanctionedEntity).where(*conditions).order_by(
            SanctionedEntity.name, SanctionedEntity.id
        ).offset((page - 1) * page_size).limit(page_size)

        entities = list(self.session.execute(query).scalars().all())
        return entities, total

    def count_by_source(self) -> Dict[str, int]:
        """Row counts per list, every list present (zero when empty)."""
        query = select(
            SanctionedEntity.list_source,
            func.count(SanctionedEntity.id)
        ).group_by(SanctionedEntity.list_source)

        counts = {source.value: 0 for source in ListSource}
        for source, count in self.session.execute(query):
            counts[source.value] = count
        return counts

    def count_by_type(self) -> Dict[str, int]:
        """Row counts per entity type, every type present."""
        query = select(
            SanctionedEntity.entity_type,
            func.count(SanctionedEntity.id)
        ).group_by(SanctionedEntity.entity_type)

        counts = {entity_type.value: 0 for entity_type in EntityType}
        for entity_type, count in self.session.execute(query):
            counts[entity_type.value] = count
        return counts

    def last_updated_by_source(self) -> Dict[str, Optional[datetime]]:
        """Most recent updated_at per list (None for an empty list)."""
        query = select(
            SanctionedEntity.list_source,
            func.max(SanctionedEntity.updated_at)
        ).group_by(SanctionedEntity.list_source)

        last_updated: Dict[str, Optional[datetime]] = {source.value: None for source in ListSource}
        for source, updated_at in self.session.execute(query):
            last_updated[source.value] = updated_at
        return last_updated


# ============================================
# SYNC HISTORY REPOSITORY
# ============================================

class SyncHistoryRepository:
    """Repository for the append-only sync history log."""

    def __init__(self, session: Session):
        self.session = session

    def append(
        self,
        source: SyncSource,
        status: SyncStatus,
        message: str,
        records_affected: Optional[int] = None,
        created_at: Optional[datetime] = None
    ) -> SyncHistory:
        """
        Append one history entry.

        Args:
            source: List synced, or ALL for a fan-out run
            status: SUCCESS or FAILURE
            message: Summary text
            records_affected: Rows written (None when not applicable)
            created_at: Entry timestamp (database time when omitted)

        Returns:
            The flushed SyncHistory row
        """
        entry = SyncHistory(
            source=source,
            status=status,
            message=message,
            records_affected=records_affected
        )
        if created_at is not None:
            entry.created_at = created_at
        self.session.add(entry)
        self.session.flush()
        return entry

    def list_recent(
        self,
        limit: int = 20,
        source: Optional[SyncSource] = None
    ) -> List[SyncHistory]:
        """
        Newest entries first.

        Args:
            limit: Maximum entries returned
            source: Optional source filter

        Returns:
            List of SyncHistory rows
        """
        query = select(SyncHistory)
        if source is not None:
            query = query.where(SyncHistory.source == source)
        query = query.order_by(SyncHistory.created_at.desc(), SyncHistory.id.desc()).limit(limit)
        return list(self.session.execute(query).scalars().all())
