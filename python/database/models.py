"""
SQLAlchemy ORM Models for the Watchlist Sync store

Tables:
1. sanctioned_entities - canonical entity rows, partitioned by list_source
   (OFAC, UN, EU, INTERPOL). A partition is replaced wholesale by each
   successful sync of its source; rows are never edited field by field.
2. sync_history - append-only log of sync runs, one row per source run
   plus one ALL row per fan-out run.

JSON columns use JSONB on PostgreSQL and generic JSON elsewhere (SQLite in tests).
"""

from datetime import date, datetime
from enum import Enum as PyEnum
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    String, Integer, DateTime, Date, Text, Index, UniqueConstraint, Enum, JSON
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base, Mapped, mapped_column
from sqlalchemy.sql import func

# Base class for all models
Base = declarative_base()

JsonType = JSON().with_variant(JSONB(), "postgresql")


# ============================================
# ENUMS
# ============================================

class ListSource(str, PyEnum):
    """Sanctions list an entity row came from"""
    OFAC = "OFAC"
    UN = "UN"
    EU = "EU"
    INTERPOL = "INTERPOL"


class SyncSource(str, PyEnum):
    """Subject of a sync history entry (a list, or the fan-out run)"""
    OFAC = "OFAC"
    UN = "UN"
    EU = "EU"
    INTERPOL = "INTERPOL"
    ALL = "ALL"


class EntityType(str, PyEnum):
    """Type of sanctioned entity"""
    INDIVIDUAL = "INDIVIDUAL"
    ENTITY = "ENTITY"  # Organization/Company/Vessel


class SyncStatus(str, PyEnum):
    """Outcome of a sync run"""
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


# ============================================
# MIXIN CLASSES
# ============================================

class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False
    )


# ============================================
# ENTITY MODEL
# ============================================

class SanctionedEntity(Base, TimestampMixin):
    """
    Canonical sanctioned individual or entity.

    reference_number is the source-native identifier; it is unique within a
    list_source, not globally.
    """
    __tablename__ = "sanctioned_entities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    list_source: Mapped[ListSource] = mapped_column(
        Enum(ListSource, name="list_source"),
        nullable=False,
        index=True
    )
    entity_type: Mapped[EntityType] = mapped_column(
        Enum(EntityType, name="entity_type"),
        nullable=False,
        index=True
    )

    name: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    reference_number: Mapped[str] = mapped_column(String(100), nullable=False)

    # Ordered alternate names, deduplicated against name
    aliases: Mapped[Optional[List[str]]] = mapped_column(JsonType, nullable=True)
    # [{address1, address2, address3, city, stateOrProvince, postalCode, country}]
    addresses: Mapped[Optional[List[Dict[str, Any]]]] = mapped_column(JsonType, nullable=True)

    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    place_of_birth: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    nationality: Mapped[Optional[str]] = mapped_column(String(500), nullable=True, index=True)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    additional_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Listing date at the source, sync time when the source has none
    date_added: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint('list_source', 'reference_number', name='uq_entity_source_reference'),
        Index('ix_entity_source_type', 'list_source', 'entity_type'),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the public (camelCase) field names"""
        return {
            "id": self.id,
            "listSource": self.list_source.value,
            "entityType": self.entity_type.value,
            "name": self.name,
            "referenceNumber": self.reference_number,
            "aliases": self.aliases,
            "addresses": self.addresses,
            "dateOfBirth": self.date_of_birth.isoformat() if self.date_of_birth else None,
            "placeOfBirth": self.place_of_birth,
            "nationality": self.nationality,
            "reason": self.reason,
            "additionalInfo": self.additional_info,
            "dateAdded": self.date_added.isoformat() if self.date_added else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self) -> str:
        return (
            f"<SanctionedEntity(id={self.id}, name='{self.name}', "
            f"source={self.list_source}, ref='{self.reference_number}')>"
        )


# ============================================
# SYNC HISTORY MODEL
# ============================================

class SyncHistory(Base):
    """
    Append-only log of sync runs.

    Written once per orchestrator run and once per fan-out run (source ALL);
    never updated or deleted by the pipeline.
    """
    __tablename__ = "sync_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[SyncSource] = mapped_column(
        Enum(SyncSource, name="sync_source"),
        nullable=False
    )
    status: Mapped[SyncStatus] = mapped_column(
        Enum(SyncStatus, name="sync_status"),
        nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    records_affected: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False, default="")

    __table_args__ = (
        Index('ix_sync_history_source_date', 'source', 'created_at'),
        Index('ix_sync_history_date', 'created_at'),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source.value,
            "status": self.status.value,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "recordsAffected": self.records_affected,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"<SyncHistory(id={self.id}, source={self.source}, status={self.status})>"
