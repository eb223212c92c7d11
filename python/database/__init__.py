"""
Database Package for the Watchlist Sync store

This package provides:
- SQLAlchemy ORM models (sanctioned_entities, sync_history)
- Session provider with transactional scopes and connect retry
- Repositories for entity and history access
- SanctionsStore, the contract the sync pipeline and API consume
"""

from database.models import (
    Base,
    SanctionedEntity,
    SyncHistory,
    ListSource,
    SyncSource,
    EntityType,
    SyncStatus,
)
from database.connection import (
    DatabaseSessionProvider,
    DatabaseSettings,
    get_db_provider,
    init_db,
    close_db,
    create_test_provider,
)
from database.repositories import (
    RepositoryError,
    SanctionedEntityRepository,
    SyncHistoryRepository,
)
from database.store import SanctionsStore, StoreTransaction

__all__ = [
    # Models
    'Base',
    'SanctionedEntity',
    'SyncHistory',
    'ListSource',
    'SyncSource',
    'EntityType',
    'SyncStatus',
    # Connection
    'DatabaseSessionProvider',
    'DatabaseSettings',
    'get_db_provider',
    'init_db',
    'close_db',
    'create_test_provider',
    # Repositories
    'RepositoryError',
    'SanctionedEntityRepository',
    'SyncHistoryRepository',
    # Store
    'SanctionsStore',
    'StoreTransaction',
]
