"""Initial schema - Baseline migration

Revision ID: 001_initial
Revises: 
Create Date: 2024-12-01 00:00:00.000000

Creates the sanctioned_entities and sync_history tables defined in
database/models.py. For databases created with create_tables(), use
`alembic stamp 001_initial` to mark as applied.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create initial database schema."""

    # Create enums
    list_source = postgresql.ENUM(
        'OFAC', 'UN', 'EU', 'INTERPOL',
        name='list_source', create_type=True
    )
    list_source.create(op.get_bind(), checkfirst=True)

    entity_type = postgresql.ENUM(
        'INDIVIDUAL', 'ENTITY',
        name='entity_type', create_type=True
    )
    entity_type.create(op.get_bind(), checkfirst=True)

    sync_source = postgresql.ENUM(
        'OFAC', 'UN', 'EU', 'INTERPOL', 'ALL',
        name='sync_source', create_type=True
    )
    sync_source.create(op.get_bind(), checkfirst=True)

    sync_status = postgresql.ENUM(
        'SUCCESS', 'FAILURE',
        name='sync_status', create_type=True
    )
    sync_status.create(op.get_bind(), checkfirst=True)

    # ============================================
    # SANCTIONED ENTITIES
    # ============================================
    op.create_table(
        'sanctioned_entities',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('list_source', postgresql.ENUM(name='list_source', create_type=False), nullable=False),
        sa.Column('entity_type', postgresql.ENUM(name='entity_type', create_type=False), nullable=False),
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('reference_number', sa.String(100), nullable=False),
        sa.Column('aliases', postgresql.JSONB),
        sa.Column('addresses', postgresql.JSONB),
        sa.Column('date_of_birth', sa.Date),
        sa.Column('place_of_birth', sa.Text),
        sa.Column('nationality', sa.String(500)),
        sa.Column('reason', sa.Text),
        sa.Column('additional_info', sa.Text),
        sa.Column('date_added', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('list_source', 'reference_number', name='uq_entity_source_reference'),
    )
    op.create_index('ix_sanctioned_entities_list_source', 'sanctioned_entities', ['list_source'])
    op.create_index('ix_sanctioned_entities_entity_type', 'sanctioned_entities', ['entity_type'])
    op.create_index('ix_sanctioned_entities_name', 'sanctioned_entities', ['name'])
    op.create_index('ix_sanctioned_entities_nationality', 'sanctioned_entities', ['nationality'])
    op.create_index('ix_entity_source_type', 'sanctioned_entities', ['list_source', 'entity_type'])

    # ============================================
    # SYNC HISTORY
    # ============================================
    op.create_table(
        'sync_history',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('source', postgresql.ENUM(name='sync_source', create_type=False), nullable=False),
        sa.Column('status', postgresql.ENUM(name='sync_status', create_type=False), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False,
                  server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('records_affected', sa.Integer),
        sa.Column('message', sa.Text, nullable=False, server_default=''),
    )
    op.create_index('ix_sync_history_source_date', 'sync_history', ['source', 'created_at'])
    op.create_index('ix_sync_history_date', 'sync_history', ['created_at'])


def downgrade() -> None:
    """Drop all tables and types."""
    op.drop_table('sync_history')
    op.drop_table('sanctioned_entities')

    op.execute('DROP TYPE IF EXISTS sync_status')
    op.execute('DROP TYPE IF EXISTS sync_source')
    op.execute('DROP TYPE IF EXISTS entity_type')
    op.execute('DROP TYPE IF EXISTS list_source')
