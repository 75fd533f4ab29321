"""Initial schema - products, mappings and migrations

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('external_id', sa.String(), nullable=False),
        sa.Column('marketplace_id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('sku', sa.String(), nullable=True),
        sa.Column('category_path', sa.String(), nullable=True),
        sa.Column('price', sa.Integer(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('attributes', sa.JSON(), nullable=False),
        sa.Column('has_analog_on_other', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('external_id', 'marketplace_id', name='uq_products_external_marketplace'),
    )
    op.create_index('ix_products_marketplace_id', 'products', ['marketplace_id'])

    op.create_table(
        'category_mappings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source_category', sa.String(), nullable=False, unique=True),
        sa.Column('target_category', sa.String(), nullable=False),
        sa.Column('target_subject_id', sa.Integer(), nullable=True),
        sa.Column('source_category_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_category_mappings_target_category', 'category_mappings', ['target_category'])

    op.create_table(
        'attribute_mappings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('source_attribute_id', sa.String(), nullable=False),
        sa.Column('source_attribute_name', sa.String(), nullable=False),
        sa.Column('target_attribute_id', sa.String(), nullable=False),
        sa.Column('target_attribute_name', sa.String(), nullable=False),
        sa.Column(
            'category_id',
            sa.Integer(),
            sa.ForeignKey('category_mappings.id', ondelete='CASCADE'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('source_attribute_id', 'category_id', name='uq_attribute_mapping_scope'),
    )
    op.create_index('ix_attribute_mappings_source_attribute_id', 'attribute_mappings', ['source_attribute_id'])
    op.create_index('ix_attribute_mappings_target_attribute_id', 'attribute_mappings', ['target_attribute_id'])
    # NULLs are distinct in the composite constraint, so the global scope needs its own index
    op.create_index(
        'uq_attribute_mapping_global',
        'attribute_mappings',
        ['source_attribute_id'],
        unique=True,
        postgresql_where=sa.text('category_id IS NULL'),
        sqlite_where=sa.text('category_id IS NULL'),
    )

    op.create_table(
        'migrations',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('direction', sa.String(length=16), nullable=False),
        sa.Column('total_products', sa.Integer(), nullable=False),
        sa.Column('successful_products', sa.Integer(), nullable=False),
        sa.Column('failed_products', sa.Integer(), nullable=False),
        sa.Column('options', sa.JSON(), nullable=False),
        sa.Column('product_ids', sa.JSON(), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=True),
    )
    op.create_index('ix_migrations_status', 'migrations', ['status'])

    op.create_table(
        'migration_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'migration_id',
            sa.Integer(),
            sa.ForeignKey('migrations.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('target_product_id', sa.String(), nullable=True),
        sa.UniqueConstraint('migration_id', 'product_id', name='uq_migration_product'),
    )
    op.create_index('ix_migration_products_migration_id', 'migration_products', ['migration_id'])


def downgrade() -> None:
    op.drop_table('migration_products')
    op.drop_table('migrations')
    op.drop_index('uq_attribute_mapping_global', table_name='attribute_mappings')
    op.drop_table('attribute_mappings')
    op.drop_table('category_mappings')
    op.drop_table('products')
