"""Initial schema - catalog, pricing and stock tables

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True):
    columns = [sa.Column('created_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False)]
    if with_updated:
        columns.append(sa.Column('updated_at', sa.DateTime(), server_default=sa.text('now()'), nullable=False))
    return columns


def upgrade() -> None:
    stockmovementtype_enum = postgresql.ENUM('IN', 'OUT', 'ADJUST', name='stockmovementtype', create_type=False)
    stockmovementtype_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'files',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('original_name', sa.String(), nullable=False),
        sa.Column('location', sa.String(), nullable=False),
        sa.Column('mime_type', sa.String(), nullable=False),
        sa.Column('size', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('metadata', sa.JSON(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'brands',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('state', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('file_id', sa.Integer(), sa.ForeignKey('files.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'product_lines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('state', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('magister_code', sa.String(), nullable=True),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('reference', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('detailed_description', sa.Text(), nullable=True),
        sa.Column('state', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('recommended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('highlight', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('is_product', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('allow_national_sale', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('brand_id', sa.Integer(), sa.ForeignKey('brands.id'), nullable=False),
        sa.Column('product_line_id', sa.Integer(), sa.ForeignKey('product_lines.id'), nullable=False),
        sa.Column('process_id', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_products_state', 'products', ['state'])
    op.create_index('ix_products_brand_id', 'products', ['brand_id'])
    op.create_index('ix_products_product_line_id', 'products', ['product_line_id'])
    op.create_index(
        'ix_products_magister_code', 'products', ['magister_code'],
        unique=True, postgresql_where=sa.text('magister_code IS NOT NULL'),
    )

    op.create_table(
        'products_files',
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('file_id', sa.Integer(), sa.ForeignKey('files.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('principal', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(with_updated=False),
    )

    op.create_table(
        'price_histories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('min_final_price', sa.Numeric(12, 2), nullable=False),
        sa.Column('unit_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('user_id', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_price_histories_product_id', 'price_histories', ['product_id'])
    op.create_index('ix_price_histories_created_at', 'price_histories', ['created_at'])

    op.create_table(
        'agencies',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('state', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'agencies_products',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('current_stock', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('state', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('agency_id', 'product_id', name='uq_agencies_products_agency_product'),
        sa.CheckConstraint('current_stock >= 0', name='ck_agencies_products_current_stock'),
    )
    op.create_index('ix_agencies_products_product_id', 'agencies_products', ['product_id'])

    op.create_table(
        'stock_histories',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('agency_id', sa.Integer(), sa.ForeignKey('agencies.id'), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('previous_stock', sa.Integer(), nullable=False),
        sa.Column('current_stock', sa.Integer(), nullable=False),
        sa.Column('type', stockmovementtype_enum, nullable=False),
        sa.Column('reference', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_stock_histories_agency_id', 'stock_histories', ['agency_id'])
    op.create_index('ix_stock_histories_type', 'stock_histories', ['type'])
    op.create_index('ix_stock_histories_created_at', 'stock_histories', ['created_at'])
    op.create_index('ix_stock_histories_product_agency', 'stock_histories', ['product_id', 'agency_id'])

    op.create_table(
        'data_sheet_fields',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('product_line_id', sa.Integer(), sa.ForeignKey('product_lines.id', ondelete='CASCADE'), nullable=False),
        sa.Column('field_name', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('values', sa.Text(), nullable=True),
        sa.Column('use_to_filter', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('use_to_compare', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_data_sheet_fields_product_line_id', 'data_sheet_fields', ['product_line_id'])

    op.create_table(
        'data_sheets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('original', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('product_line_id', sa.Integer(), sa.ForeignKey('product_lines.id'), nullable=False),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id'), nullable=True),
        sa.Column('vehicle_version_id', sa.Integer(), nullable=True),
        sa.Column('client_id', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_data_sheets_product_line_id', 'data_sheets', ['product_line_id'])
    op.create_index('ix_data_sheets_product_id', 'data_sheets', ['product_id'])

    op.create_table(
        'data_sheet_values',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('data_sheet_id', sa.Integer(), sa.ForeignKey('data_sheets.id', ondelete='CASCADE'), nullable=False),
        sa.Column('data_sheet_field_id', sa.Integer(), sa.ForeignKey('data_sheet_fields.id', ondelete='CASCADE'), nullable=False),
        sa.Column('value', sa.String(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('data_sheet_id', 'data_sheet_field_id', name='uq_data_sheet_values_sheet_field'),
    )

    op.create_table(
        'promotions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('discount', sa.Float(), nullable=False),
        sa.Column('state', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('automatically_generated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('end_date', sa.DateTime(), nullable=True),
        sa.Column('product_line_id', sa.Integer(), sa.ForeignKey('product_lines.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_promotions_state', 'promotions', ['state'])

    op.create_table(
        'promotions_products',
        sa.Column('promotion_id', sa.Integer(), sa.ForeignKey('promotions.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('product_id', sa.Integer(), sa.ForeignKey('products.id', ondelete='CASCADE'), primary_key=True),
    )


def downgrade() -> None:
    op.drop_table('promotions_products')
    op.drop_index('ix_promotions_state', table_name='promotions')
    op.drop_table('promotions')
    op.drop_table('data_sheet_values')
    op.drop_index('ix_data_sheets_product_id', table_name='data_sheets')
    op.drop_index('ix_data_sheets_product_line_id', table_name='data_sheets')
    op.drop_table('data_sheets')
    op.drop_index('ix_data_sheet_fields_product_line_id', table_name='data_sheet_fields')
    op.drop_table('data_sheet_fields')
    op.drop_index('ix_stock_histories_product_agency', table_name='stock_histories')
    op.drop_index('ix_stock_histories_created_at', table_name='stock_histories')
    op.drop_index('ix_stock_histories_type', table_name='stock_histories')
    op.drop_index('ix_stock_histories_agency_id', table_name='stock_histories')
    op.drop_table('stock_histories')
    op.drop_index('ix_agencies_products_product_id', table_name='agencies_products')
    op.drop_table('agencies_products')
    op.drop_table('agencies')
    op.drop_index('ix_price_histories_created_at', table_name='price_histories')
    op.drop_index('ix_price_histories_product_id', table_name='price_histories')
    op.drop_table('price_histories')
    op.drop_table('products_files')
    op.drop_index('ix_products_magister_code', table_name='products')
    op.drop_index('ix_products_product_line_id', table_name='products')
    op.drop_index('ix_products_brand_id', table_name='products')
    op.drop_index('ix_products_state', table_name='products')
    op.drop_table('products')
    op.drop_table('product_lines')
    op.drop_table('brands')
    op.drop_table('files')

    postgresql.ENUM(name='stockmovementtype').drop(op.get_bind(), checkfirst=True)
