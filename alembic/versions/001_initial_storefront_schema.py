"""initial storefront schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def _store_id() -> sa.Column:
    return sa.Column(
        'store_id',
        sa.String(36),
        sa.ForeignKey('stores.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    # 1. 店铺（租户根）
    op.create_table(
        'stores',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('owner_id', sa.String(64), nullable=False, index=True),
        sa.Column('slug', sa.String(63), nullable=False, unique=True),
        sa.Column('custom_domain', sa.String(253), nullable=True, unique=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('tagline', sa.String(200), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('theme', sa.String(20), nullable=False, server_default='neon'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('currency_symbol', sa.String(8), nullable=False, server_default='$'),
        sa.Column('announcement', sa.Text, nullable=True),
        sa.Column('instagram_url', sa.String(500), nullable=True),
        sa.Column('twitter_url', sa.String(500), nullable=True),
        sa.Column('tiktok_url', sa.String(500), nullable=True),
        sa.Column('google_sheet_id', sa.String(200), nullable=True),
        sa.Column('google_sheet_last_sync', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('plan', sa.String(20), nullable=False, server_default='free'),
        sa.Column('settings', postgresql.JSONB, nullable=False, server_default='{}'),
        *_timestamps(),
        sa.CheckConstraint("theme IN ('neon', 'soft', 'brutal')", name='ck_stores_theme'),
        sa.CheckConstraint("plan IN ('free', 'starter', 'pro', 'enterprise')", name='ck_stores_plan'),
    )

    # 2. 分类
    op.create_table(
        'categories',
        sa.Column('id', sa.String(36), primary_key=True),
        _store_id(),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('slug', sa.String(200), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('image_url', sa.String(1000), nullable=True),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('store_id', 'slug', name='uq_categories_store_slug'),
    )

    # 3. 商品（分类删除后置空）
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        _store_id(),
        sa.Column('external_id', sa.String(200), nullable=True),
        sa.Column('name', sa.String(300), nullable=False),
        sa.Column('slug', sa.String(300), nullable=False),
        sa.Column('description', sa.Text, nullable=True),
        sa.Column('price', sa.Numeric(12, 2), nullable=False),
        sa.Column('compare_at_price', sa.Numeric(12, 2), nullable=True),
        sa.Column('images', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('tags', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column(
            'category_id',
            sa.String(36),
            sa.ForeignKey('categories.id', ondelete='SET NULL'),
            nullable=True,
            index=True,
        ),
        sa.Column('in_stock', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('stock_quantity', sa.Integer, nullable=True),
        sa.Column('variants', postgresql.JSONB, nullable=True),
        sa.Column('metadata', postgresql.JSONB, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column('sort_order', sa.Integer, nullable=False, server_default='0'),
        *_timestamps(),
        sa.UniqueConstraint('store_id', 'external_id', name='uq_products_store_external_id'),
        sa.CheckConstraint('price >= 0', name='ck_products_price_non_negative'),
    )
    op.create_index('ix_products_store_active_sort', 'products', ['store_id', 'is_active', 'sort_order'])

    # 4. 订单
    op.create_table(
        'orders',
        sa.Column('id', sa.String(36), primary_key=True),
        _store_id(),
        sa.Column('order_number', sa.String(50), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending', index=True),
        sa.Column('customer_email', sa.String(320), nullable=False),
        sa.Column('customer_name', sa.String(200), nullable=False),
        sa.Column('customer_phone', sa.String(50), nullable=True),
        sa.Column('shipping_address', postgresql.JSONB, nullable=False, server_default='{}'),
        sa.Column('billing_address', postgresql.JSONB, nullable=True),
        sa.Column('items', postgresql.JSONB, nullable=False, server_default='[]'),
        sa.Column('subtotal', sa.Numeric(12, 2), nullable=False),
        sa.Column('shipping_cost', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('tax', sa.Numeric(12, 2), nullable=False, server_default='0'),
        sa.Column('total', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('payment_status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_method', sa.String(50), nullable=True),
        sa.Column('payment_id', sa.String(200), nullable=True),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('metadata', postgresql.JSONB, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('store_id', 'order_number', name='uq_orders_store_order_number'),
        sa.CheckConstraint(
            "status IN ('pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled')",
            name='ck_orders_status',
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'failed', 'refunded')",
            name='ck_orders_payment_status',
        ),
    )

    # 5. 同步记录
    op.create_table(
        'sync_logs',
        sa.Column('id', sa.String(36), primary_key=True),
        _store_id(),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending', index=True),
        sa.Column('products_synced', sa.Integer, nullable=False, server_default='0'),
        sa.Column('categories_synced', sa.Integer, nullable=False, server_default='0'),
        sa.Column('rows_skipped', sa.Integer, nullable=False, server_default='0'),
        sa.Column('error_message', sa.Text, nullable=True),
        sa.Column('duration_ms', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('pending', 'running', 'completed', 'failed')",
            name='ck_sync_logs_status',
        ),
    )


def downgrade() -> None:
    op.drop_table('sync_logs')
    op.drop_table('orders')
    op.drop_index('ix_products_store_active_sort', table_name='products')
    op.drop_table('products')
    op.drop_table('categories')
    op.drop_table('stores')
