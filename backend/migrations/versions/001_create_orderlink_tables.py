"""Create shop, order_block, draft_order_link, app_setting and audit_log tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Installed shops and their Admin API tokens
    op.create_table(
        'shop',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('domain', sa.Text(), nullable=False),
        sa.Column('access_token', sa.Text(), nullable=False),
        sa.Column('scope', sa.Text(), nullable=True),
        sa.Column('installed_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('domain', name='uq_shop_domain'),
        sa.CheckConstraint("domain ~ '^[a-z0-9][a-z0-9-]*\\.myshopify\\.com$'", name='ck_shop_domain_format')
    )

    op.create_table(
        'order_block',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('shop', sa.Text(), nullable=False),
        sa.Column('reference', sa.Text(), nullable=False, comment='Human readable number, npdfNNN'),
        sa.Column('product_title', sa.Text(), nullable=False),
        sa.Column('customer_email', sa.Text(), nullable=True),
        sa.Column('customer_name', sa.Text(), nullable=True),
        sa.Column('note', sa.Text(), nullable=True),
        sa.Column('images', postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('video_url', sa.Text(), nullable=True),
        sa.Column('option_groups', postgresql.JSONB(), server_default=sa.text("'[]'::jsonb"), nullable=False),
        sa.Column('selected_options', postgresql.JSONB(), nullable=True),
        sa.Column('total_price', sa.Text(), nullable=True),
        sa.Column('shopify_draft_order_id', sa.Text(), nullable=True),
        sa.Column('invoice_url', sa.Text(), nullable=True),
        sa.Column('shopify_order_id', sa.Text(), nullable=True),
        sa.Column('is_purchased', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('purchased_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_block_shop_created', 'order_block', ['shop', 'created_at'])
    op.create_index('ix_order_block_shop_draft_order', 'order_block', ['shop', 'shopify_draft_order_id'])
    op.create_index('uq_order_block_shop_reference', 'order_block', ['shop', 'reference'], unique=True)

    # Token index for draft-order backed custom orders
    op.create_table(
        'draft_order_link',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('shop', sa.Text(), nullable=False),
        sa.Column('token', sa.Text(), nullable=False),
        sa.Column('draft_order_id', sa.BigInteger(), nullable=False),
        sa.Column('is_purchased', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('purchased_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('uq_draft_order_link_shop_token', 'draft_order_link', ['shop', 'token'], unique=True)
    op.create_index('ix_draft_order_link_shop_draft_order', 'draft_order_link', ['shop', 'draft_order_id'])

    # Key/value settings (npdfIdCounter)
    op.create_table(
        'app_setting',
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_table(
        'audit_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('shop', sa.Text(), nullable=False),
        sa.Column('action', sa.Text(), nullable=False),
        sa.Column('entity_type', sa.Text(), nullable=True),
        sa.Column('entity_id', sa.Text(), nullable=True),
        sa.Column('metadata_json', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_log_shop', 'audit_log', ['shop'])
    op.create_index('ix_audit_log_shop_created_at', 'audit_log', ['shop', 'created_at'])


def downgrade():
    op.drop_index('ix_audit_log_shop_created_at', table_name='audit_log')
    op.drop_index('ix_audit_log_shop', table_name='audit_log')
    op.drop_table('audit_log')

    op.drop_table('app_setting')

    op.drop_index('ix_draft_order_link_shop_draft_order', table_name='draft_order_link')
    op.drop_index('uq_draft_order_link_shop_token', table_name='draft_order_link')
    op.drop_table('draft_order_link')

    op.drop_index('uq_order_block_shop_reference', table_name='order_block')
    op.drop_index('ix_order_block_shop_draft_order', table_name='order_block')
    op.drop_index('ix_order_block_shop_created', table_name='order_block')
    op.drop_table('order_block')

    op.drop_table('shop')
