# migrations/versions/001_initial_schema.py
"""initial schema

Revision ID: 001
Revises:
Create Date: 2025-09-01

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
    # Extensions
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')
    op.execute('CREATE EXTENSION IF NOT EXISTS "pg_trgm"')

    # profiles
    op.create_table('profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('full_name', sa.String(length=200), nullable=True),
        sa.Column('role', sa.String(length=20), server_default=sa.text("'creator'"), nullable=False),
        sa.Column('wallet_address', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint("role IN ('creator', 'buyer', 'admin')", name="valid_role"),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username')
    )

    # creative_works
    op.create_table('creative_works',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('creator_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        sa.Column('file_url', sa.Text(), nullable=True),
        sa.Column('views', sa.Integer(), server_default=sa.text('0'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['creator_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id')
    )

    # license_offerings
    op.create_table('license_offerings',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('work_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('license_type', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_idr', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('duration_days', sa.Integer(), nullable=True),
        sa.Column('terms', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint("price_idr >= 0", name="non_negative_price"),
        sa.ForeignKeyConstraint(['work_id'], ['creative_works.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    # orders
    op.create_table('orders',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('buyer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('license_offering_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('amount_idr', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), server_default=sa.text("'pending'"), nullable=False),
        sa.Column('payment_method', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'paid', 'completed', 'failed')", name="valid_order_status"),
        sa.ForeignKeyConstraint(['buyer_id'], ['profiles.id'], ),
        sa.ForeignKeyConstraint(['license_offering_id'], ['license_offerings.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )

    # licenses (sales ledger)
    op.create_table('licenses',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('order_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('license_offering_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('work_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('buyer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('price_idr', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('purchased_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('usage_limit', sa.Integer(), nullable=True),
        sa.Column('usage_count', sa.Integer(), server_default=sa.text('0'), nullable=True),
        sa.Column('nft_token_id', sa.Text(), nullable=True),
        sa.Column('nft_transaction_hash', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ),
        sa.ForeignKeyConstraint(['license_offering_id'], ['license_offerings.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['work_id'], ['creative_works.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['buyer_id'], ['profiles.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_id')
    )

    # royalty_splits
    op.create_table('royalty_splits',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('work_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('recipient_address', sa.String(length=100), nullable=False),
        sa.Column('split_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('split_contract_address', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.ForeignKeyConstraint(['work_id'], ['creative_works.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    # Indexes
    op.create_index('idx_works_creator', 'creative_works', ['creator_id'], unique=False)
    op.create_index('idx_works_category', 'creative_works', ['category'], unique=False)
    op.create_index('idx_works_created', 'creative_works', ['created_at'], unique=False)
    op.create_index('idx_works_title_trgm', 'creative_works', ['title'], unique=False,
                    postgresql_using='gin', postgresql_ops={'title': 'gin_trgm_ops'})
    op.create_index('idx_offerings_work', 'license_offerings', ['work_id'], unique=False)
    op.create_index('idx_orders_buyer', 'orders', ['buyer_id'], unique=False)
    op.create_index('idx_licenses_work_purchased', 'licenses', ['work_id', 'purchased_at'], unique=False)
    op.create_index('idx_licenses_buyer', 'licenses', ['buyer_id'], unique=False)
    op.create_index('idx_splits_work', 'royalty_splits', ['work_id'], unique=False)

def downgrade():
    op.drop_table('royalty_splits')
    op.drop_table('licenses')
    op.drop_table('orders')
    op.drop_table('license_offerings')
    op.drop_table('creative_works')
    op.drop_table('profiles')
