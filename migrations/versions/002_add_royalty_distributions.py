# migrations/versions/002_add_royalty_distributions.py
"""add royalty_distributions

Revision ID: 002
Revises: 001
Create Date: 2025-10-20
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None

def upgrade():
    # Per-recipient shares of each sale
    op.create_table('royalty_distributions',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('uuid_generate_v4()'), nullable=False),
        sa.Column('license_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('recipient_address', sa.String(length=100), nullable=False),
        sa.Column('split_percentage', sa.Numeric(precision=5, scale=2), nullable=False),
        sa.Column('amount_idr', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('status', sa.String(length=20), server_default='completed', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.CheckConstraint("status IN ('pending', 'completed', 'failed')", name='royalty_distributions_status_check'),
        sa.CheckConstraint('amount_idr >= 0', name='royalty_distributions_amount_check'),
        sa.ForeignKeyConstraint(['license_id'], ['licenses.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_index('idx_distributions_license', 'royalty_distributions', ['license_id'], unique=False)
    op.create_index('idx_distributions_recipient', 'royalty_distributions', ['recipient_address'], unique=False)

def downgrade():
    op.drop_index('idx_distributions_recipient', table_name='royalty_distributions')
    op.drop_index('idx_distributions_license', table_name='royalty_distributions')
    op.drop_table('royalty_distributions')
