"""unique completed razorpay payment id

Revision ID: 1b2c3d4e5f6a
Revises: 0a1b2c3d4e5f
Create Date: 2026-10-26 09:30:00.000000

A gateway payment may settle only one ledger row across all subscriptions.
Failed rows keep their payment id for audit, so the index is partial.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1b2c3d4e5f6a'
down_revision = '0a1b2c3d4e5f'
branch_labels = None
depends_on = None

INDEX_NAME = 'uq_subscription_payments_completed_payment_id'


def upgrade():
    op.create_index(
        INDEX_NAME,
        'subscription_payments',
        ['razorpay_payment_id'],
        unique=True,
        sqlite_where=sa.text("status = 'completed'"),
        postgresql_where=sa.text("status = 'completed'"),
    )


def downgrade():
    op.drop_index(INDEX_NAME, table_name='subscription_payments')
