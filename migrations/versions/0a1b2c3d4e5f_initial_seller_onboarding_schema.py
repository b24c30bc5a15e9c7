"""initial seller onboarding schema

Revision ID: 0a1b2c3d4e5f
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0a1b2c3d4e5f'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='customer'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_phone', 'users', ['phone'])
    op.create_index('ix_users_role', 'users', ['role'])

    op.create_table(
        'seller_applications',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('application_id', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False, server_default='pending'),
        sa.Column('business_name', sa.String(length=100), nullable=False),
        sa.Column('business_type', sa.String(length=50), nullable=False),
        sa.Column('business_category', sa.String(length=50), nullable=False),
        sa.Column('business_description', sa.Text(), nullable=False),
        sa.Column('established_year', sa.Integer(), nullable=True),
        sa.Column('business_email', sa.String(length=255), nullable=False),
        sa.Column('business_phone', sa.String(length=20), nullable=False),
        sa.Column('business_address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=50), nullable=False),
        sa.Column('state', sa.String(length=50), nullable=False),
        sa.Column('pincode', sa.String(length=6), nullable=False),
        sa.Column('has_physical_store', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('store_address', sa.String(length=500), nullable=True),
        sa.Column('expected_monthly_revenue', sa.String(length=50), nullable=True),
        sa.Column('product_categories', sa.JSON(), nullable=True),
        sa.Column('pan_number', sa.String(length=10), nullable=True),
        sa.Column('gst_number', sa.String(length=15), nullable=True),
        sa.Column('bank_account_number', sa.String(length=25), nullable=False),
        sa.Column('bank_name', sa.String(length=100), nullable=False),
        sa.Column('bank_ifsc', sa.String(length=11), nullable=True),
        sa.Column('account_holder_name', sa.String(length=100), nullable=False),
        sa.Column('agree_to_terms', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('reviewed_by', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sa.String(length=1000), nullable=True),
        sa.Column('rejection_reason', sa.String(length=500), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_updated', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
    )
    op.create_index('ix_seller_applications_user_id', 'seller_applications', ['user_id'], unique=True)
    op.create_index('ix_seller_applications_application_id', 'seller_applications', ['application_id'], unique=True)
    op.create_index('ix_seller_applications_status', 'seller_applications', ['status'])
    op.create_index('ix_seller_applications_business_name', 'seller_applications', ['business_name'])
    op.create_index('ix_seller_applications_business_email', 'seller_applications', ['business_email'])
    op.create_index('ix_seller_applications_submitted_at', 'seller_applications', ['submitted_at'])

    op.create_table(
        'seller_subscriptions',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('subscription_type', sa.String(length=20), nullable=False, server_default='regular'),
        sa.Column('monthly_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('registration_fee', sa.Numeric(10, 2), nullable=False),
        sa.Column('registration_paid', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('registration_payment_id', sa.String(length=100), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('next_payment_date', sa.DateTime(), nullable=True),
        sa.Column('activated_at', sa.DateTime(), nullable=True),
        sa.Column('cancelled_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_seller_subscriptions_user_id', 'seller_subscriptions', ['user_id'], unique=True)
    op.create_index('ix_seller_subscriptions_status', 'seller_subscriptions', ['status'])
    op.create_index('ix_seller_subscriptions_next_payment_date', 'seller_subscriptions', ['next_payment_date'])

    op.create_table(
        'subscription_payments',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('subscription_id', sa.String(length=36), sa.ForeignKey('seller_subscriptions.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('razorpay_order_id', sa.String(length=100), nullable=True),
        sa.Column('razorpay_payment_id', sa.String(length=100), nullable=True),
        sa.Column('razorpay_signature', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('paid_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('subscription_id', 'sequence', name='uq_subscription_payment_sequence'),
    )
    op.create_index('ix_subscription_payments_subscription_id', 'subscription_payments', ['subscription_id'])
    op.create_index('ix_subscription_payments_razorpay_order_id', 'subscription_payments', ['razorpay_order_id'])

    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('parent_id', sa.String(length=36), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('level', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('display_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('icon', sa.String(length=100), nullable=True),
        sa.Column('image', sa.String(length=500), nullable=True),
        sa.Column('meta_title', sa.String(length=60), nullable=True),
        sa.Column('meta_description', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('updated_by', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_categories_name', 'categories', ['name'])
    op.create_index('ix_categories_slug', 'categories', ['slug'], unique=True)
    op.create_index('ix_categories_parent_id', 'categories', ['parent_id'])
    op.create_index('ix_categories_level', 'categories', ['level'])
    op.create_index('ix_categories_is_active', 'categories', ['is_active'])

    op.create_table(
        'activity_log',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('actor_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('entity_type', sa.String(length=50), nullable=True),
        sa.Column('entity_id', sa.String(length=36), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_activity_log_actor_id', 'activity_log', ['actor_id'])
    op.create_index('ix_activity_log_action', 'activity_log', ['action'])
    op.create_index('ix_activity_log_entity_type', 'activity_log', ['entity_type'])
    op.create_index('ix_activity_log_created_at', 'activity_log', ['created_at'])


def downgrade():
    op.drop_table('activity_log')
    op.drop_table('categories')
    op.drop_table('subscription_payments')
    op.drop_table('seller_subscriptions')
    op.drop_table('seller_applications')
    op.drop_table('users')
