"""Create users, stripe_plans and stripe_subscriptions tables

Revision ID: 4c2e9a7f1b30
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4c2e9a7f1b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=True),
        sa.Column('stripe_customer_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('ix_users_stripe_customer_id', 'users', ['stripe_customer_id'])

    op.create_table('stripe_plans',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('plan_id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('livemode', sa.Boolean(), nullable=False),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id')
    )

    op.create_table('stripe_subscriptions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('subscription_id', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('plan_id', sa.String(length=255), nullable=True),
        sa.Column('customer_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('cancel_at_period_end', sa.Boolean(), nullable=True),
        sa.Column('roles', sa.JSON(), nullable=True),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('subscription_id')
    )
    op.create_index('ix_stripe_subscriptions_user_id', 'stripe_subscriptions', ['user_id'])
    op.create_index('ix_stripe_subscriptions_customer_id', 'stripe_subscriptions', ['customer_id'])


def downgrade():
    op.drop_index('ix_stripe_subscriptions_customer_id', table_name='stripe_subscriptions')
    op.drop_index('ix_stripe_subscriptions_user_id', table_name='stripe_subscriptions')
    op.drop_table('stripe_subscriptions')
    op.drop_table('stripe_plans')
    op.drop_index('ix_users_stripe_customer_id', table_name='users')
    op.drop_table('users')
