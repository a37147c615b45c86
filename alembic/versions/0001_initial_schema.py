"""Initial marketplace schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2025-01-06 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _id():
    return sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True)


def _user_fk(name, **kwargs):
    return sa.Column(
        name,
        sa.BigInteger(),
        sa.ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        **kwargs
    )


def upgrade():
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'profiles',
        _id(),
        _user_fk('user_id', unique=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('bank_name', sa.String(), nullable=True),
        sa.Column('account_number', sa.String(), nullable=True),
        sa.Column('account_name', sa.String(), nullable=True),
        sa.Column('bank_code', sa.String(), nullable=True),
        sa.Column('referral_code', sa.String(16), nullable=False),
        sa.Column('referred_by_code', sa.String(16), nullable=True),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_profiles_referral_code', 'profiles', ['referral_code'], unique=True)

    op.create_table(
        'products',
        _id(),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(), nullable=False, server_default='ebooks'),
        sa.Column('price_minor', sa.BigInteger(), nullable=False),
        sa.Column('file_url', sa.String(), nullable=True),
        sa.Column('thumbnail_url', sa.String(), nullable=True),
        sa.Column('preview_url', sa.String(), nullable=True),
        sa.Column('download_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('tags', sa.JSON(), nullable=True),
        sa.Column('file_format', sa.String(), nullable=True),
        sa.Column('file_size_mb', sa.Float(), nullable=True),
        sa.Column('author_creator', sa.String(), nullable=True),
        sa.Column('brand', sa.String(), nullable=True),
        sa.Column('product_version', sa.String(), nullable=True),
        sa.Column('licensing_info', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_products_category', 'products', ['category'])

    op.create_table(
        'subscription_plans',
        _id(),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('price_minor', sa.BigInteger(), nullable=False),
        sa.Column('duration_months', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('commission_rate', sa.Numeric(3, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'user_subscriptions',
        _id(),
        _user_fk('user_id', index=True),
        sa.Column(
            'plan_id',
            sa.BigInteger(),
            sa.ForeignKey('subscription_plans.id'),
            nullable=False,
        ),
        sa.Column('status', sa.String(), nullable=False, server_default='active'),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('payment_reference', sa.String(), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'wallets',
        _id(),
        _user_fk('user_id', unique=True),
        sa.Column('balance_minor', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('total_earned_minor', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('total_withdrawn_minor', sa.BigInteger(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'sales',
        _id(),
        sa.Column(
            'product_id',
            sa.BigInteger(),
            sa.ForeignKey('products.id', ondelete='SET NULL'),
            nullable=True,
        ),
        _user_fk('seller_id', index=True),
        sa.Column('buyer_email', sa.String(), nullable=True),
        sa.Column('sale_amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('commission_amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('admin_amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('kind', sa.String(), nullable=False, server_default='product'),
        sa.Column('status', sa.String(), nullable=False, server_default='completed'),
        sa.Column('transaction_id', sa.String(), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'withdrawal_requests',
        _id(),
        _user_fk('user_id', index=True),
        sa.Column('amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('processing_fee_minor', sa.BigInteger(), nullable=False),
        sa.Column('net_amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('bank_name', sa.String(), nullable=False),
        sa.Column('account_number', sa.String(), nullable=False),
        sa.Column('account_name', sa.String(), nullable=False),
        sa.Column('bank_code', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False, server_default='pending', index=True),
        sa.Column('reference', sa.String(), nullable=True, unique=True),
        sa.Column('recipient_code', sa.String(), nullable=True),
        sa.Column('admin_notes', sa.Text(), nullable=True),
        sa.Column('admin_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'referral_commissions',
        _id(),
        _user_fk('referrer_id', index=True),
        _user_fk('referred_user_id'),
        sa.Column('commission_amount_minor', sa.BigInteger(), nullable=False),
        sa.Column('commission_rate', sa.Numeric(3, 2), nullable=False),
        sa.Column('source', sa.String(), nullable=False),
        sa.Column('transaction_id', sa.String(), nullable=True),
        sa.Column('status', sa.String(), nullable=False, server_default='completed'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'referral_tracking',
        _id(),
        _user_fk('referrer_id', index=True),
        _user_fk('referred_user_id', unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )


def downgrade():
    op.drop_table('referral_tracking')
    op.drop_table('referral_commissions')
    op.drop_table('withdrawal_requests')
    op.drop_table('sales')
    op.drop_table('wallets')
    op.drop_table('user_subscriptions')
    op.drop_table('subscription_plans')
    op.drop_index('ix_products_category', table_name='products')
    op.drop_table('products')
    op.drop_index('ix_profiles_referral_code', table_name='profiles')
    op.drop_table('profiles')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
