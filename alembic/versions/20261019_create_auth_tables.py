"""create_auth_tables

Revision ID: 3f1c2a9d5b10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d5b10'
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('otp_requests',
        sa.Column('id', sa.String(length=128), nullable=False, comment='hash(email, purpose, expireAt ISO-8601)'),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('purpose', sa.String(length=16), nullable=False, comment='signup, signin or sudo'),
        sa.Column('expire_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('passcode', sa.String(length=128), nullable=False, comment='hash(email, purpose, code)'),
        sa.Column('verified', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('otp_requests', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_otp_requests_email'), ['email'], unique=False)
        batch_op.create_index(batch_op.f('ix_otp_requests_expire_at'), ['expire_at'], unique=False)

    op.create_table('refresh_tokens',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('refresh_tokens', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_refresh_tokens_token_hash'), ['token_hash'], unique=True)
        batch_op.create_index(batch_op.f('ix_refresh_tokens_email'), ['email'], unique=False)

    op.create_table('server_admin_keys',
        sa.Column('id', sa.String(length=128), nullable=False, comment='hash(nickname, generatedAt ISO-8601, accountType)'),
        sa.Column('nickname', sa.String(length=255), nullable=False),
        sa.Column('generated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('account_type', sa.String(length=64), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('server_admin_keys', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_server_admin_keys_nickname'), ['nickname'], unique=True)


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table('server_admin_keys', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_server_admin_keys_nickname'))
    op.drop_table('server_admin_keys')

    with op.batch_alter_table('refresh_tokens', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_refresh_tokens_email'))
        batch_op.drop_index(batch_op.f('ix_refresh_tokens_token_hash'))
    op.drop_table('refresh_tokens')

    with op.batch_alter_table('otp_requests', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_otp_requests_expire_at'))
        batch_op.drop_index(batch_op.f('ix_otp_requests_email'))
    op.drop_table('otp_requests')
