"""create_autologin_tokens

Revision ID: 3f1c9a7d2b64
Revises:
Create Date: 2026-10-17 19:20:41.512337

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3f1c9a7d2b64'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users and autologin_tokens tables."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'autologin_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('path', sa.Text(), nullable=True),
        sa.Column('count', sa.Integer(), server_default='0', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_autologin_tokens_id'), 'autologin_tokens', ['id'], unique=False)
    # Uniqueness of live tokens is enforced here, not only by the generator's pre-check
    op.create_index(op.f('ix_autologin_tokens_token'), 'autologin_tokens', ['token'], unique=True)
    op.create_index(op.f('ix_autologin_tokens_user_id'), 'autologin_tokens', ['user_id'], unique=False)
    op.create_index(op.f('ix_autologin_tokens_created_at'), 'autologin_tokens', ['created_at'], unique=False)


def downgrade() -> None:
    """Drop autologin tables."""
    op.drop_index(op.f('ix_autologin_tokens_created_at'), table_name='autologin_tokens')
    op.drop_index(op.f('ix_autologin_tokens_user_id'), table_name='autologin_tokens')
    op.drop_index(op.f('ix_autologin_tokens_token'), table_name='autologin_tokens')
    op.drop_index(op.f('ix_autologin_tokens_id'), table_name='autologin_tokens')
    op.drop_table('autologin_tokens')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_index(op.f('ix_users_id'), table_name='users')
    op.drop_table('users')
