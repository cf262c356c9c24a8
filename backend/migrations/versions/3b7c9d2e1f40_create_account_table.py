"""create account table

Revision ID: 3b7c9d2e1f40
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3b7c9d2e1f40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    # Fresh installs created via `flask db-reset` already have the table
    if 'account' in set(insp.get_table_names()):
        return

    op.create_table(
        'account',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('display_name', sa.String(length=64), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_account_username'), 'account', ['username'], unique=True)


def downgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    if 'account' not in set(insp.get_table_names()):
        return
    op.drop_index(op.f('ix_account_username'), table_name='account')
    op.drop_table('account')
