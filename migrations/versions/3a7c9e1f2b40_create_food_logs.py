"""create food_logs table

Revision ID: 3a7c9e1f2b40
Revises:
Create Date: 2026-10-19 09:12:04.118230

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3a7c9e1f2b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'food_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('food_name', sa.String(length=255), nullable=False),
        sa.Column('input_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=32), nullable=False),
        sa.Column('calories', sa.Float(), nullable=True),
        sa.Column('protein', sa.Float(), nullable=True),
        sa.Column('carbs', sa.Float(), nullable=True),
        sa.Column('fat', sa.Float(), nullable=True),
        sa.Column('fiber', sa.Float(), nullable=True),
        sa.Column('sugar', sa.Float(), nullable=True),
        sa.Column('sodium', sa.Float(), nullable=True),
        sa.Column('logged_date', sa.Date(), nullable=False),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )

    # Per-day filtering for the daily summary
    op.create_index('ix_food_logs_logged_date', 'food_logs', ['logged_date'])
    op.create_index('ix_food_logs_user_date', 'food_logs', ['user_id', 'logged_date'])


def downgrade():
    op.drop_index('ix_food_logs_user_date', table_name='food_logs')
    op.drop_index('ix_food_logs_logged_date', table_name='food_logs')
    op.drop_table('food_logs')
