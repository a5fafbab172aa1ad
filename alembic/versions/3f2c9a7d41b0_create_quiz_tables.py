"""create_quiz_tables

Revision ID: 3f2c9a7d41b0
Revises:
Create Date: 2026-10-19 10:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2c9a7d41b0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table('categories',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_categories_id', 'categories', ['id'])

    op.create_table('questions',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('category_id', sa.String(64), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('question_type', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('options_json', sa.Text(), nullable=True),
        sa.Column('explanation', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_questions_id', 'questions', ['id'])
    op.create_index('ix_questions_category_id', 'questions', ['category_id'])

    op.create_table('storage_meta',
        sa.Column('key', sa.String(64), nullable=False),
        sa.Column('value', sa.String(255), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_table('wrong_entries',
        sa.Column('question_id', sa.String(64), nullable=False),
        sa.Column('count', sa.Integer(), nullable=False, server_default='1'),
        sa.PrimaryKeyConstraint('question_id')
    )

    op.create_table('served_questions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('category_id', sa.String(64), nullable=False),
        sa.Column('question_id', sa.String(64), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('category_id', 'question_id', name='uq_served_category_question')
    )
    op.create_index('ix_served_questions_id', 'served_questions', ['id'])
    op.create_index('ix_served_questions_category_id', 'served_questions', ['category_id'])

    op.create_table('exam_results',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('result_id', sa.String(64), nullable=False),
        sa.Column('taken_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('kind', sa.String(20), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_exam_results_id', 'exam_results', ['id'])

    op.create_table('user_state_extras',
        sa.Column('key', sa.String(64), nullable=False),
        sa.Column('value_json', sa.Text(), nullable=False),
        sa.PrimaryKeyConstraint('key')
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('user_state_extras')
    op.drop_index('ix_exam_results_id', table_name='exam_results')
    op.drop_table('exam_results')
    op.drop_index('ix_served_questions_category_id', table_name='served_questions')
    op.drop_index('ix_served_questions_id', table_name='served_questions')
    op.drop_table('served_questions')
    op.drop_table('wrong_entries')
    op.drop_table('storage_meta')
    op.drop_index('ix_questions_category_id', table_name='questions')
    op.drop_index('ix_questions_id', table_name='questions')
    op.drop_table('questions')
    op.drop_index('ix_categories_id', table_name='categories')
    op.drop_table('categories')
