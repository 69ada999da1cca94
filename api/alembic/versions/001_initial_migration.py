"""Initial migration: create user, document, flashcard_set and flashcard_review tables

Revision ID: initial
Revises: 
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Create user table
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_user_username'), 'user', ['username'], unique=True)
    op.create_index(op.f('ix_user_email'), 'user', ['email'], unique=True)

    # Create document table
    op.create_table(
        'document',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('filename', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_document_user_id'), 'document', ['user_id'], unique=False)

    # Create flashcard_set table; sets go away with their document
    op.create_table(
        'flashcard_set',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('document_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('cards', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['document_id'], ['document.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_flashcard_set_document_id'), 'flashcard_set', ['document_id'], unique=False)

    # Create flashcard_review table; one row per (user, set, card index)
    op.create_table(
        'flashcard_review',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('flashcard_set_id', sa.Integer(), nullable=False),
        sa.Column('card_index', sa.Integer(), nullable=False),
        sa.Column('ease_factor', sa.Float(), nullable=False, server_default='2.5'),
        sa.Column('interval', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('next_review_date', sa.DateTime(), nullable=False),
        sa.Column('times_reviewed', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_reviewed', sa.DateTime(), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='0'),
        sa.CheckConstraint('ease_factor >= 1.3', name='ck_flashcard_review_ease_factor_min'),
        sa.CheckConstraint('"interval" >= 1', name='ck_flashcard_review_interval_min'),
        sa.CheckConstraint('card_index >= 0', name='ck_flashcard_review_card_index_min'),
        sa.ForeignKeyConstraint(['user_id'], ['user.id'], ),
        sa.ForeignKeyConstraint(['flashcard_set_id'], ['flashcard_set.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'flashcard_set_id', 'card_index', name='uq_flashcard_review_user_set_card')
    )
    op.create_index(op.f('ix_flashcard_review_user_id'), 'flashcard_review', ['user_id'], unique=False)
    op.create_index(op.f('ix_flashcard_review_flashcard_set_id'), 'flashcard_review', ['flashcard_set_id'], unique=False)
    op.create_index(op.f('ix_flashcard_review_next_review_date'), 'flashcard_review', ['next_review_date'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_flashcard_review_next_review_date'), table_name='flashcard_review')
    op.drop_index(op.f('ix_flashcard_review_flashcard_set_id'), table_name='flashcard_review')
    op.drop_index(op.f('ix_flashcard_review_user_id'), table_name='flashcard_review')
    op.drop_table('flashcard_review')
    op.drop_index(op.f('ix_flashcard_set_document_id'), table_name='flashcard_set')
    op.drop_table('flashcard_set')
    op.drop_index(op.f('ix_document_user_id'), table_name='document')
    op.drop_table('document')
    op.drop_index(op.f('ix_user_email'), table_name='user')
    op.drop_index(op.f('ix_user_username'), table_name='user')
    op.drop_table('user')
