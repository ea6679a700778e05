"""initial_schema

Revision ID: 3f1a9c7e2b40
Revises:
Create Date: 2026-10-18 09:00:00.000000

Creates the KEALOA reference schema:
- persons: Players, clue givers, constructors and editors
- puzzles / puzzle_constructors: NYT puzzles and ordered bylines
- rounds / round_guessers / round_solutions: KEALOA rounds
- clues / guesses: Clues read in a round and the answers given
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c7e2b40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create all KEALOA tables."""
    op.create_table(
        'persons',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('nicknames', sa.Text(), nullable=True),
        sa.Column('home_page_url', sa.String(length=500), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('media_id', sa.Integer(), nullable=True),
        sa.Column('hide_xwordinfo', sa.Boolean(), nullable=False),
        sa.Column('xwordinfo_profile_name', sa.String(length=255), nullable=True),
        sa.Column('xwordinfo_image_url', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("full_name != ''", name='ck_person_non_empty_name'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_persons_full_name', 'persons', ['full_name'])

    op.create_table(
        'puzzles',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('publication_date', sa.Date(), nullable=False),
        sa.Column('editor_id', sa.Integer(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['editor_id'], ['persons.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_puzzles_publication_date', 'puzzles', ['publication_date'], unique=True)
    op.create_index('ix_puzzles_editor_id', 'puzzles', ['editor_id'])

    op.create_table(
        'puzzle_constructors',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('puzzle_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('constructor_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['puzzle_id'], ['puzzles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('puzzle_id', 'person_id', name='uq_puzzle_constructor')
    )
    op.create_index('ix_puzzle_constructors_puzzle_id', 'puzzle_constructors', ['puzzle_id'])
    op.create_index('ix_puzzle_constructors_person_id', 'puzzle_constructors', ['person_id'])

    op.create_table(
        'rounds',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('round_date', sa.Date(), nullable=False),
        sa.Column('round_number', sa.Integer(), nullable=False),
        sa.Column('episode_number', sa.Integer(), nullable=False),
        sa.Column('episode_id', sa.Integer(), nullable=True),
        sa.Column('episode_url', sa.String(length=500), nullable=True),
        sa.Column('episode_start_seconds', sa.Integer(), nullable=False),
        sa.Column('clue_giver_id', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('description2', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('round_number >= 1', name='ck_round_number_positive'),
        sa.ForeignKeyConstraint(['clue_giver_id'], ['persons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_date', 'round_number', name='uq_round_date_number')
    )
    op.create_index('ix_rounds_round_date', 'rounds', ['round_date'])
    op.create_index('ix_rounds_clue_giver_id', 'rounds', ['clue_giver_id'])

    op.create_table(
        'round_guessers',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['round_id'], ['rounds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_id', 'person_id', name='uq_round_guesser')
    )
    op.create_index('ix_round_guessers_round_id', 'round_guessers', ['round_id'])
    op.create_index('ix_round_guessers_person_id', 'round_guessers', ['person_id'])

    op.create_table(
        'round_solutions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('word', sa.String(length=100), nullable=False),
        sa.Column('word_order', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['round_id'], ['rounds.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_round_solutions_round_id', 'round_solutions', ['round_id'])

    op.create_table(
        'clues',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('round_id', sa.Integer(), nullable=False),
        sa.Column('clue_number', sa.Integer(), nullable=False),
        sa.Column('puzzle_id', sa.Integer(), nullable=True),
        sa.Column('puzzle_clue_number', sa.Integer(), nullable=True),
        sa.Column('puzzle_clue_direction', sa.String(length=1), nullable=True),
        sa.Column('clue_text', sa.Text(), nullable=False),
        sa.Column('correct_answer', sa.String(length=100), nullable=False),
        *_timestamps(),
        sa.CheckConstraint(
            "puzzle_clue_direction IS NULL OR puzzle_clue_direction IN ('A', 'D')",
            name='ck_clue_direction'
        ),
        sa.ForeignKeyConstraint(['round_id'], ['rounds.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['puzzle_id'], ['puzzles.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('round_id', 'clue_number', name='uq_clue_round_number')
    )
    op.create_index('ix_clues_round_id', 'clues', ['round_id'])
    op.create_index('ix_clues_puzzle_id', 'clues', ['puzzle_id'])

    op.create_table(
        'guesses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('clue_id', sa.Integer(), nullable=False),
        sa.Column('person_id', sa.Integer(), nullable=False),
        sa.Column('guessed_word', sa.String(length=100), nullable=False),
        sa.Column('is_correct', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['clue_id'], ['clues.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['person_id'], ['persons.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('clue_id', 'person_id', name='uq_guess_clue_person')
    )
    op.create_index('ix_guesses_clue_id', 'guesses', ['clue_id'])
    op.create_index('ix_guesses_person_id', 'guesses', ['person_id'])


def downgrade() -> None:
    """Drop all KEALOA tables."""
    for table in (
        'guesses',
        'clues',
        'round_solutions',
        'round_guessers',
        'rounds',
        'puzzle_constructors',
        'puzzles',
        'persons',
    ):
        op.drop_table(table)
