"""initial schema: catalog, divisions, gyms, challenges, submissions, xp ledger

Revision ID: 3e8a61c0d5b4
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3e8a61c0d5b4'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id():
    return sa.Column('id', sa.Integer(), primary_key=True, nullable=False)


def _fk(name, target, nullable=False, ondelete='CASCADE'):
    return sa.Column(name, sa.Integer(), sa.ForeignKey(target, ondelete=ondelete), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        'domains',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        'disciplines',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
    )
    op.create_table(
        'equipment',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
    )
    op.create_table(
        'divisions',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=True),
        sa.Column('age_min', sa.Integer(), nullable=True),
        sa.Column('age_max', sa.Integer(), nullable=True),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
    )
    op.create_table(
        'athletes',
        _id(),
        sa.Column('display_name', sa.String(), nullable=False),
        sa.Column('date_of_birth', sa.Date(), nullable=False),
        sa.Column('gender', sa.String(length=10), nullable=True),
    )
    op.create_table(
        'athlete_disciplines',
        _id(),
        _fk('athlete_id', 'athletes.id'),
        _fk('discipline_id', 'disciplines.id'),
        sa.UniqueConstraint('athlete_id', 'discipline_id'),
    )
    op.create_table(
        'gyms',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False, unique=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
    )
    op.create_table(
        'gym_members',
        _id(),
        _fk('gym_id', 'gyms.id'),
        _fk('athlete_id', 'athletes.id'),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='MEMBER'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
        sa.UniqueConstraint('gym_id', 'athlete_id'),
    )
    op.create_table(
        'gym_equipment',
        _id(),
        _fk('gym_id', 'gyms.id'),
        _fk('equipment_id', 'equipment.id'),
        sa.UniqueConstraint('gym_id', 'equipment_id'),
    )

    op.create_table(
        'challenges',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('grading_type', sa.String(length=20), nullable=False, server_default='PASS_FAIL'),
        sa.Column('grading_unit', sa.String(length=20), nullable=True),
        sa.Column('time_format', sa.String(length=10), nullable=False, server_default='hh:mm:ss'),
        sa.Column('min_rank', sa.String(length=1), nullable=False, server_default='F'),
        sa.Column('max_rank', sa.String(length=1), nullable=False, server_default='S'),
        _fk('gym_id', 'gyms.id', nullable=True, ondelete='SET NULL'),
        sa.Column('proof_types', sa.JSON(), nullable=False),
        sa.Column('activity_type', sa.String(length=40), nullable=True),
        sa.Column('min_distance', sa.Float(), nullable=True),
        sa.Column('max_distance', sa.Float(), nullable=True),
        sa.Column('min_elevation_gain', sa.Float(), nullable=True),
        sa.Column('requires_gps', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('requires_heart_rate', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='1'),
    )
    op.create_index('ix_challenges_name', 'challenges', ['name'])
    op.create_index('ix_challenges_gym_id', 'challenges', ['gym_id'])

    op.create_table(
        'challenge_domains',
        _id(),
        _fk('challenge_id', 'challenges.id'),
        _fk('domain_id', 'domains.id'),
        sa.Column('xp_percent', sa.Integer(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('challenge_id', 'domain_id'),
    )
    op.create_table(
        'challenge_divisions',
        _id(),
        _fk('challenge_id', 'challenges.id'),
        _fk('division_id', 'divisions.id'),
        sa.UniqueConstraint('challenge_id', 'division_id'),
    )
    op.create_table(
        'challenge_equipment',
        _id(),
        _fk('challenge_id', 'challenges.id'),
        _fk('equipment_id', 'equipment.id'),
        sa.Column('is_required', sa.Boolean(), nullable=False, server_default='1'),
        sa.UniqueConstraint('challenge_id', 'equipment_id'),
    )
    op.create_table(
        'challenge_disciplines',
        _id(),
        _fk('challenge_id', 'challenges.id'),
        _fk('discipline_id', 'disciplines.id'),
        sa.UniqueConstraint('challenge_id', 'discipline_id'),
    )
    op.create_table(
        'challenge_grades',
        _id(),
        _fk('challenge_id', 'challenges.id'),
        _fk('division_id', 'divisions.id'),
        sa.Column('rank', sa.String(length=1), nullable=False),
        sa.Column('target_value', sa.Float(), nullable=False),
        sa.Column('target_weight', sa.Float(), nullable=True),
        sa.UniqueConstraint('challenge_id', 'division_id', 'rank'),
    )
    for table in ('challenge_domains', 'challenge_divisions', 'challenge_equipment',
                  'challenge_disciplines', 'challenge_grades'):
        op.create_index(f'ix_{table}_challenge_id', table, ['challenge_id'])

    op.create_table(
        'submissions',
        _id(),
        _fk('athlete_id', 'athletes.id'),
        _fk('challenge_id', 'challenges.id'),
        sa.Column('proof_type', sa.String(length=10), nullable=False),
        sa.Column('proof_details', sa.JSON(), nullable=True),
        sa.Column('activity', sa.JSON(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('achieved_value', sa.Float(), nullable=True),
        sa.Column('achieved_weight', sa.Float(), nullable=True),
        sa.Column('achieved_rank', sa.String(length=1), nullable=True),
        sa.Column('xp_awarded', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('xp_by_domain', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='PENDING'),
        sa.Column('auto_approved', sa.Boolean(), nullable=False, server_default='0'),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('athlete_id', 'challenge_id', name='uq_submission_athlete_challenge'),
    )
    op.create_index('ix_submissions_challenge_id', 'submissions', ['challenge_id'])

    op.create_table(
        'submission_history',
        _id(),
        _fk('submission_id', 'submissions.id'),
        sa.Column('version', sa.Integer(), nullable=False),
        sa.Column('proof_type', sa.String(length=10), nullable=False),
        sa.Column('proof_details', sa.JSON(), nullable=True),
        sa.Column('achieved_value', sa.Float(), nullable=True),
        sa.Column('achieved_rank', sa.String(length=1), nullable=True),
        sa.Column('xp_awarded', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_submission_history_submission_id', 'submission_history', ['submission_id'])

    op.create_table(
        'xp_transactions',
        _id(),
        _fk('athlete_id', 'athletes.id'),
        _fk('domain_id', 'domains.id'),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('source', sa.String(length=20), nullable=False, server_default='CHALLENGE'),
        sa.Column('source_id', sa.Integer(), nullable=True),
        sa.Column('note', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_xp_transactions_athlete_id', 'xp_transactions', ['athlete_id'])
    op.create_index('ix_xp_transactions_source_id', 'xp_transactions', ['source_id'])

    op.create_table(
        'domain_levels',
        _id(),
        _fk('athlete_id', 'athletes.id'),
        _fk('domain_id', 'domains.id'),
        sa.Column('current_xp', sa.Integer(), nullable=False, server_default='0'),
        sa.UniqueConstraint('athlete_id', 'domain_id'),
    )


def downgrade() -> None:
    for table in (
        'domain_levels', 'xp_transactions', 'submission_history', 'submissions',
        'challenge_grades', 'challenge_disciplines', 'challenge_equipment',
        'challenge_divisions', 'challenge_domains', 'challenges',
        'gym_equipment', 'gym_members', 'gyms', 'athlete_disciplines', 'athletes',
        'divisions', 'equipment', 'disciplines', 'domains',
    ):
        op.drop_table(table)
