"""initial schema

Revision ID: 3a91c0e5d2b7
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3a91c0e5d2b7'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

BigIntPK = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamps(with_updated: bool = True):
    cols = [sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True)]
    if with_updated:
        cols.append(sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True))
    return cols


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('condition', sa.String(), nullable=True),
        sa.Column('specialty', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('location', sa.String(), nullable=True),
        sa.Column('email_verified', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("role in ('client','therapist')", name='ck_users_role'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'therapist_profiles',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('bio', sa.Text(), nullable=False),
        sa.Column('specialties', sa.JSON(), nullable=False),
        sa.Column('credentials', sa.String(), nullable=False),
        sa.Column('experience_years', sa.Integer(), nullable=False),
        sa.Column('availability', sa.JSON(), nullable=False),
        sa.Column('hourly_rate', sa.Numeric(10, 2), nullable=True),
        sa.Column('is_approved', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('experience_years >= 0', name='ck_therapist_profiles_experience'),
        sa.CheckConstraint('hourly_rate is null or hourly_rate >= 0', name='ck_therapist_profiles_rate'),
    )
    op.create_index('ix_therapist_profiles_id', 'therapist_profiles', ['id'])
    op.create_index('idx_therapist_profiles_approved', 'therapist_profiles', ['is_approved'])

    op.create_table(
        'appointments',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('client_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('therapist_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('scheduled_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('meeting_link', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status in ('booked','completed','cancelled','no_show')", name='ck_appointments_status'),
        sa.CheckConstraint('duration > 0', name='ck_appointments_duration'),
    )
    op.create_index('ix_appointments_id', 'appointments', ['id'])
    op.create_index('idx_appointments_client', 'appointments', ['client_id', 'scheduled_at'])
    op.create_index('idx_appointments_therapist', 'appointments', ['therapist_id', 'scheduled_at'])

    op.create_table(
        'messages',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('sender_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('read', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(with_updated=False),
    )
    op.create_index('ix_messages_id', 'messages', ['id'])
    op.create_index('idx_messages_sender_receiver', 'messages', ['sender_id', 'receiver_id'])
    op.create_index('idx_messages_receiver_read', 'messages', ['receiver_id', 'read'])

    op.create_table(
        'educational_content',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('category', sa.String(), nullable=False),
        sa.Column('condition_tags', sa.JSON(), nullable=False),
        sa.Column('created_by', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_approved', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("type in ('article','video')", name='ck_educational_content_type'),
    )
    op.create_index('ix_educational_content_id', 'educational_content', ['id'])
    op.create_index('idx_educational_content_approved', 'educational_content', ['is_approved', 'created_at'])

    op.create_table(
        'progress_logs',
        sa.Column('id', BigIntPK, primary_key=True),
        sa.Column('client_id', sa.BigInteger(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('exercise_notes', sa.Text(), nullable=False),
        sa.Column('pain_level', sa.Integer(), nullable=False),
        sa.Column('mood_level', sa.Integer(), nullable=False),
        sa.Column('therapist_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('pain_level between 0 and 10', name='ck_progress_logs_pain'),
        sa.CheckConstraint('mood_level between 0 and 10', name='ck_progress_logs_mood'),
    )
    op.create_index('ix_progress_logs_id', 'progress_logs', ['id'])
    op.create_index('idx_progress_logs_client_date', 'progress_logs', ['client_id', 'date'])


def downgrade() -> None:
    """Downgrade schema."""
    for table in (
        'progress_logs',
        'educational_content',
        'messages',
        'appointments',
        'therapist_profiles',
        'users',
    ):
        op.drop_table(table)
