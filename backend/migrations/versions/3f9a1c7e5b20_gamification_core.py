"""users, incidents, journal, achievements, rate-limit log and idempotency keys

Revision ID: 3f9a1c7e5b20
Revises:
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = '3f9a1c7e5b20'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = inspect(bind)

    def _table_exists(table_name: str) -> bool:
        try:
            return insp.has_table(table_name)
        except Exception:
            return False

    if not _table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=120), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('phone', sa.String(length=32), nullable=True),
            sa.Column('password_hash', sa.String(length=255), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('journal_entries_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('incidents_reported_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_journal_entry_at', sa.DateTime(), nullable=True),
            sa.Column('last_incident_reported_at', sa.DateTime(), nullable=True),
            sa.Column('version_id', sa.Integer(), nullable=False, server_default='1'),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('users', schema=None) as batch_op:
            batch_op.create_index('ix_users_email', ['email'], unique=True)
            batch_op.create_index('ix_users_points', ['points'], unique=False)

    if not _table_exists('user_actions'):
        op.create_table(
            'user_actions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('action', sa.String(length=16), nullable=False),
            sa.Column('timestamp', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('user_actions', schema=None) as batch_op:
            batch_op.create_index('ix_user_actions_user_id', ['user_id'], unique=False)

    if not _table_exists('incidents'):
        op.create_table(
            'incidents',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=True),
            sa.Column('type', sa.String(length=32), nullable=False),
            sa.Column('description', sa.Text(), nullable=False),
            sa.Column('lat', sa.Float(), nullable=False),
            sa.Column('lng', sa.Float(), nullable=False),
            sa.Column('timestamp', sa.DateTime(), nullable=False),
            sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('incidents', schema=None) as batch_op:
            batch_op.create_index('ix_incidents_user_id', ['user_id'], unique=False)
            batch_op.create_index('ix_incidents_type', ['type'], unique=False)
            batch_op.create_index('ix_incidents_timestamp', ['timestamp'], unique=False)

    if not _table_exists('journal_entries'):
        op.create_table(
            'journal_entries',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('title', sa.String(length=200), nullable=False),
            sa.Column('content', sa.Text(), nullable=False),
            sa.Column('location_name', sa.String(length=200), nullable=True),
            sa.Column('location_lat', sa.Float(), nullable=True),
            sa.Column('location_lng', sa.Float(), nullable=True),
            sa.Column('tags', sa.JSON(), nullable=False),
            sa.Column('mood', sa.String(length=16), nullable=True),
            sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        with op.batch_alter_table('journal_entries', schema=None) as batch_op:
            batch_op.create_index('ix_journal_entries_user_id', ['user_id'], unique=False)
            batch_op.create_index('ix_journal_entries_created_at', ['created_at'], unique=False)

    if not _table_exists('achievements'):
        op.create_table(
            'achievements',
            sa.Column('id', sa.String(length=64), nullable=False),
            sa.Column('name', sa.String(length=120), nullable=False),
            sa.Column('description', sa.String(length=255), nullable=False),
            sa.Column('icon', sa.String(length=16), nullable=False),
            sa.Column('category', sa.String(length=32), nullable=False),
            sa.Column('requirements', sa.JSON(), nullable=False),
            sa.Column('points_reward', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )

    if not _table_exists('user_achievements'):
        op.create_table(
            'user_achievements',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('achievement_id', sa.String(length=64), nullable=False),
            sa.Column('unlocked_at', sa.DateTime(), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.ForeignKeyConstraint(['achievement_id'], ['achievements.id']),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'achievement_id', name='uq_user_achievement'),
        )
        with op.batch_alter_table('user_achievements', schema=None) as batch_op:
            batch_op.create_index('ix_user_achievements_user_id', ['user_id'], unique=False)
            batch_op.create_index('ix_user_achievements_achievement_id', ['achievement_id'], unique=False)

    if not _table_exists('idempotency_keys'):
        op.create_table(
            'idempotency_keys',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('key', sa.String(length=128), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=True),
            sa.Column('route', sa.String(length=128), nullable=False),
            sa.Column('request_hash', sa.String(length=64), nullable=False),
            sa.Column('response_json', sa.Text(), nullable=True),
            sa.Column('status_code', sa.Integer(), nullable=False, server_default='200'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('key', 'route', name='uq_idempotency_key_route'),
        )


def downgrade():
    op.drop_table('idempotency_keys')
    op.drop_table('user_achievements')
    op.drop_table('achievements')
    op.drop_table('journal_entries')
    op.drop_table('incidents')
    op.drop_table('user_actions')
    op.drop_table('users')
