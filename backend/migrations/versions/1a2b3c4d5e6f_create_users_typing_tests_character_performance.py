"""create users, typing_tests and character_performance

Revision ID: 1a2b3c4d5e6f
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '1a2b3c4d5e6f'
down_revision = None
branch_labels = None
depends_on = None

TEST_MODES = ('time', 'words', 'quote', 'custom', 'punctuation', 'numbers', 'zen')


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    existing_tables = set(insp.get_table_names())

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('firebase_uid', sa.String(length=128), nullable=False),
            sa.Column('email', sa.String(length=255), nullable=False),
            sa.Column('display_name', sa.String(length=128), nullable=True),
            sa.Column('photo_url', sa.String(length=512), nullable=True),
            sa.Column('email_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.Column('last_login_at', sa.DateTime(timezone=True), nullable=True),
        )
        op.create_index('ix_users_firebase_uid', 'users', ['firebase_uid'], unique=True)

    if 'typing_tests' not in existing_tables:
        modes = ', '.join(f"'{m}'" for m in TEST_MODES)
        op.create_table(
            'typing_tests',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('test_mode', sa.String(length=16), nullable=False, server_default='time'),
            sa.Column('time_limit', sa.Integer(), nullable=True),
            sa.Column('word_limit', sa.Integer(), nullable=True),
            sa.Column('language', sa.String(length=32), nullable=False, server_default='english'),
            sa.Column('text_content', sa.Text(), nullable=True),
            sa.Column('wpm', sa.Float(), nullable=False),
            sa.Column('raw_wpm', sa.Float(), nullable=True),
            sa.Column('accuracy', sa.Float(), nullable=False, server_default='0'),
            sa.Column('consistency', sa.Float(), nullable=True),
            sa.Column('total_characters', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('correct_characters', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('incorrect_characters', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_words', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('correct_words', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('incorrect_words', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('actual_duration', sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
            sa.CheckConstraint(f'test_mode IN ({modes})', name='typing_tests_test_mode_check'),
            sa.CheckConstraint(
                'total_characters = correct_characters + incorrect_characters',
                name='typing_tests_character_totals_check',
            ),
        )
        op.create_index('ix_typing_tests_user_id', 'typing_tests', ['user_id'])
        op.create_index('ix_typing_tests_test_mode', 'typing_tests', ['test_mode'])
        op.create_index('ix_typing_tests_created_at', 'typing_tests', ['created_at'])
        # Leaderboard scans: one board, best first
        op.create_index(
            'ix_typing_tests_board', 'typing_tests',
            ['test_mode', 'time_limit', 'wpm', 'accuracy', 'created_at'],
        )

    if 'character_performance' not in existing_tables:
        op.create_table(
            'character_performance',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('test_id', sa.Integer(), sa.ForeignKey('typing_tests.id', ondelete='CASCADE'), nullable=False),
            sa.Column('character', sa.String(length=8), nullable=False),
            sa.Column('total_typed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('correct_typed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('incorrect_typed', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('average_speed', sa.Float(), nullable=False, server_default='0'),
            sa.Column('error_rate', sa.Float(), nullable=False, server_default='0'),
            sa.Column('difficulty_score', sa.Float(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index('ix_character_performance_user_id', 'character_performance', ['user_id'])
        op.create_index('ix_character_performance_test_id', 'character_performance', ['test_id'])
        op.create_index('ix_character_performance_character', 'character_performance', ['character'])


def downgrade():
    op.drop_table('character_performance')
    op.drop_table('typing_tests')
    op.drop_table('users')
