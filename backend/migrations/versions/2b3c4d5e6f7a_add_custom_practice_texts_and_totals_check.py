"""add custom_practice_texts and character_performance totals check

Revision ID: 2b3c4d5e6f7a
Revises: 1a2b3c4d5e6f
Create Date: 2026-10-19 12:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '2b3c4d5e6f7a'
down_revision = '1a2b3c4d5e6f'
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)

    checks = {c['name'] for c in insp.get_check_constraints('character_performance')}
    if 'character_performance_totals_check' not in checks:
        with op.batch_alter_table('character_performance') as batch_op:
            batch_op.create_check_constraint(
                'character_performance_totals_check',
                'total_typed = correct_typed + incorrect_typed',
            )

    if 'custom_practice_texts' not in set(insp.get_table_names()):
        op.create_table(
            'custom_practice_texts',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
            sa.Column('target_character', sa.String(length=8), nullable=False),
            sa.Column('practice_text', sa.Text(), nullable=False),
            sa.Column('difficulty_level', sa.Integer(), nullable=False, server_default='1'),
            sa.Column('word_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('character_frequency', sa.Float(), nullable=False, server_default='0'),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        )
        op.create_index('ix_custom_practice_texts_user_id', 'custom_practice_texts', ['user_id'])
        op.create_index('ix_custom_practice_texts_created_at', 'custom_practice_texts', ['created_at'])


def downgrade():
    op.drop_table('custom_practice_texts')
    with op.batch_alter_table('character_performance') as batch_op:
        batch_op.drop_constraint('character_performance_totals_check', type_='check')
