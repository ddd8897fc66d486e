"""initial trivia schema: user, question, battle, quiz_attempt

Revision ID: 4a7c1e9d2b10
Revises:
Create Date: 2026-10-19 12:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4a7c1e9d2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'user',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=256), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('total_answered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('correct_answered', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('wins', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('losses', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('recent_answers', sa.JSON(), nullable=False),
        sa.Column('preferred_difficulty', sa.Integer(), nullable=False, server_default='2'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_user_username', 'user', ['username'], unique=True)
    op.create_index('ix_user_email', 'user', ['email'], unique=True)

    op.create_table(
        'question',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('prompt', sa.Text(), nullable=False),
        sa.Column('choices', sa.JSON(), nullable=False),
        sa.Column('correct_index', sa.Integer(), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('difficulty', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_question_category', 'question', ['category'])
    op.create_index('ix_question_difficulty', 'question', ['difficulty'])

    op.create_table(
        'battle',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('player1_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('player2_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('category', sa.String(length=64), nullable=False),
        sa.Column('difficulty', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='pending'),
        sa.Column('question_ids', sa.JSON(), nullable=False),
        sa.Column('p1_answers', sa.JSON(), nullable=True),
        sa.Column('p2_answers', sa.JSON(), nullable=True),
        sa.Column('p1_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('p2_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('winner_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_battle_player1_id', 'battle', ['player1_id'])
    op.create_index('ix_battle_player2_id', 'battle', ['player2_id'])
    op.create_index('ix_battle_status', 'battle', ['status'])

    op.create_table(
        'quiz_attempt',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('user.id'), nullable=False),
        sa.Column('mode', sa.String(length=16), nullable=False, server_default='solo'),
        sa.Column('question_ids', sa.JSON(), nullable=False),
        sa.Column('answers', sa.JSON(), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('accuracy', sa.Float(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_quiz_attempt_user_id', 'quiz_attempt', ['user_id'])
    op.create_index('ix_quiz_attempt_created_at', 'quiz_attempt', ['created_at'])


def downgrade():
    op.drop_index('ix_quiz_attempt_created_at', table_name='quiz_attempt')
    op.drop_index('ix_quiz_attempt_user_id', table_name='quiz_attempt')
    op.drop_table('quiz_attempt')
    op.drop_index('ix_battle_status', table_name='battle')
    op.drop_index('ix_battle_player2_id', table_name='battle')
    op.drop_index('ix_battle_player1_id', table_name='battle')
    op.drop_table('battle')
    op.drop_index('ix_question_difficulty', table_name='question')
    op.drop_index('ix_question_category', table_name='question')
    op.drop_table('question')
    op.drop_index('ix_user_email', table_name='user')
    op.drop_index('ix_user_username', table_name='user')
    op.drop_table('user')
