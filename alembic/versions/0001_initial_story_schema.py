"""initial_story_schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

스토리 서비스 초기 테이블 생성: users, refresh_tokens, stories, illustrations, audios.
Create the initial tables: users, refresh_tokens, stories, illustrations, audios.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users — 로그인 계정 (email is the login key)
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # refresh_tokens — 리프레시 토큰 화이트리스트 (hash only, soft-invalidated)
    op.create_table(
        'refresh_tokens',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('hashed_token', sa.String(128), nullable=False, unique=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('is_valid', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_refresh_tokens_user_id', 'refresh_tokens', ['user_id'])

    # stories — 스토리 본문과 메타데이터
    op.create_table(
        'stories',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('age_range', sa.String(50), nullable=False),
        sa.Column('author', sa.String(255), nullable=True),
        sa.Column('characters', sa.Text(), nullable=True),
        sa.Column('setting', sa.Text(), nullable=True),
        sa.Column('user_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_stories_user_id', 'stories', ['user_id'])

    # illustrations — 표지/장면 일러스트 (cover | illustration)
    op.create_table(
        'illustrations',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('url', sa.String(1024), nullable=False),
        sa.Column('s3_key', sa.String(512), nullable=False),
        sa.Column('type', sa.String(20), server_default='illustration', nullable=False),
        sa.Column('story_id', UUID(as_uuid=True), sa.ForeignKey('stories.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_illustrations_story_id', 'illustrations', ['story_id'])

    # audios — 스토리당 하나의 낭독 오디오 (one per story)
    op.create_table(
        'audios',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('url', sa.String(1024), nullable=False),
        sa.Column('s3_key', sa.String(512), nullable=False),
        sa.Column('story_id', UUID(as_uuid=True), sa.ForeignKey('stories.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table('audios')
    op.drop_index('ix_illustrations_story_id', table_name='illustrations')
    op.drop_table('illustrations')
    op.drop_index('ix_stories_user_id', table_name='stories')
    op.drop_table('stories')
    op.drop_index('ix_refresh_tokens_user_id', table_name='refresh_tokens')
    op.drop_table('refresh_tokens')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
