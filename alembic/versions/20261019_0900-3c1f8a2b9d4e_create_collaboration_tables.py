"""create_collaboration_tables

Revision ID: 3c1f8a2b9d4e
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c1f8a2b9d4e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'teams',
        sa.Column('id', sa.String(length=32), nullable=False, comment='团队ID'),
        sa.Column('name', sa.String(length=255), nullable=False, comment='团队名称'),
        sa.Column('workspace_id', sa.String(length=64), nullable=False, server_default='', comment='工作区ID'),
        sa.Column('created_by', sa.String(length=64), nullable=False, comment='创建人'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='更新时间'),
        sa.PrimaryKeyConstraint('id', name='pk_teams'),
    )

    op.create_table(
        'team_members',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('team_id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('role_flags', sa.Integer(), nullable=False, comment='角色位标记：1 Viewer / 2 Editor / 4 Admin / 8 Owner'),
        sa.Column('invited_by', sa.String(length=64), nullable=True),
        sa.Column('joined_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name='fk_team_members_team_id_teams', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_team_members'),
        sa.UniqueConstraint('team_id', 'user_id', name='uq_team_members_team_user'),
    )
    op.create_index('ix_team_members_user_id', 'team_members', ['user_id'], unique=False)
    op.create_index('ix_team_members_team_joined', 'team_members', ['team_id', 'joined_at'], unique=False)

    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=32), nullable=False, comment='项目ID'),
        sa.Column('team_id', sa.String(length=32), nullable=True, comment='所属团队，个人项目为空'),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('is_archived', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['team_id'], ['teams.id'], name='fk_projects_team_id_teams', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_projects'),
    )
    op.create_index('ix_projects_team_id', 'projects', ['team_id'], unique=False)

    op.create_table(
        'project_members',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('project_id', sa.String(length=32), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('role_flags', sa.Integer(), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_project_members_project_id_projects', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_project_members'),
        sa.UniqueConstraint('project_id', 'user_id', name='uq_project_members_project_user'),
    )
    op.create_index('ix_project_members_project_id', 'project_members', ['project_id'], unique=False)
    op.create_index('ix_project_members_user_id', 'project_members', ['user_id'], unique=False)

    op.create_table(
        'chat_messages',
        sa.Column('id', sa.String(length=32), nullable=False, comment='服务端分配的消息ID'),
        sa.Column('team_id', sa.String(length=32), nullable=False, comment='团队ID（房间键）'),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('user_name', sa.String(length=255), nullable=False, comment='发送时的显示名（冗余存储，不回查）'),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('reply_to', sa.String(length=32), nullable=True),
        sa.Column('edited_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id', name='pk_chat_messages'),
    )
    op.create_index('ix_chat_messages_team_created', 'chat_messages', ['team_id', 'created_at'], unique=False)

    op.create_table(
        'whiteboards',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('project_id', sa.String(length=32), nullable=False, comment='每个项目一份白板'),
        sa.Column('data', sa.Text(), nullable=False, comment='序列化后的白板文档（不透明）'),
        sa.Column('created_by', sa.String(length=64), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], name='fk_whiteboards_project_id_projects', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_whiteboards'),
        sa.UniqueConstraint('project_id', name='uq_whiteboards_project_id'),
    )


def downgrade() -> None:
    op.drop_table('whiteboards')
    op.drop_index('ix_chat_messages_team_created', table_name='chat_messages')
    op.drop_table('chat_messages')
    op.drop_index('ix_project_members_user_id', table_name='project_members')
    op.drop_index('ix_project_members_project_id', table_name='project_members')
    op.drop_table('project_members')
    op.drop_index('ix_projects_team_id', table_name='projects')
    op.drop_table('projects')
    op.drop_index('ix_team_members_team_joined', table_name='team_members')
    op.drop_index('ix_team_members_user_id', table_name='team_members')
    op.drop_table('team_members')
    op.drop_table('teams')
