"""Initial schema - users, chat rooms, chat messages, appointments, notifications

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-01 00:00:00.000000

Creates the S-Net triage schema:
- users: Role directory for staff notifications
- chat_rooms: Conversation records with triage fields
- chat_messages: Append-only conversation messages
- appointment_requests: Booking submissions with pre-screening urgency
- notifications: Per-recipient staff notifications
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Create users table
    op.create_table(
        'users',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('full_name', sa.String(255), nullable=False, server_default=''),
        sa.Column('role', sa.String(20), nullable=False, server_default='student'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            "role IN ('student', 'counselor', 'admin')",
            name='ck_users_role',
        ),
    )
    op.create_index('ix_users_role', 'users', ['role'])

    # Create chat_rooms table
    op.create_table(
        'chat_rooms',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('ai_triage_complete', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('urgency_level', sa.SmallInteger(), nullable=True),
        sa.Column('ai_triage_summary', sa.Text(), nullable=True),
        sa.Column('counselor_first_reply_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'urgency_level IS NULL OR urgency_level BETWEEN 0 AND 3',
            name='ck_chat_rooms_urgency_range',
        ),
    )
    op.create_index('ix_chat_rooms_student_id', 'chat_rooms', ['student_id'])
    op.create_index('ix_chat_rooms_urgency_level', 'chat_rooms', ['urgency_level'])

    # Create chat_messages table
    op.create_table(
        'chat_messages',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('chat_room_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('sender_type', sa.String(20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_system', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('metadata', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['chat_room_id'], ['chat_rooms.id'], ondelete='CASCADE'),
    )
    op.create_index(
        'ix_chat_messages_room_created',
        'chat_messages',
        ['chat_room_id', 'created_at'],
    )

    # Create appointment_requests table
    op.create_table(
        'appointment_requests',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('student_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('full_name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('class_name', sa.String(50), nullable=True),
        sa.Column('dorm_room', sa.String(50), nullable=True),
        sa.Column('time_slot', sa.String(255), nullable=False),
        sa.Column('time_slot_display', sa.String(255), nullable=False),
        sa.Column('issues', sa.Text(), nullable=False),
        sa.Column('urgency_level', sa.SmallInteger(), nullable=False, server_default='0'),
        sa.Column('ai_analysis', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint(
            'urgency_level BETWEEN 0 AND 3',
            name='ck_appointment_requests_urgency_range',
        ),
    )
    op.create_index('ix_appointment_requests_urgency_level', 'appointment_requests', ['urgency_level'])
    op.create_index('ix_appointment_requests_status', 'appointment_requests', ['status'])

    # Create notifications table
    op.create_table(
        'notifications',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('type', sa.String(50), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('link', sa.String(255), nullable=True),
        sa.Column('data', postgresql.JSONB(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade() -> None:
    op.drop_table('notifications')
    op.drop_table('appointment_requests')
    op.drop_table('chat_messages')
    op.drop_table('chat_rooms')
    op.drop_table('users')
