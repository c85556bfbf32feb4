"""create scheduling tables

Revision ID: 5b2e91c4d7a0
Revises:
Create Date: 2026-10-19 09:12:40.518233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '5b2e91c4d7a0'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

service_category = sa.Enum('hair_cut', 'beard_shaping', 'other', name='service_category')
appointment_status = sa.Enum('scheduled', 'confirmed', 'canceled', 'completed', 'in_progress', name='appointment_status')
attendance_status = sa.Enum('pending', 'attended', 'no_show', 'canceled', name='attendance_status')
sync_status = sa.Enum('pending', 'synced', 'failed', 'local_only', 'remote_missing', name='sync_status')
messaging_provider = sa.Enum('whatsapp_cloud', 'twilio', name='messaging_provider')


def upgrade() -> None:
    """Upgrade schema."""

    # 1. appointments
    op.create_table(
        'appointments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('external_event_id', sa.String(255), nullable=True),
        sa.Column('client_name', sa.String(255), nullable=True),
        sa.Column('client_phone', sa.String(32), nullable=True),
        sa.Column('service', sa.String(255), nullable=False),
        sa.Column('service_category', service_category, nullable=False),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('status', appointment_status, nullable=False),
        sa.Column('attendance_status', attendance_status, nullable=False),
        sa.Column('sync_status', sync_status, nullable=False),
        sa.Column('last_sync_error', sa.Text(), nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('remote_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reminder_sent_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.CheckConstraint('duration_minutes >= 1', name='ck_appointments_duration_positive'),
    )
    op.create_index(op.f('ix_appointments_external_event_id'), 'appointments', ['external_event_id'], unique=True)
    op.create_index(op.f('ix_appointments_start_time'), 'appointments', ['start_time'])

    # 2. reminder_logs
    op.create_table(
        'reminder_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('appointment_id', sa.Integer(), sa.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False),
        sa.Column('window_label', sa.String(50), nullable=False),
        sa.Column('scheduled_for', sa.DateTime(timezone=True), nullable=False),
        sa.Column('recipient_phone', sa.String(32), nullable=False),
        sa.Column('message_content', sa.Text(), nullable=False),
        sa.Column('provider', sa.String(50), nullable=False),
        sa.Column('provider_message_id', sa.String(255), nullable=True),
        sa.Column('provider_status', sa.String(50), nullable=True),
        sa.Column('provider_payload', sa.JSON(), nullable=True),
        sa.Column('sent_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint(
            'appointment_id', 'window_label', 'scheduled_for',
            name='uq_reminder_logs_appointment_window_start',
        ),
    )
    op.create_index(op.f('ix_reminder_logs_appointment_id'), 'reminder_logs', ['appointment_id'])

    # 3. message_templates
    op.create_table(
        'message_templates',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('provider', messaging_provider, nullable=False),
        sa.Column('token_encrypted', sa.LargeBinary(), nullable=True),
        sa.Column('number_id', sa.String(64), nullable=True),
        sa.Column('account_sid', sa.String(64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )

    # 4. task_logs
    op.create_table(
        'task_logs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('task_name', sa.String(100), nullable=False),
        sa.Column('task_id', sa.String(200), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('result', sa.JSON(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('execution_time_ms', sa.Integer(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()')),
    )
    op.create_index('idx_task_logs_name_started', 'task_logs', ['task_name', 'started_at'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('idx_task_logs_name_started', table_name='task_logs')
    op.drop_table('task_logs')
    op.drop_table('message_templates')
    op.drop_index(op.f('ix_reminder_logs_appointment_id'), table_name='reminder_logs')
    op.drop_table('reminder_logs')
    op.drop_index(op.f('ix_appointments_start_time'), table_name='appointments')
    op.drop_index(op.f('ix_appointments_external_event_id'), table_name='appointments')
    op.drop_table('appointments')

    bind = op.get_bind()
    for enum_type in (messaging_provider, sync_status, attendance_status, appointment_status, service_category):
        enum_type.drop(bind, checkfirst=True)
