"""registration_core

Revision ID: 001_registration_core
Revises: 
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001_registration_core'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        'events',
        *_timestamps(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('start_date_time', sa.DateTime(), nullable=False),
        sa.Column('end_date_time', sa.DateTime(), nullable=False),
        sa.Column('timezone', sa.String(length=64), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('venue_name', sa.String(length=255), nullable=True),
        sa.Column('venue_address', sa.Text(), nullable=True),
        sa.Column('registration_open_at', sa.DateTime(), nullable=True),
        sa.Column('registration_close_at', sa.DateTime(), nullable=True),
        sa.Column('capacity', sa.Integer(), nullable=True),
        sa.Column('zoho_lead_source', sa.String(length=255), nullable=True),
        sa.Column('zoho_campaign_id', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_events_id', 'events', ['id'])
    op.create_index('ix_events_slug', 'events', ['slug'], unique=True)

    op.create_table(
        'registrants',
        *_timestamps(),
        sa.Column('full_name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=False),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('nationality', sa.String(length=100), nullable=True),
        sa.Column('level_of_study', sa.String(length=100), nullable=True),
        sa.Column('interested_major', sa.String(length=255), nullable=True),
        sa.Column('consent_accepted', sa.Boolean(), nullable=False),
        sa.Column('consent_timestamp', sa.DateTime(), nullable=True),
        sa.Column('utm_source', sa.String(length=255), nullable=True),
        sa.Column('utm_medium', sa.String(length=255), nullable=True),
        sa.Column('utm_campaign', sa.String(length=255), nullable=True),
        sa.Column('gender', sa.String(length=20), nullable=True),
        sa.Column('standardized_major', sa.String(length=255), nullable=True),
        sa.Column('major_category', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_registrants_id', 'registrants', ['id'])
    op.create_index('ix_registrants_email', 'registrants', ['email'], unique=True)
    op.create_index('ix_registrants_phone', 'registrants', ['phone'])

    op.create_table(
        'registrations',
        *_timestamps(),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('registrant_id', sa.Integer(), sa.ForeignKey('registrants.id'), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('source', sa.String(length=50), nullable=True),
        sa.UniqueConstraint('event_id', 'registrant_id', name='uq_registration_event_registrant'),
    )
    op.create_index('ix_registrations_id', 'registrations', ['id'])
    op.create_index('ix_registrations_event_id', 'registrations', ['event_id'])
    op.create_index('ix_registrations_registrant_id', 'registrations', ['registrant_id'])
    op.create_index('ix_registrations_token', 'registrations', ['token'], unique=True)

    op.create_table(
        'check_ins',
        *_timestamps(),
        sa.Column('registration_id', sa.Integer(), sa.ForeignKey('registrations.id'), nullable=False),
        sa.Column('checked_in_at', sa.DateTime(), nullable=False),
        sa.Column('method', sa.String(length=20), nullable=False),
        sa.Column('operator_id', sa.String(length=255), nullable=False),
        sa.UniqueConstraint('registration_id'),
    )
    op.create_index('ix_check_ins_id', 'check_ins', ['id'])

    op.create_table(
        'message_logs',
        *_timestamps(),
        sa.Column('event_id', sa.Integer(), sa.ForeignKey('events.id'), nullable=False),
        sa.Column('registration_id', sa.Integer(), sa.ForeignKey('registrations.id'), nullable=False),
        sa.Column('channel', sa.String(length=20), nullable=False),
        sa.Column('template_name', sa.String(length=100), nullable=False),
        sa.Column('provider_message_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('error_text', sa.Text(), nullable=True),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_message_logs_id', 'message_logs', ['id'])
    op.create_index('ix_message_logs_registration_id', 'message_logs', ['registration_id'])


def downgrade() -> None:
    op.drop_table('message_logs')
    op.drop_table('check_ins')
    op.drop_table('registrations')
    op.drop_table('registrants')
    op.drop_table('events')
