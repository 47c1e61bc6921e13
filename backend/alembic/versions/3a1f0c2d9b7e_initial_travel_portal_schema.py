"""initial_travel_portal_schema

Revision ID: 3a1f0c2d9b7e
Revises:
Create Date: 2026-10-19 09:00:00.000000

Users/roles/permissions, the five request tables with their append-only
approval-step tables, visa documents, notifications and the audit log.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '3a1f0c2d9b7e'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

REQUEST_TABLES = (
    ('travel_requests', 'trf_approval_steps'),
    ('expense_claims', 'claims_approval_steps'),
    ('visa_applications', 'visa_approval_steps'),
    ('transport_requests', 'transport_approval_steps'),
    ('accommodation_requests', 'accommodation_approval_steps'),
)


def _uuid_pk():
    return sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def _request_columns():
    return [
        sa.Column('id', sa.String(40), nullable=False),
        sa.Column('requestor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('requestor_name', sa.String(255), nullable=False),
        sa.Column('staff_id', sa.String(50), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('status', sa.String(60), nullable=False),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processing_details', sa.JSON(), nullable=True),
        sa.Column('processing_started_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('processing_completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    ]


def upgrade() -> None:
    # ─── Identity ───
    op.create_table(
        'permissions',
        _uuid_pk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_permissions_name', 'permissions', ['name'], unique=True)

    op.create_table(
        'roles',
        _uuid_pk(),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_roles_name', 'roles', ['name'], unique=True)

    op.create_table(
        'role_permissions',
        sa.Column('role_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('roles.id', ondelete='CASCADE'), nullable=False),
        sa.Column('permission_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('permissions.id', ondelete='CASCADE'), nullable=False),
        sa.PrimaryKeyConstraint('role_id', 'permission_id'),
    )

    op.create_table(
        'users',
        _uuid_pk(),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('staff_id', sa.String(50), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('roles.id', ondelete='SET NULL'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)
    op.create_index('ix_users_staff_id', 'users', ['staff_id'])

    # ─── Requests ───
    op.create_table(
        'travel_requests',
        *_request_columns(),
        sa.Column('travel_type', sa.String(50), nullable=False),
        sa.Column('purpose', sa.Text(), nullable=False),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('cost_center', sa.String(50), nullable=True),
        sa.Column('estimated_cost', sa.Numeric(18, 2), nullable=True),
        sa.Column('itinerary', sa.JSON(), nullable=False),
        sa.Column('external_party_name', sa.String(255), nullable=True),
        sa.Column('additional_comments', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'expense_claims',
        *_request_columns(),
        sa.Column('trf_id', sa.String(40), sa.ForeignKey('travel_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('document_type', sa.String(50), nullable=True),
        sa.Column('claim_for_month_of', sa.Date(), nullable=False),
        sa.Column('purpose_of_claim', sa.Text(), nullable=False),
        sa.Column('cost_center', sa.String(50), nullable=True),
        sa.Column('bank_name', sa.String(100), nullable=True),
        sa.Column('account_number', sa.String(50), nullable=True),
        sa.Column('is_medical_claim', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('total_amount', sa.Numeric(18, 2), nullable=False),
        sa.Column('less_advance_taken', sa.Numeric(18, 2), nullable=True),
        sa.Column('balance_claim_repayment', sa.Numeric(18, 2), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'expense_claim_items',
        _uuid_pk(),
        sa.Column('claim_id', sa.String(40), sa.ForeignKey('expense_claims.id', ondelete='CASCADE'), nullable=False),
        sa.Column('item_date', sa.Date(), nullable=True),
        sa.Column('details', sa.Text(), nullable=False, server_default=''),
        sa.Column('official_mileage_km', sa.Numeric(10, 2), nullable=True),
        sa.Column('transport', sa.Numeric(18, 2), nullable=True),
        sa.Column('hotel_accommodation_allowance', sa.Numeric(18, 2), nullable=True),
        sa.Column('out_station_allowance_meal', sa.Numeric(18, 2), nullable=True),
        sa.Column('miscellaneous_allowance', sa.Numeric(18, 2), nullable=True),
        sa.Column('other_expenses', sa.Numeric(18, 2), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_expense_claim_items_claim_id', 'expense_claim_items', ['claim_id'])

    op.create_table(
        'visa_applications',
        *_request_columns(),
        sa.Column('trf_id', sa.String(40), sa.ForeignKey('travel_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('destination', sa.String(100), nullable=False),
        sa.Column('visa_type', sa.String(50), nullable=False),
        sa.Column('travel_purpose', sa.Text(), nullable=False),
        sa.Column('passport_number', sa.String(50), nullable=True),
        sa.Column('passport_expiry_date', sa.Date(), nullable=True),
        sa.Column('trip_start_date', sa.Date(), nullable=True),
        sa.Column('trip_end_date', sa.Date(), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_table(
        'visa_documents',
        _uuid_pk(),
        sa.Column('visa_id', sa.String(40), sa.ForeignKey('visa_applications.id', ondelete='CASCADE'), nullable=False),
        sa.Column('document_type', sa.String(50), nullable=False),
        sa.Column('file_name', sa.String(255), nullable=False),
        sa.Column('file_path', sa.String(500), nullable=False),
        sa.Column('content_type', sa.String(100), nullable=False),
        sa.Column('size_bytes', sa.BigInteger(), nullable=False),
        sa.Column('uploaded_by', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_visa_documents_visa_id', 'visa_documents', ['visa_id'])

    op.create_table(
        'transport_requests',
        *_request_columns(),
        sa.Column('tsr_reference', sa.String(40), sa.ForeignKey('travel_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('purpose', sa.Text(), nullable=False),
        sa.Column('position', sa.String(100), nullable=True),
        sa.Column('cost_center', sa.String(50), nullable=True),
        sa.Column('tel_email', sa.String(255), nullable=True),
        sa.Column('transport_details', sa.JSON(), nullable=False),
        sa.Column('additional_comments', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'accommodation_requests',
        *_request_columns(),
        sa.Column('trf_id', sa.String(40), sa.ForeignKey('travel_requests.id', ondelete='SET NULL'), nullable=True),
        sa.Column('location', sa.String(100), nullable=False),
        sa.Column('check_in_date', sa.Date(), nullable=False),
        sa.Column('check_out_date', sa.Date(), nullable=False),
        sa.Column('number_of_guests', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('accommodation_type', sa.String(50), nullable=True),
        sa.Column('gender', sa.String(20), nullable=True),
        sa.Column('special_requests', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )

    for request_table, step_table in REQUEST_TABLES:
        op.create_index(f'ix_{request_table}_status', request_table, ['status'])
        op.create_index(f'ix_{request_table}_requestor_id', request_table, ['requestor_id'])
        op.create_table(
            step_table,
            _uuid_pk(),
            sa.Column('request_id', sa.String(40), sa.ForeignKey(f'{request_table}.id', ondelete='CASCADE'), nullable=False),
            sa.Column('role', sa.String(100), nullable=False),
            sa.Column('actor_name', sa.String(255), nullable=False),
            sa.Column('actor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
            sa.Column('status', sa.String(60), nullable=False),
            sa.Column('comments', sa.Text(), nullable=True),
            *_timestamps(),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(f'ix_{step_table}_request_id', step_table, ['request_id'])

    # ─── Notifications / audit ───
    op.create_table(
        'notifications',
        _uuid_pk(),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('category', sa.String(30), nullable=False, server_default='status_update'),
        sa.Column('entity_type', sa.String(30), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=False),
        sa.Column('is_read', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_entity_type', 'notifications', ['entity_type'])
    op.create_index('ix_notifications_entity_id', 'notifications', ['entity_id'])

    op.create_table(
        'audit_logs',
        _uuid_pk(),
        sa.Column('actor_id', postgresql.UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('actor_email', sa.String(255), nullable=True),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(100), nullable=False),
        sa.Column('entity_id', sa.String(64), nullable=True),
        sa.Column('before_state', sa.Text(), nullable=True),
        sa.Column('after_state', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(50), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_type', 'audit_logs', ['entity_type'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])

    # Audit rows are append-only for the app role.
    op.execute("REVOKE UPDATE, DELETE ON audit_logs FROM PUBLIC;")
    op.execute("GRANT SELECT, INSERT ON audit_logs TO PUBLIC;")


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('notifications')
    for _, step_table in reversed(REQUEST_TABLES):
        op.drop_table(step_table)
    op.drop_table('accommodation_requests')
    op.drop_table('transport_requests')
    op.drop_table('visa_documents')
    op.drop_table('visa_applications')
    op.drop_table('expense_claim_items')
    op.drop_table('expense_claims')
    op.drop_table('travel_requests')
    op.drop_table('users')
    op.drop_table('role_permissions')
    op.drop_table('roles')
    op.drop_table('permissions')
