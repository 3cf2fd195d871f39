"""Initial attendance schema: sites, attendance records, audit logs

Revision ID: 001_initial_attendance
Revises:
Create Date: 2026-03-01

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_attendance'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    existing = set(sa.inspect(op.get_bind()).get_table_names())

    # Use CURRENT_TIMESTAMP for defaults so it works on SQLite and Postgres
    if 'sites' not in existing:
        op.create_table(
            'sites',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('name', sa.String(length=100), nullable=False),
            sa.Column('latitude', sa.Float(), nullable=False),
            sa.Column('longitude', sa.Float(), nullable=False),
            sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('name'),
        )
        op.create_index(op.f('ix_sites_id'), 'sites', ['id'], unique=False)

    if 'attendance_records' not in existing:
        op.create_table(
            'attendance_records',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('employee_id', sa.Integer(), nullable=False),
            sa.Column('site_id', sa.Integer(), nullable=False),
            sa.Column('work_date', sa.Date(), nullable=False),
            sa.Column('checked_in_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('checked_out_at', sa.DateTime(timezone=True), nullable=True),
            sa.Column('latitude', sa.Float(), nullable=False),
            sa.Column('longitude', sa.Float(), nullable=False),
            sa.Column('accuracy', sa.Float(), nullable=False),
            sa.Column('status', sa.Enum('FULL_DAY', 'HALF_DAY', name='attendancestatus'), nullable=False),
            sa.Column('late_minutes', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('overtime_minutes', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('is_open', sa.Boolean(), nullable=False, server_default=sa.true()),
            # 1 while open, NULL once closed; see uq_attendance_open_per_day
            sa.Column('open_slot', sa.Integer(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
            sa.ForeignKeyConstraint(['site_id'], ['sites.id'], ),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('employee_id', 'work_date', 'open_slot', name='uq_attendance_open_per_day'),
        )
        op.create_index(op.f('ix_attendance_records_id'), 'attendance_records', ['id'], unique=False)
        op.create_index(op.f('ix_attendance_records_employee_id'), 'attendance_records', ['employee_id'], unique=False)
        op.create_index(op.f('ix_attendance_records_site_id'), 'attendance_records', ['site_id'], unique=False)
        op.create_index(op.f('ix_attendance_records_work_date'), 'attendance_records', ['work_date'], unique=False)

    if 'audit_logs' not in existing:
        op.create_table(
            'audit_logs',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('actor_id', sa.Integer(), nullable=False),
            sa.Column('action', sa.String(), nullable=False),
            sa.Column('entity_type', sa.String(), nullable=False),
            sa.Column('entity_id', sa.Integer(), nullable=True),
            sa.Column('meta_json', sa.JSON(), nullable=True),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(op.f('ix_audit_logs_id'), 'audit_logs', ['id'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_audit_logs_id'), table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index(op.f('ix_attendance_records_work_date'), table_name='attendance_records')
    op.drop_index(op.f('ix_attendance_records_site_id'), table_name='attendance_records')
    op.drop_index(op.f('ix_attendance_records_employee_id'), table_name='attendance_records')
    op.drop_index(op.f('ix_attendance_records_id'), table_name='attendance_records')
    op.drop_table('attendance_records')
    sa.Enum(name='attendancestatus').drop(op.get_bind(), checkfirst=True)
    op.drop_index(op.f('ix_sites_id'), table_name='sites')
    op.drop_table('sites')
