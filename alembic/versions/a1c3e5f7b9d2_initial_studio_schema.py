"""Initial studio schema: accounts, studios, classes, messaging, channels, invoices

Revision ID: a1c3e5f7b9d2
Revises:
Create Date: 2025-03-02 10:15:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'a1c3e5f7b9d2'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create every table of the studio dashboard."""
    # Accounts and roles
    op.create_table(
        'users',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'owners',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'studios',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('owner_id', sa.String(), sa.ForeignKey('owners.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('address', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    for role_table in ('teachers', 'parents'):
        op.create_table(
            role_table,
            sa.Column('id', sa.String(), primary_key=True),
            sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=True, unique=True),
            sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
            sa.Column('name', sa.String(), nullable=False),
            sa.Column('email', sa.String(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        )

    op.create_table(
        'locations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('address', sa.String(), nullable=True),
    )

    op.create_table(
        'students',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('parent_id', sa.String(), sa.ForeignKey('parents.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('name', sa.String(), nullable=False, index=True),
        sa.Column('date_of_birth', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Schedule
    op.create_table(
        'classes',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False, index=True),
        sa.Column('teacher_id', sa.String(), sa.ForeignKey('teachers.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('location_id', sa.String(), sa.ForeignKey('locations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_recurring', sa.Boolean(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('materialized_through', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'class_instances',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('date', sa.Date(), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('teacher_id', sa.String(), sa.ForeignKey('teachers.id', ondelete='SET NULL'), nullable=True),
        sa.Column('location_id', sa.String(), sa.ForeignKey('locations.id', ondelete='SET NULL'), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.UniqueConstraint('class_id', 'date', name='uix_class_instance_date'),
    )

    op.create_table(
        'class_students',
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id', ondelete='CASCADE'), primary_key=True),
    )

    op.create_table(
        'instance_enrollments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('class_instance_id', sa.String(), sa.ForeignKey('class_instances.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('class_instance_id', 'student_id', name='uix_instance_student'),
    )

    op.create_table(
        'attendance_records',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('instance_enrollment_id', sa.String(), sa.ForeignKey('instance_enrollments.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # Messaging
    op.create_table(
        'conversations',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('created_by', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('last_message', sa.String(), nullable=True),
        sa.Column('last_message_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'conversation_participants',
        sa.Column('conversation_id', sa.String(), sa.ForeignKey('conversations.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('user_id', sa.String(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True, index=True),
        sa.Column('unread_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_read_at', sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        'messages',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('conversation_id', sa.String(), sa.ForeignKey('conversations.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('sender_id', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('content', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('edited_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    # Class channels
    op.create_table(
        'class_channels',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('class_id', sa.String(), sa.ForeignKey('classes.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=True),
        sa.Column('created_by', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'channel_posts',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('channel_id', sa.String(), sa.ForeignKey('class_channels.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('author_id', sa.String(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('content', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    # Invoicing
    op.create_table(
        'pricing_plans',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
    )

    op.create_table(
        'plan_enrollments',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('plan_id', sa.String(), sa.ForeignKey('pricing_plans.id', ondelete='CASCADE'), nullable=False),
    )

    op.create_table(
        'invoices',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('studio_id', sa.String(), sa.ForeignKey('studios.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('parent_id', sa.String(), sa.ForeignKey('parents.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('number', sa.String(), nullable=False, index=True),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.String(), nullable=True),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('tax', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'invoice_items',
        sa.Column('id', sa.String(), primary_key=True),
        sa.Column('invoice_id', sa.String(), sa.ForeignKey('invoices.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('student_id', sa.String(), sa.ForeignKey('students.id', ondelete='SET NULL'), nullable=True),
        sa.Column('description', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('unit_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('subtotal', sa.Numeric(10, 2), nullable=False),
        sa.Column('total', sa.Numeric(10, 2), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('plan_enrollment_id', sa.String(), sa.ForeignKey('plan_enrollments.id', ondelete='SET NULL'), nullable=True),
    )


def downgrade() -> None:
    """Drop every table, children before parents."""
    for table in (
        'invoice_items', 'invoices', 'plan_enrollments', 'pricing_plans',
        'channel_posts', 'class_channels',
        'messages', 'conversation_participants', 'conversations',
        'attendance_records', 'instance_enrollments', 'class_students', 'class_instances', 'classes',
        'students', 'locations', 'parents', 'teachers', 'studios', 'owners',
    ):
        op.drop_table(table)
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
