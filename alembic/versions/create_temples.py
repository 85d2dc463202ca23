"""Create temples table.

Revision ID: create_temples
Revises:
Create Date: 2026-10-17
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'create_temples'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'temples',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('temple_name', sa.String(200), nullable=False),
        # Location
        sa.Column('location_address', sa.String(500), nullable=True),
        sa.Column('location_city', sa.String(100), nullable=False),
        sa.Column('location_state', sa.String(100), nullable=True),
        sa.Column('location_country', sa.String(100), nullable=True),
        # Content
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('history', sa.Text(), nullable=False, server_default=''),
        sa.Column('activities_and_services', sa.Text(), nullable=False, server_default=''),
        sa.Column('darshan_morning', sa.String(100), nullable=False),
        sa.Column('darshan_evening', sa.String(100), nullable=False),
        # Contact
        sa.Column('contact_email', sa.String(255), nullable=False),
        sa.Column('contact_phone', sa.String(10), nullable=False),
        sa.Column('contact_facebook', sa.String(500), nullable=True),
        sa.Column('contact_instagram', sa.String(500), nullable=True),
        sa.Column('contact_website', sa.String(500), nullable=True),
        # Media
        sa.Column('cover_image', sa.String(500), nullable=False),
        sa.Column('cover_image_public_id', sa.String(255), nullable=True),
        sa.Column('photo_gallery', postgresql.JSON(), nullable=False, server_default='[]'),
        # Sub-collections
        sa.Column('special_ceremonies', postgresql.JSON(), nullable=False, server_default='[]'),
        sa.Column('upcoming_events', postgresql.JSON(), nullable=False, server_default='[]'),
        # Verification
        sa.Column('is_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('verified_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('verification_remarks', sa.Text(), nullable=False, server_default=''),
        sa.Column('registered_by', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('version', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('temple_name', 'location_city', name='uq_temples_name_city'),
        sa.UniqueConstraint('contact_email', name='uq_temples_contact_email'),
        sa.UniqueConstraint('contact_phone', name='uq_temples_contact_phone'),
    )

    op.create_index('ix_temples_slug', 'temples', ['slug'])
    op.create_index('ix_temples_location_city', 'temples', ['location_city'])
    op.create_index('ix_temples_location_state', 'temples', ['location_state'])
    op.create_index('ix_temples_is_verified', 'temples', ['is_verified'])
    op.create_index('ix_temples_registered_by', 'temples', ['registered_by'])


def downgrade() -> None:
    op.drop_index('ix_temples_registered_by', table_name='temples')
    op.drop_index('ix_temples_is_verified', table_name='temples')
    op.drop_index('ix_temples_location_state', table_name='temples')
    op.drop_index('ix_temples_location_city', table_name='temples')
    op.drop_index('ix_temples_slug', table_name='temples')
    op.drop_table('temples')
