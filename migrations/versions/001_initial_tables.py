"""Create SproutSync tables and seed task templates

Revision ID: 001
Revises:
Create Date: 2026-10-16 10:00:00.000000

"""
import uuid
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TASK_TEMPLATES = (
    ("watering", "Water", "#3B82F6", 3),
    ("fertilizing", "Fertilizing", "#8B5CF6", 14),
    ("pruning", "Pruning", "#10B981", 30),
    ("spraying", "Spraying", "#F59E0B", 7),
    ("sunlightRotation", "Sunlight Rotation", "#F97316", 14),
)


def _id_column() -> sa.Column:
    return sa.Column('id', sa.String(36), primary_key=True, nullable=False)


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    """Create all tables"""

    # 1. Users and settings
    op.create_table('users',
        _id_column(),
        sa.Column('google_id', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('username', sa.String(30), nullable=True),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        _timestamp('created_at'),
        sa.UniqueConstraint('google_id'),
        sa.UniqueConstraint('email'),
        sa.UniqueConstraint('username'),
    )
    op.create_index('ix_users_google_id', 'users', ['google_id'])
    op.create_index('ix_users_email', 'users', ['email'])
    op.create_index('ix_users_username', 'users', ['username'])

    op.create_table('user_settings',
        _id_column(),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('persona', sa.String(20), nullable=False, server_default='PRIMARY'),
        sa.Column('timezone', sa.String(64), nullable=True),
        sa.Column('fcm_token', sa.Text(), nullable=True),
        sa.Column('notifications_enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        _timestamp('notifications_enabled_at', nullable=True),
        sa.Column('notification_prompt_shown', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('google_calendar_sync_enabled', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('google_calendar_access_token', sa.Text(), nullable=True),
        sa.Column('google_calendar_refresh_token', sa.Text(), nullable=True),
        _timestamp('google_calendar_token_expiry', nullable=True),
        sa.Column('google_calendar_reminder_minutes', sa.Integer(), nullable=False, server_default='30'),
        sa.Column('synced_plant_ids', sa.JSON(), nullable=False),
        sa.Column('tutorial_completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tutorial_completed_steps', sa.JSON(), nullable=False),
        sa.Column('tutorial_skipped_steps', sa.JSON(), nullable=False),
        sa.Column('has_seen_new_user_focus', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('last_active_at', nullable=True),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.UniqueConstraint('user_id'),
        sa.CheckConstraint("persona IN ('PRIMARY', 'SECONDARY', 'TERTIARY')", name='ck_user_settings_persona'),
    )

    # 2. Task templates
    task_templates = op.create_table('task_templates',
        _id_column(),
        sa.Column('key', sa.String(50), nullable=False),
        sa.Column('label', sa.String(100), nullable=False),
        sa.Column('color_hex', sa.String(7), nullable=False),
        sa.Column('default_frequency_days', sa.Integer(), nullable=False),
        sa.UniqueConstraint('key'),
    )

    # 3. Plants and their journal
    op.create_table('plants',
        _id_column(),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('pet_name', sa.String(255), nullable=True),
        sa.Column('botanical_name', sa.String(255), nullable=False),
        sa.Column('common_name', sa.String(255), nullable=False),
        sa.Column('type', sa.String(100), nullable=True),
        _timestamp('acquisition_date', nullable=True),
        sa.Column('city', sa.String(255), nullable=True),
        sa.Column('care_level', sa.String(20), nullable=True),
        sa.Column('sun_requirements', sa.String(20), nullable=True),
        sa.Column('toxicity_level', sa.String(20), nullable=True),
        sa.Column('pet_friendliness', sa.JSON(), nullable=True),
        sa.Column('common_pests_and_diseases', sa.Text(), nullable=True),
        sa.Column('preventive_measures', sa.Text(), nullable=True),
        sa.Column('slug', sa.String(255), nullable=True),
        sa.Column('is_gifted', sa.Boolean(), nullable=False, server_default=sa.false()),
        _timestamp('created_at'),
        _timestamp('updated_at'),
        sa.UniqueConstraint('user_id', 'slug', name='uq_plants_user_slug'),
    )
    op.create_index('ix_plants_user_id', 'plants', ['user_id'])

    op.create_table('tags',
        _id_column(),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('color_hex', sa.String(7), nullable=True),
    )
    op.create_index('ix_tags_user_id', 'tags', ['user_id'])

    op.create_table('plant_tags',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('tag_id', sa.String(36), sa.ForeignKey('tags.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('plant_id', 'tag_id', name='uq_plant_tags_plant_tag'),
    )
    op.create_index('ix_plant_tags_plant_id', 'plant_tags', ['plant_id'])
    op.create_index('ix_plant_tags_tag_id', 'plant_tags', ['tag_id'])

    op.create_table('notes',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('task_key', sa.String(50), nullable=True),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('preset', sa.String(30), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_notes_plant_id', 'notes', ['plant_id'])

    op.create_table('photos',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('cloudinary_public_id', sa.String(255), nullable=False),
        sa.Column('secure_url', sa.Text(), nullable=False),
        _timestamp('taken_at'),
        sa.Column('points_awarded', sa.Integer(), nullable=False, server_default='0'),
    )
    op.create_index('ix_photos_plant_id', 'photos', ['plant_id'])

    op.create_table('plant_tracking',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('date', sa.String(32), nullable=False),
        sa.Column('note', sa.Text(), nullable=False),
        sa.Column('photo_url', sa.Text(), nullable=True),
        sa.Column('original_photo_url', sa.Text(), nullable=True),
        sa.Column('cloudinary_public_id', sa.String(255), nullable=True),
        _timestamp('created_at'),
    )
    op.create_index('ix_plant_tracking_plant_id', 'plant_tracking', ['plant_id'])

    # 4. Care tasks
    op.create_table('plant_tasks',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('task_key', sa.String(50), nullable=False),
        sa.Column('frequency_days', sa.Integer(), nullable=False),
        _timestamp('next_due_on'),
        _timestamp('last_completed_on', nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('google_calendar_event_id', sa.String(255), nullable=True),
        sa.CheckConstraint('frequency_days > 0', name='ck_plant_tasks_frequency_positive'),
    )
    op.create_index('ix_plant_tasks_plant_id', 'plant_tasks', ['plant_id'])
    op.create_index('ix_plant_tasks_active_next_due_on', 'plant_tasks', ['active', 'next_due_on'])

    # 5. Gifts
    op.create_table('plant_gifts',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('sender_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('receiver_id', sa.String(36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('gift_token', sa.String(64), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        _timestamp('expires_at', nullable=True),
        _timestamp('accepted_at', nullable=True),
        _timestamp('created_at'),
        sa.UniqueConstraint('gift_token'),
        sa.CheckConstraint(
            "status IN ('PENDING', 'ACCEPTED', 'EXPIRED', 'CANCELLED')",
            name='ck_plant_gifts_status',
        ),
    )
    op.create_index('ix_plant_gifts_plant_id', 'plant_gifts', ['plant_id'])
    op.create_index('ix_plant_gifts_sender_id', 'plant_gifts', ['sender_id'])
    op.create_index('ix_plant_gifts_receiver_id', 'plant_gifts', ['receiver_id'])
    op.create_index('ix_plant_gifts_gift_token', 'plant_gifts', ['gift_token'])

    # 6. Notification log
    op.create_table('notification_logs',
        _id_column(),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('payload_json', sa.Text(), nullable=False),
        _timestamp('sent_at'),
        sa.Column('channel', sa.String(20), nullable=False, server_default='WEB_PUSH'),
    )
    op.create_index('ix_notification_logs_user_id', 'notification_logs', ['user_id'])
    op.create_index('ix_notification_logs_sent_at', 'notification_logs', ['sent_at'])

    # 7. Community
    op.create_table('garden_appreciations',
        _id_column(),
        sa.Column('garden_owner_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        _timestamp('created_at'),
        sa.UniqueConstraint('garden_owner_id', 'user_id', name='uq_garden_appreciations_owner_user'),
    )
    op.create_index('ix_garden_appreciations_garden_owner_id', 'garden_appreciations', ['garden_owner_id'])

    op.create_table('garden_comments',
        _id_column(),
        sa.Column('garden_owner_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('comment', sa.String(500), nullable=False),
        _timestamp('created_at'),
    )
    op.create_index('ix_garden_comments_garden_owner_id', 'garden_comments', ['garden_owner_id'])

    op.create_table('plant_appreciations',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        _timestamp('created_at'),
        sa.UniqueConstraint('plant_id', 'user_id', name='uq_plant_appreciations_plant_user'),
    )
    op.create_index('ix_plant_appreciations_plant_id', 'plant_appreciations', ['plant_id'])

    op.create_table('plant_comments',
        _id_column(),
        sa.Column('plant_id', sa.String(36), sa.ForeignKey('plants.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('comment', sa.String(500), nullable=False),
        _timestamp('created_at'),
    )
    op.create_index('ix_plant_comments_plant_id', 'plant_comments', ['plant_id'])

    # 8. Seed the care task catalog
    op.bulk_insert(task_templates, [
        {
            'id': str(uuid.uuid4()),
            'key': key,
            'label': label,
            'color_hex': color_hex,
            'default_frequency_days': frequency,
        }
        for key, label, color_hex, frequency in TASK_TEMPLATES
    ])


def downgrade() -> None:
    """Drop all tables"""
    for table in (
        'plant_comments',
        'plant_appreciations',
        'garden_comments',
        'garden_appreciations',
        'notification_logs',
        'plant_gifts',
        'plant_tasks',
        'plant_tracking',
        'photos',
        'notes',
        'plant_tags',
        'tags',
        'plants',
        'task_templates',
        'user_settings',
        'users',
    ):
        op.drop_table(table)
