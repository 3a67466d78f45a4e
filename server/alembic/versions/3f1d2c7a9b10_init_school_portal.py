"""Init school portal schema

Revision ID: 3f1d2c7a9b10
Revises:
Create Date: 2025-10-02 18:04:11.512330

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1d2c7a9b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "site_sections",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("section_key", sa.VARCHAR(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("content", sa.TEXT(), nullable=False, server_default=""),
        sa.Column("image_url", sa.VARCHAR(), nullable=True),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_visible", sa.BOOLEAN(), nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_site_sections_section_key", "site_sections", ["section_key"], unique=True
    )

    op.create_table(
        "news",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("content", sa.TEXT(), nullable=False, server_default=""),
        sa.Column("image_url", sa.VARCHAR(), nullable=True),
        sa.Column("published_date", sa.Date(), nullable=False),
        sa.Column("is_published", sa.BOOLEAN(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_news_published_date", "news", ["published_date"])

    op.create_table(
        "events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=False, server_default=""),
        sa.Column("location", sa.VARCHAR(), nullable=False, server_default=""),
        sa.Column("event_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("image_url", sa.VARCHAR(), nullable=True),
        sa.Column("is_active", sa.BOOLEAN(), nullable=False, server_default=sa.true()),
        sa.Column(
            "invited_courses", sa.VARCHAR(), nullable=False, server_default="Todos"
        ),
        sa.Column("specialties", sa.VARCHAR(), nullable=True),
        sa.Column("max_participants", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "current_participants", sa.Integer(), nullable=False, server_default="0"
        ),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("max_participants >= 0", name="ck_events_max_ge_0"),
        sa.CheckConstraint(
            "current_participants >= 0", name="ck_events_current_ge_0"
        ),
    )
    op.create_index("idx_events_event_date", "events", ["event_date"])

    op.create_table(
        "event_registrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("event_id", sa.Uuid(), nullable=False),
        sa.Column("representative_ci", sa.VARCHAR(), nullable=False),
        sa.Column("representative_name", sa.VARCHAR(), nullable=False),
        sa.Column("student_ci", sa.VARCHAR(), nullable=False),
        sa.Column("student_name", sa.VARCHAR(), nullable=False),
        sa.Column("student_course", sa.VARCHAR(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(["event_id"], ["events.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_event_registrations_event_id", "event_registrations", ["event_id"]
    )

    op.create_table(
        "gallery_images",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.VARCHAR(), nullable=False),
        sa.Column("description", sa.TEXT(), nullable=True),
        sa.Column("image_url", sa.VARCHAR(), nullable=False),
        sa.Column("order_index", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_visible", sa.BOOLEAN(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_gallery_images_order_index", "gallery_images", ["order_index"]
    )

    op.create_table(
        "contact_messages",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.VARCHAR(), nullable=False),
        sa.Column("email", sa.VARCHAR(), nullable=False),
        sa.Column("subject", sa.VARCHAR(), nullable=False),
        sa.Column("message", sa.TEXT(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_contact_messages_created_at", "contact_messages", ["created_at"]
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index("ix_contact_messages_created_at", table_name="contact_messages")
    op.drop_table("contact_messages")
    op.drop_index("ix_gallery_images_order_index", table_name="gallery_images")
    op.drop_table("gallery_images")
    op.drop_index(
        "ix_event_registrations_event_id", table_name="event_registrations"
    )
    op.drop_table("event_registrations")
    op.drop_index("idx_events_event_date", table_name="events")
    op.drop_table("events")
    op.drop_index("ix_news_published_date", table_name="news")
    op.drop_table("news")
    op.drop_index("ix_site_sections_section_key", table_name="site_sections")
    op.drop_table("site_sections")
