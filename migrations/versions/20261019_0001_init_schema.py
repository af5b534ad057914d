"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "category",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "course",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("price", sa.Integer(), nullable=True),
        sa.Column("source_url", sa.Text(), nullable=True),
        sa.Column("publish_flag", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("category_id", sa.String(length=36), nullable=True),
        sa.Column("create_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_date", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["category.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_course_category_id", "course", ["category_id"], unique=False)

    op.create_table(
        "chapter",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("publish_flag", sa.Boolean(), server_default=sa.text("false"), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("create_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_date", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["course.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_chapter_course_id", "chapter", ["course_id"], unique=False)

    op.create_table(
        "mux_data",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("asset_id", sa.String(length=255), nullable=False),
        sa.Column("playback_id", sa.String(length=255), nullable=True),
        sa.Column("chapter_id", sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(["chapter_id"], ["chapter.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("chapter_id", name="uq_mux_data_chapter_id"),
    )

    op.create_table(
        "purchase",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("course_id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("create_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_date", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["course_id"], ["course.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("course_id", "user_id", name="uq_purchase_course_user"),
    )
    op.create_index("ix_purchase_course_id", "purchase", ["course_id"], unique=False)
    op.create_index("ix_purchase_user_id", "purchase", ["user_id"], unique=False)

    op.create_table(
        "stripe_customer",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("stripe_customer_id", sa.String(length=255), nullable=False),
        sa.Column("create_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("update_date", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", name="uq_stripe_customer_user_id"),
    )

    op.create_table(
        "processed_webhook_event",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("event_id", sa.String(length=255), nullable=False),
        sa.Column("event_type", sa.String(length=128), nullable=False),
        sa.Column("create_date", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_processed_webhook_event_event_id", "processed_webhook_event", ["event_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_processed_webhook_event_event_id", table_name="processed_webhook_event")
    op.drop_table("processed_webhook_event")
    op.drop_table("stripe_customer")
    op.drop_index("ix_purchase_user_id", table_name="purchase")
    op.drop_index("ix_purchase_course_id", table_name="purchase")
    op.drop_table("purchase")
    op.drop_table("mux_data")
    op.drop_index("ix_chapter_course_id", table_name="chapter")
    op.drop_table("chapter")
    op.drop_index("ix_course_category_id", table_name="course")
    op.drop_table("course")
    op.drop_table("category")
