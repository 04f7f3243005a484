"""Initial schema: users, tokens, tags, offices, images, reservations, notifications.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18
"""

from alembic import op
import sqlalchemy as sa

revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "user",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("is_admin", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "personal_access_token",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("token_hash", sa.String(64), nullable=False),
        sa.Column("abilities", sa.JSON, nullable=False),
        sa.Column("last_used_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_personal_access_token_user_id", "personal_access_token", ["user_id"])
    op.create_index(
        "ix_personal_access_token_token_hash", "personal_access_token", ["token_hash"], unique=True
    )

    op.create_table(
        "tag",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        *_timestamps(),
    )

    op.create_table(
        "office",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=False),
        sa.Column("lat", sa.Numeric(10, 7), nullable=False),
        sa.Column("lng", sa.Numeric(10, 7), nullable=False),
        sa.Column("address_line1", sa.String(255), nullable=False),
        sa.Column("address_line2", sa.String(255)),
        sa.Column("price_per_day", sa.Integer, nullable=False),
        sa.Column("monthly_discount", sa.Integer, nullable=False, server_default="0"),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("hidden", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("featured_image_id", sa.Integer),
        sa.Column("deleted_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_office_user_id", "office", ["user_id"])
    op.create_index("ix_office_approval_status", "office", ["approval_status"])
    op.create_index("ix_office_deleted_at", "office", ["deleted_at"])

    op.create_table(
        "image",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "office_id", sa.Integer, sa.ForeignKey("office.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("path", sa.String(500), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_image_office_id", "image", ["office_id"])

    # office <-> image is a cycle; add the featured image FK once both tables exist.
    with op.batch_alter_table("office") as batch:
        batch.create_foreign_key(
            "fk_office_featured_image", "image", ["featured_image_id"], ["id"], ondelete="SET NULL"
        )

    op.create_table(
        "office_tag",
        sa.Column(
            "office_id", sa.Integer, sa.ForeignKey("office.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column(
            "tag_id", sa.Integer, sa.ForeignKey("tag.id", ondelete="CASCADE"), primary_key=True
        ),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
    )

    op.create_table(
        "reservation",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "office_id", sa.Integer, sa.ForeignKey("office.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("price", sa.Integer, nullable=False, server_default="0"),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("start_date", sa.Date),
        sa.Column("end_date", sa.Date),
        *_timestamps(),
    )
    op.create_index("ix_reservation_office_id", "reservation", ["office_id"])
    op.create_index("ix_reservation_user_id", "reservation", ["user_id"])
    op.create_index("ix_reservation_status", "reservation", ["status"])

    op.create_table(
        "notification",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "user_id", sa.Integer, sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("type", sa.String(100), nullable=False),
        sa.Column("data", sa.JSON, nullable=False),
        sa.Column("read_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_notification_user_id", "notification", ["user_id"])
    op.create_index("ix_notification_type", "notification", ["type"])


def downgrade() -> None:
    op.drop_table("notification")
    op.drop_table("reservation")
    op.drop_table("office_tag")
    with op.batch_alter_table("office") as batch:
        batch.drop_constraint("fk_office_featured_image", type_="foreignkey")
    op.drop_table("image")
    op.drop_table("office")
    op.drop_table("tag")
    op.drop_table("personal_access_token")
    op.drop_table("user")
