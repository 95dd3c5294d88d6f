"""Create users, photos, activities and activity_attendees

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

Rollback: downgrade() drops all four tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("username", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "photos",
        sa.Column(
            "id",
            sa.String(255),
            nullable=False,
            comment="Public identifier assigned by the image host",
        ),
        sa.Column("url", sa.String(1024), nullable=False),
        sa.Column("is_main", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_photos"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="fk_photos_user_id", ondelete="CASCADE"
        ),
    )
    op.create_index("ix_photos_user_id", "photos", ["user_id"])
    # At most one main photo per user
    op.create_index(
        "ux_photos_one_main_per_user",
        "photos",
        ["user_id"],
        unique=True,
        postgresql_where=sa.text("is_main"),
        sqlite_where=sa.text("is_main = 1"),
    )

    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("venue", sa.String(200), nullable=False),
        sa.Column("is_cancelled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id", name="pk_activities"),
    )
    op.create_index("ix_activities_date", "activities", ["date"])

    op.create_table(
        "activity_attendees",
        sa.Column("activity_id", sa.Uuid(), nullable=False),
        sa.Column("app_user_id", sa.String(36), nullable=False),
        sa.Column("is_host", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("activity_id", "app_user_id", name="pk_activity_attendees"),
        sa.ForeignKeyConstraint(
            ["activity_id"], ["activities.id"],
            name="fk_activity_attendees_activity_id", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["app_user_id"], ["users.id"],
            name="fk_activity_attendees_app_user_id", ondelete="CASCADE",
        ),
    )


def downgrade() -> None:
    op.drop_table("activity_attendees")
    op.drop_index("ix_activities_date", table_name="activities")
    op.drop_table("activities")
    op.drop_index("ux_photos_one_main_per_user", table_name="photos")
    op.drop_index("ix_photos_user_id", table_name="photos")
    op.drop_table("photos")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
