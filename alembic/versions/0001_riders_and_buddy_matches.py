"""riders and buddy matches

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00

"""
from alembic import op
import sqlalchemy as sa


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(), nullable=True, unique=True),
        sa.Column("first_name", sa.String(), nullable=True),
        sa.Column("last_name", sa.String(), nullable=True),
        sa.Column("profile_image_url", sa.String(), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("location_key", sa.String(), nullable=True),
        sa.Column("avg_speed", sa.Float(), nullable=True),
        sa.Column("weekly_mileage", sa.Integer(), nullable=True),
        sa.Column("ftp_watts", sa.Integer(), nullable=True),
        sa.Column("weight_kg", sa.Float(), nullable=True),
        sa.Column("ftp_wkg", sa.Float(), nullable=True),
        sa.Column("weekly_hours", sa.Float(), nullable=True),
        sa.Column("sensor_class", sa.String(), nullable=True),
        sa.Column("ftp_tolerance_pct", sa.Integer(), nullable=True),
        sa.Column("tier", sa.String(length=1), nullable=True),
        sa.Column("total_rides", sa.Integer(), nullable=True),
        sa.Column("kudos_received", sa.Integer(), nullable=True),
        sa.Column("pace_zone", sa.String(), nullable=True),
        sa.Column("elevation_pref", sa.String(), nullable=True),
        sa.Column("ride_type_pref", sa.String(), nullable=True),
        sa.Column("max_distance_mi", sa.Integer(), nullable=True),
        sa.Column("social_pref", sa.String(), nullable=True),
        sa.Column("active_buddy_search", sa.Boolean(), nullable=True),
        sa.Column("visible_in_passive_pool", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=True)
    op.create_index("ix_users_location_key", "users", ["location_key"])

    op.create_table(
        "buddy_matches",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("user1", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("user2", sa.Uuid(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("pair_key", sa.String(), nullable=False),
        sa.Column("user1_decision", sa.String(), nullable=False),
        sa.Column("user2_decision", sa.String(), nullable=False),
        sa.Column("is_match", sa.Boolean(), nullable=False),
        sa.Column("match_score", sa.Float(), nullable=True),
        sa.Column("scheduled_time", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=True),
        sa.UniqueConstraint("pair_key", name="unique_buddy_pair"),
    )
    op.create_index("ix_buddy_matches_id", "buddy_matches", ["id"], unique=True)
    op.create_index("ix_buddy_matches_user1", "buddy_matches", ["user1"])
    op.create_index("ix_buddy_matches_user2", "buddy_matches", ["user2"])


def downgrade() -> None:
    op.drop_index("ix_buddy_matches_user2", table_name="buddy_matches")
    op.drop_index("ix_buddy_matches_user1", table_name="buddy_matches")
    op.drop_index("ix_buddy_matches_id", table_name="buddy_matches")
    op.drop_table("buddy_matches")
    op.drop_index("ix_users_location_key", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
