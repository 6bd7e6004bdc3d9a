"""Initial migration: seasons, categories, players, courts, match days, day groups,
rotations and player availability

Revision ID: 001_initial
Revises:
Create Date: 2026-02-01 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "season",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("registrations_open", sa.Boolean(), nullable=False),
        sa.Column("default_number_of_courts", sa.Integer(), nullable=False),
        sa.Column("default_time_slots", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "matchdayscheduleoverride",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("matchday_number", sa.Integer(), nullable=False),
        sa.Column("match_date", sa.Date(), nullable=False),
        sa.Column("number_of_courts_override", sa.Integer(), nullable=True),
        sa.Column("time_slots_override", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
        sa.UniqueConstraint("season_id", "matchday_number", name="uq_override_season_matchday"),
    )
    op.create_index("ix_matchdayscheduleoverride_season_id", "matchdayscheduleoverride", ["season_id"])

    op.create_table(
        "leaguecategory",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("level", sa.String(), nullable=False),
        sa.Column("max_players", sa.Integer(), nullable=False),
        sa.Column("players_direct_to_final", sa.Integer(), nullable=True),
        sa.Column("players_in_semifinals", sa.Integer(), nullable=True),
        sa.Column("recommended_courts", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
    )
    op.create_index("ix_leaguecategory_season_id", "leaguecategory", ["season_id"])

    op.create_table(
        "leagueplayer",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("user_uid", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("phone_number", sa.String(), nullable=True),
        sa.Column("is_waiting_list", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["leaguecategory.id"]),
    )
    op.create_index("ix_leagueplayer_category_id", "leagueplayer", ["category_id"])

    op.create_table(
        "seasoncourt",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("court_number", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
        sa.UniqueConstraint("season_id", "court_number", name="uq_court_season_number"),
        sa.UniqueConstraint("season_id", "name", name="uq_court_season_name"),
    )
    op.create_index("ix_seasoncourt_season_id", "seasoncourt", ["season_id"])

    op.create_table(
        "matchday",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("match_number", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["category_id"], ["leaguecategory.id"]),
        sa.UniqueConstraint("category_id", "match_number", name="uq_matchday_category_number"),
    )
    op.create_index("ix_matchday_category_id", "matchday", ["category_id"])

    op.create_table(
        "daygroup",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_day_id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("group_number", sa.Integer(), nullable=False),
        sa.Column("player_ids", sa.JSON(), nullable=False),
        sa.Column("match_date", sa.Date(), nullable=True),
        sa.Column("time_slot", sa.String(), nullable=True),
        sa.Column("court_index", sa.Integer(), nullable=True),
        sa.Column("court_id", sa.Integer(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_day_id"], ["matchday.id"]),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
        sa.ForeignKeyConstraint(["court_id"], ["seasoncourt.id"]),
        sa.UniqueConstraint("season_id", "match_date", "time_slot", "court_index", name="uq_daygroup_slot"),
    )
    op.create_index("ix_daygroup_match_day_id", "daygroup", ["match_day_id"])
    op.create_index("ix_daygroup_season_id", "daygroup", ["season_id"])

    op.create_table(
        "rotation",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("day_group_id", sa.Integer(), nullable=False),
        sa.Column("rotation_number", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["day_group_id"], ["daygroup.id"]),
        sa.UniqueConstraint("day_group_id", "rotation_number", name="uq_rotation_group_number"),
    )
    op.create_index("ix_rotation_day_group_id", "rotation", ["day_group_id"])

    op.create_table(
        "doublesmatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("rotation_id", sa.Integer(), nullable=False),
        sa.Column("team1_player1_id", sa.Integer(), nullable=False),
        sa.Column("team1_player2_id", sa.Integer(), nullable=False),
        sa.Column("team2_player1_id", sa.Integer(), nullable=False),
        sa.Column("team2_player2_id", sa.Integer(), nullable=False),
        sa.Column("score_team1", sa.Integer(), nullable=True),
        sa.Column("score_team2", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["rotation_id"], ["rotation.id"]),
        sa.ForeignKeyConstraint(["team1_player1_id"], ["leagueplayer.id"]),
        sa.ForeignKeyConstraint(["team1_player2_id"], ["leagueplayer.id"]),
        sa.ForeignKeyConstraint(["team2_player1_id"], ["leagueplayer.id"]),
        sa.ForeignKeyConstraint(["team2_player2_id"], ["leagueplayer.id"]),
        sa.UniqueConstraint("rotation_id"),
    )

    op.create_table(
        "playeravailability",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("available_time_slots", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["player_id"], ["leagueplayer.id"]),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
        sa.UniqueConstraint("player_id", "season_id", "day_of_week", name="uq_availability_player_season_day"),
    )
    op.create_index("ix_playeravailability_player_id", "playeravailability", ["player_id"])
    op.create_index("ix_playeravailability_season_id", "playeravailability", ["season_id"])

    op.create_table(
        "playeravailabilityoverride",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("player_id", sa.Integer(), nullable=False),
        sa.Column("season_id", sa.Integer(), nullable=False),
        sa.Column("override_date", sa.Date(), nullable=False),
        sa.Column("available_time_slots", sa.JSON(), nullable=False),
        sa.Column("is_unavailable", sa.Boolean(), nullable=False),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["player_id"], ["leagueplayer.id"]),
        sa.ForeignKeyConstraint(["season_id"], ["season.id"]),
        sa.UniqueConstraint("player_id", "season_id", "override_date", name="uq_override_player_season_date"),
    )
    op.create_index("ix_playeravailabilityoverride_player_id", "playeravailabilityoverride", ["player_id"])
    op.create_index("ix_playeravailabilityoverride_season_id", "playeravailabilityoverride", ["season_id"])


def downgrade() -> None:
    op.drop_table("playeravailabilityoverride")
    op.drop_table("playeravailability")
    op.drop_table("doublesmatch")
    op.drop_table("rotation")
    op.drop_table("daygroup")
    op.drop_table("matchday")
    op.drop_table("seasoncourt")
    op.drop_table("leagueplayer")
    op.drop_table("leaguecategory")
    op.drop_table("matchdayscheduleoverride")
    op.drop_table("season")
