"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("rules", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "characters",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("attributes", sa.JSON(), nullable=False),
        sa.Column("skills", sa.JSON(), nullable=False),
        sa.Column("status", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_characters_game_id"), "characters", ["game_id"], unique=False)

    op.create_table(
        "combats",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column("location_id", sa.String(length=36), nullable=False),
        sa.Column("current_turn", sa.Integer(), nullable=False),
        sa.Column("round", sa.Integer(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("active", "resolved", name="combatstatus"),
            nullable=False,
        ),
        sa.Column("log", sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_combats_game_id"), "combats", ["game_id"], unique=False)
    op.create_index(op.f("ix_combats_status"), "combats", ["status"], unique=False)

    op.create_table(
        "combat_participants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("combat_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("character_id", sa.String(length=36), nullable=False),
        sa.Column("initiative", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(["combat_id"], ["combats.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_combat_participants_combat_id"), "combat_participants", ["combat_id"], unique=False
    )

    op.create_table(
        "status_effects",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column("target_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "effect_type",
            sa.Enum("buff", "debuff", "neutral", name="effecttype"),
            nullable=True,
        ),
        sa.Column("duration", sa.Integer(), nullable=True),
        sa.Column("stacks", sa.Integer(), nullable=False),
        sa.Column("max_stacks", sa.Integer(), nullable=True),
        sa.Column("source_id", sa.String(length=36), nullable=True),
        sa.Column("source_type", sa.String(length=50), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("game_id", "target_id", "name"),
    )
    op.create_index(op.f("ix_status_effects_game_id"), "status_effects", ["game_id"], unique=False)
    op.create_index(
        op.f("ix_status_effects_target_id"), "status_effects", ["target_id"], unique=False
    )

    op.create_table(
        "status_effect_modifiers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("effect_id", sa.String(length=36), nullable=False),
        sa.Column("key", sa.String(length=100), nullable=False),
        sa.Column("value", sa.Float(), nullable=False),
        sa.ForeignKeyConstraint(["effect_id"], ["status_effects.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("effect_id", "key"),
    )
    op.create_index(
        op.f("ix_status_effect_modifiers_effect_id"),
        "status_effect_modifiers",
        ["effect_id"],
        unique=False,
    )

    op.create_table(
        "resources",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column(
            "owner_type",
            sa.Enum("game", "character", name="ownertype"),
            nullable=False,
        ),
        sa.Column("owner_id", sa.String(length=36), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("value", sa.Float(), nullable=False),
        sa.Column("min_value", sa.Float(), nullable=True),
        sa.Column("max_value", sa.Float(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_resources_game_id"), "resources", ["game_id"], unique=False)
    op.create_index(op.f("ix_resources_owner_id"), "resources", ["owner_id"], unique=False)

    op.create_table(
        "resource_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("previous_value", sa.Float(), nullable=False),
        sa.Column("new_value", sa.Float(), nullable=False),
        sa.Column("delta", sa.Float(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["resource_id"], ["resources.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_resource_history_id"), "resource_history", ["id"], unique=False)
    op.create_index(
        op.f("ix_resource_history_resource_id"), "resource_history", ["resource_id"], unique=False
    )

    op.create_table(
        "random_tables",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=100), nullable=True),
        sa.Column("roll_expression", sa.String(length=50), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_random_tables_game_id"), "random_tables", ["game_id"], unique=False)
    op.create_index(op.f("ix_random_tables_category"), "random_tables", ["category"], unique=False)

    op.create_table(
        "random_table_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("table_id", sa.String(length=36), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("min_roll", sa.Integer(), nullable=False),
        sa.Column("max_roll", sa.Integer(), nullable=False),
        sa.Column("result", sa.Text(), nullable=False),
        sa.Column("weight", sa.Float(), nullable=True),
        sa.Column("subtable_id", sa.String(length=36), nullable=True),
        sa.ForeignKeyConstraint(["table_id"], ["random_tables.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_random_table_entries_table_id"), "random_table_entries", ["table_id"], unique=False
    )

    op.create_table(
        "timers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("game_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "timer_type",
            sa.Enum("countdown", "stopwatch", "clock", name="timertype"),
            nullable=False,
        ),
        sa.Column("current_value", sa.Integer(), nullable=False),
        sa.Column("max_value", sa.Integer(), nullable=True),
        sa.Column(
            "direction",
            sa.Enum("up", "down", name="timerdirection"),
            nullable=False,
        ),
        sa.Column("trigger_at", sa.Integer(), nullable=True),
        sa.Column("triggered", sa.Boolean(), nullable=False),
        sa.Column("unit", sa.String(length=50), nullable=False),
        sa.Column("visible_to_players", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["game_id"], ["games.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_timers_game_id"), "timers", ["game_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_timers_game_id"), table_name="timers")
    op.drop_table("timers")
    op.drop_index(op.f("ix_random_table_entries_table_id"), table_name="random_table_entries")
    op.drop_table("random_table_entries")
    op.drop_index(op.f("ix_random_tables_category"), table_name="random_tables")
    op.drop_index(op.f("ix_random_tables_game_id"), table_name="random_tables")
    op.drop_table("random_tables")
    op.drop_index(op.f("ix_resource_history_resource_id"), table_name="resource_history")
    op.drop_index(op.f("ix_resource_history_id"), table_name="resource_history")
    op.drop_table("resource_history")
    op.drop_index(op.f("ix_resources_owner_id"), table_name="resources")
    op.drop_index(op.f("ix_resources_game_id"), table_name="resources")
    op.drop_table("resources")
    op.drop_index(op.f("ix_status_effect_modifiers_effect_id"), table_name="status_effect_modifiers")
    op.drop_table("status_effect_modifiers")
    op.drop_index(op.f("ix_status_effects_target_id"), table_name="status_effects")
    op.drop_index(op.f("ix_status_effects_game_id"), table_name="status_effects")
    op.drop_table("status_effects")
    op.drop_index(op.f("ix_combat_participants_combat_id"), table_name="combat_participants")
    op.drop_table("combat_participants")
    op.drop_index(op.f("ix_combats_status"), table_name="combats")
    op.drop_index(op.f("ix_combats_game_id"), table_name="combats")
    op.drop_table("combats")
    op.drop_index(op.f("ix_characters_game_id"), table_name="characters")
    op.drop_table("characters")
    op.drop_table("games")
    sa.Enum(name="timerdirection").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="timertype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="ownertype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="effecttype").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="combatstatus").drop(op.get_bind(), checkfirst=True)
