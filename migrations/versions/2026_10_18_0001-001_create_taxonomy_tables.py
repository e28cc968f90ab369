"""Create taxonomy association and engagement tables

Adds:
- tags, boards (taxonomy registries)
- board_tags (per-board tag order and display override)
- asset_boards, asset_tags (catalog entry edges)
- view_events (append-only view log)

catalog_entries, content_types and formats are owned by the catalog
schema and must already exist.

Revision ID: 001
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- Registries ---
    op.create_table(
        "tags",
        sa.Column("id", sa.String(36), nullable=False, comment="Tag unique identifier"),
        sa.Column("name", sa.String(100), nullable=False, comment="Display name"),
        sa.Column("slug", sa.String(100), nullable=False, comment="Normalized URL-safe identifier"),
        sa.Column("category", sa.String(50), nullable=True, comment="product | team | competitor | topic"),
        sa.Column("color", sa.String(20), nullable=True, comment="Badge color"),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0", comment="Global display order"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_tags"),
        sa.UniqueConstraint("name", name="uq_tags_name"),
    )
    op.create_index("ix_tags_slug", "tags", ["slug"], unique=True)
    op.create_index("ix_tags_category", "tags", ["category"])

    op.create_table(
        "boards",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("icon", sa.String(20), nullable=True),
        sa.Column("color", sa.String(20), nullable=False),
        sa.Column("light_color", sa.String(20), nullable=False),
        sa.Column("accent_color", sa.String(20), nullable=False),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_boards"),
    )
    op.create_index("ix_boards_slug", "boards", ["slug"], unique=True)

    # --- Edges ---
    op.create_table(
        "board_tags",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("board_id", sa.String(36), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column("sort_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_board_tags"),
        sa.ForeignKeyConstraint(
            ["board_id"], ["boards.id"], name="fk_board_tags_board_id_boards", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"], ["tags.id"], name="fk_board_tags_tag_id_tags", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("board_id", "tag_id", name="uq_board_tags_board_id"),
    )
    op.create_index("ix_board_tags_board_id", "board_tags", ["board_id"])
    op.create_index("ix_board_tags_tag_id", "board_tags", ["tag_id"])

    op.create_table(
        "asset_boards",
        sa.Column("asset_id", sa.String(36), nullable=False),
        sa.Column("board_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("asset_id", "board_id", name="pk_asset_boards"),
        sa.ForeignKeyConstraint(
            ["asset_id"], ["catalog_entries.id"],
            name="fk_asset_boards_asset_id_catalog_entries", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["board_id"], ["boards.id"], name="fk_asset_boards_board_id_boards", ondelete="CASCADE"
        ),
    )

    op.create_table(
        "asset_tags",
        sa.Column("asset_id", sa.String(36), nullable=False),
        sa.Column("tag_id", sa.String(36), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("asset_id", "tag_id", name="pk_asset_tags"),
        sa.ForeignKeyConstraint(
            ["asset_id"], ["catalog_entries.id"],
            name="fk_asset_tags_asset_id_catalog_entries", ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["tag_id"], ["tags.id"], name="fk_asset_tags_tag_id_tags", ondelete="CASCADE"
        ),
    )

    # --- Engagement ---
    op.create_table(
        "view_events",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("entry_id", sa.String(36), nullable=False),
        sa.Column("source", sa.String(50), nullable=False, server_default="direct"),
        sa.Column("session_id", sa.String(100), nullable=True),
        sa.Column("viewed_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id", name="pk_view_events"),
        sa.ForeignKeyConstraint(
            ["entry_id"], ["catalog_entries.id"], name="fk_view_events_entry_id_catalog_entries"
        ),
    )
    op.create_index("ix_view_events_entry_id", "view_events", ["entry_id"])
    op.create_index("ix_view_events_viewed_at", "view_events", ["viewed_at"])


def downgrade() -> None:
    # Drop in reverse dependency order
    op.drop_index("ix_view_events_viewed_at", "view_events")
    op.drop_index("ix_view_events_entry_id", "view_events")
    op.drop_table("view_events")
    op.drop_table("asset_tags")
    op.drop_table("asset_boards")
    op.drop_index("ix_board_tags_tag_id", "board_tags")
    op.drop_index("ix_board_tags_board_id", "board_tags")
    op.drop_table("board_tags")
    op.drop_index("ix_boards_slug", "boards")
    op.drop_table("boards")
    op.drop_index("ix_tags_category", "tags")
    op.drop_index("ix_tags_slug", "tags")
    op.drop_table("tags")
