"""create artworks table

Revision ID: 0001_create_artworks
Revises:
Create Date: 2026-10-19 12:00:00.000000

"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_create_artworks"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "artworks",
        # Primary fields
        sa.Column("id", sa.String(length=64), nullable=False, primary_key=True),
        sa.Column("title", sa.String(length=512), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("ip_type", sa.String(length=20), nullable=False),
        # Artifact store references
        sa.Column("file_url", sa.String(length=2000), nullable=False),
        sa.Column("file_id", sa.String(length=256), nullable=False),
        sa.Column("metadata_url", sa.String(length=2000), nullable=False),
        sa.Column("metadata_id", sa.String(length=256), nullable=False),
        # Creator identity
        sa.Column("creator_wallet", sa.String(length=128), nullable=False),
        sa.Column("creator_email", sa.String(length=320), nullable=True),
        # IP registry references
        sa.Column("ip_id", sa.String(length=128), nullable=True),
        sa.Column("nft_token_id", sa.String(length=128), nullable=True),
        sa.Column("license_terms_ids", sa.JSON(), nullable=True),
        # Derivative linkage
        sa.Column("parent_ip_id", sa.String(length=128), nullable=True),
        sa.Column("is_remix", sa.Boolean(), nullable=False, server_default=sa.false()),
        # Engagement
        sa.Column("likes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )

    op.create_index("ix_artworks_ip_type", "artworks", ["ip_type"])
    op.create_index("ix_artworks_creator_wallet", "artworks", ["creator_wallet"])
    op.create_index("ix_artworks_ip_id", "artworks", ["ip_id"], unique=True)
    op.create_index("ix_artworks_parent_ip_id", "artworks", ["parent_ip_id"])
    op.create_index("ix_artworks_created_at", "artworks", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_artworks_created_at", table_name="artworks")
    op.drop_index("ix_artworks_parent_ip_id", table_name="artworks")
    op.drop_index("ix_artworks_ip_id", table_name="artworks")
    op.drop_index("ix_artworks_creator_wallet", table_name="artworks")
    op.drop_index("ix_artworks_ip_type", table_name="artworks")
    op.drop_table("artworks")
