"""Create note table

Revision ID: 001
Revises: None
Create Date: 2026-01-10 00:00:00.000000+00:00

What:  Creates the `note` table holding every user's Markdown notes.
How:   Composite primary key (note_id, user_id); note_id is allocated by the
       application per user.

Rollback: downgrade() drops the table (all notes are lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "note",
        sa.Column(
            "note_id",
            sa.Integer(),
            nullable=False,
            autoincrement=False,
            comment="Per-user sequential note id",
        ),
        sa.Column(
            "user_id",
            sa.String(191),
            nullable=False,
            comment="Owner id from the auth provider",
        ),
        sa.Column(
            "name",
            sa.String(255),
            nullable=False,
            comment="Sanitized display name, unique per user by counter suffix",
        ),
        # NULL = never edited, served as the welcome document
        sa.Column(
            "content",
            sa.Text(),
            nullable=True,
            comment="Markdown body; NULL means the untouched welcome note",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this note was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="Last save (UTC)",
        ),
        sa.PrimaryKeyConstraint("note_id", "user_id"),
    )

    op.create_index("note_user_id_idx", "note", ["user_id"])


def downgrade() -> None:
    op.drop_index("note_user_id_idx", table_name="note")
    op.drop_table("note")
