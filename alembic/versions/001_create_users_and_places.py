"""Create users, places and user_places tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema. `user_places` is each user's set of owned place ids;
       its composite primary key makes the set unique. `place_id` carries no
       foreign key so a place and its membership row can be deleted in
       either order inside one transaction.

Rollback: downgrade() drops all three tables (destructive).
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
        "users",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column(
            "image_path",
            sa.String(255),
            nullable=False,
            comment="Public path of the avatar image (uploads/images/<name>)",
        ),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "places",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("address", sa.String(512), nullable=False),
        sa.Column("latitude", sa.Float(), nullable=False),
        sa.Column("longitude", sa.Float(), nullable=False),
        sa.Column("image_path", sa.String(255), nullable=False),
        sa.Column("creator_id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name="pk_places"),
        sa.ForeignKeyConstraint(["creator_id"], ["users.id"], name="fk_places_creator_id_users"),
    )
    op.create_index("ix_places_creator_id", "places", ["creator_id"])

    op.create_table(
        "user_places",
        sa.Column("user_id", sa.Uuid(), nullable=False),
        sa.Column("place_id", sa.Uuid(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "place_id", name="pk_user_places"),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_user_places_user_id_users",
            ondelete="CASCADE",
        ),
    )
    op.create_index("ix_user_places_place_id", "user_places", ["place_id"])


def downgrade() -> None:
    op.drop_index("ix_user_places_place_id", table_name="user_places")
    op.drop_table("user_places")
    op.drop_index("ix_places_creator_id", table_name="places")
    op.drop_table("places")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
