"""create invitation, invitees and rsvp tables

Revision ID: 3f1c9a7e2b10
Revises: 
Create Date: 2026-01-12 10:04:51.117203

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

side_enum = sa.Enum("bride", "groom", name="sideenum")


def upgrade() -> None:
    """Create the three RSVP tables."""
    op.create_table(
        "invitation",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("side", side_enum, nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_invitation_id", "invitation", ["id"])

    op.create_table(
        "invitees",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invitation_id", sa.Integer(), sa.ForeignKey("invitation.id", ondelete="CASCADE"), nullable=False),
        sa.Column("first_name", sa.String(length=80), nullable=False),
        sa.Column("last_name", sa.String(length=80), nullable=False, server_default=""),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("coming", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_invitees_id", "invitees", ["id"])
    op.create_index("ix_invitees_invitation_id", "invitees", ["invitation_id"])

    op.create_table(
        "rsvp",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("invitation_id", sa.Integer(), sa.ForeignKey("invitation.id", ondelete="CASCADE"),
                  nullable=False, unique=True),
        sa.Column("short_url", sa.String(length=6), nullable=False),
        sa.Column("accepted", sa.Boolean(), nullable=True),
        sa.Column("staying_villa", sa.Boolean(), nullable=True),
        sa.Column("dietary_restrictions", sa.String(length=500), nullable=True),
        sa.Column("song_request", sa.String(length=200), nullable=True),
        sa.Column("travel_plans", sa.String(length=500), nullable=True),
        sa.Column("message", sa.String(length=1000), nullable=True),
        sa.Column("villa_offered", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_rsvp_id", "rsvp", ["id"])
    op.create_index("ix_rsvp_short_url", "rsvp", ["short_url"], unique=True)


def downgrade() -> None:
    """Drop the RSVP tables (children first)."""
    op.drop_index("ix_rsvp_short_url", table_name="rsvp")
    op.drop_index("ix_rsvp_id", table_name="rsvp")
    op.drop_table("rsvp")
    op.drop_index("ix_invitees_invitation_id", table_name="invitees")
    op.drop_index("ix_invitees_id", table_name="invitees")
    op.drop_table("invitees")
    op.drop_index("ix_invitation_id", table_name="invitation")
    op.drop_table("invitation")
    side_enum.drop(op.get_bind(), checkfirst=True)
