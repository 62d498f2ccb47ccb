"""create ad space resolver schema

Revision ID: 20260601_000001
Revises:
Create Date: 2026-06-01 00:00:01.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "20260601_000001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("business_name", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)

    op.create_table(
        "ad_spaces",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("theme", sa.JSON(), nullable=True),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ad_spaces_user_id"), "ad_spaces", ["user_id"], unique=False)

    op.create_table(
        "ad_designs",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("ad_space_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("template_id", sa.String(), nullable=True),
        sa.Column("background", sa.String(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("video_url", sa.Text(), nullable=True),
        sa.Column("content", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ad_space_id"], ["ad_spaces.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ad_designs_user_id"), "ad_designs", ["user_id"], unique=False)
    op.create_index(op.f("ix_ad_designs_ad_space_id"), "ad_designs", ["ad_space_id"], unique=False)
    op.create_index(op.f("ix_ad_designs_created_at"), "ad_designs", ["created_at"], unique=False)

    op.create_table(
        "qr_codes",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("design", sa.JSON(), nullable=True),
        sa.Column("scans", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("ad_space_id", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ad_space_id"], ["ad_spaces.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_qr_codes_user_id"), "qr_codes", ["user_id"], unique=False)
    op.create_index(op.f("ix_qr_codes_ad_space_id"), "qr_codes", ["ad_space_id"], unique=False)

    op.create_table(
        "qr_code_scans",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("qr_code_id", sa.String(), nullable=False),
        sa.Column("ad_space_id", sa.String(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("location", sa.JSON(), nullable=True),
        sa.Column("scanned_at", sa.DateTime(timezone=True), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=True),
        sa.ForeignKeyConstraint(["qr_code_id"], ["qr_codes.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["ad_space_id"], ["ad_spaces.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_qr_code_scans_qr_code_id"), "qr_code_scans", ["qr_code_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_qr_code_scans_qr_code_id"), table_name="qr_code_scans")
    op.drop_table("qr_code_scans")
    op.drop_index(op.f("ix_qr_codes_ad_space_id"), table_name="qr_codes")
    op.drop_index(op.f("ix_qr_codes_user_id"), table_name="qr_codes")
    op.drop_table("qr_codes")
    op.drop_index(op.f("ix_ad_designs_created_at"), table_name="ad_designs")
    op.drop_index(op.f("ix_ad_designs_ad_space_id"), table_name="ad_designs")
    op.drop_index(op.f("ix_ad_designs_user_id"), table_name="ad_designs")
    op.drop_table("ad_designs")
    op.drop_index(op.f("ix_ad_spaces_user_id"), table_name="ad_spaces")
    op.drop_table("ad_spaces")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_table("users")
