"""initial tables

Revision ID: 0001
Revises:
Create Date: 2024-01-01 00:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "role",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(50), nullable=False),
        sa.Column("username", sa.String(255), nullable=False),
        sa.Column("password", sa.String(255), nullable=False),
    )
    op.create_index("ix_role_id", "role", ["id"])
    op.create_index("ix_role_username", "role", ["username"], unique=True)

    op.create_table(
        "seller_buyer_mapping",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("buyer_id", sa.Integer(), nullable=False),
        sa.Column("seller_name", sa.String(255), nullable=False),
        sa.Column("buyer_name", sa.String(255), nullable=False),
    )
    op.create_index("ix_seller_buyer_mapping_id", "seller_buyer_mapping", ["id"])
    op.create_index("ix_seller_buyer_mapping_seller_id", "seller_buyer_mapping", ["seller_id"])
    op.create_index("ix_seller_buyer_mapping_buyer_id", "seller_buyer_mapping", ["buyer_id"])

    op.create_table(
        "milk_info",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("buyer_id", sa.Integer(), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("milk_in_litres", sa.Float(), nullable=False),
        sa.Column("fat", sa.Float(), nullable=False),
        sa.Column("shift", sa.String(50), nullable=False),
    )
    op.create_index("ix_milk_info_id", "milk_info", ["id"])
    op.create_index("ix_milk_info_seller_id", "milk_info", ["seller_id"])
    op.create_index("ix_milk_info_buyer_id", "milk_info", ["buyer_id"])

    op.create_table(
        "transaction",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("seller_id", sa.Integer(), nullable=False),
        sa.Column("buyer_id", sa.Integer(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("rate", sa.Float(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
    )
    op.create_index("ix_transaction_id", "transaction", ["id"])
    op.create_index("ix_transaction_seller_id", "transaction", ["seller_id"])

    op.create_table(
        "blacklisttoken",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("token", sa.Text(), nullable=False),
    )
    op.create_index("ix_blacklisttoken_id", "blacklisttoken", ["id"])
    op.create_index("ix_blacklisttoken_token", "blacklisttoken", ["token"])


def downgrade() -> None:
    op.drop_table("blacklisttoken")
    op.drop_table("transaction")
    op.drop_table("milk_info")
    op.drop_table("seller_buyer_mapping")
    op.drop_table("role")
