"""outfitter hunts, pricing catalog, hunt contracts and payment items

Revision ID: 20261016_0001
Revises:
Create Date: 2026-10-16 00:00:01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261016_0001"
down_revision = None
branch_labels = None
depends_on = None


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("outfitter_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "pricing_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("category", sa.String(length=120), nullable=True),
        sa.Column("addon_type", sa.String(length=40), nullable=True),
        sa.Column("amount_usd", sa.Numeric(12, 2), nullable=False),
        sa.Column("included_days", sa.Integer(), nullable=True),
        sa.Column("species", sa.String(length=255), nullable=True),
        sa.Column("weapons", sa.String(length=255), nullable=True),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_pricing_items_outfitter_id", "pricing_items", ["outfitter_id"])
    op.create_index("idx_pricing_items_outfitter_category", "pricing_items", ["outfitter_id", "category"])

    op.create_table(
        "contract_templates",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_audit_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_contract_templates_outfitter_id", "contract_templates", ["outfitter_id"])

    op.create_table(
        "hunts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("species", sa.String(length=120), nullable=True),
        sa.Column("unit", sa.String(length=120), nullable=True),
        sa.Column("weapon", sa.String(length=60), nullable=True),
        sa.Column("camp_name", sa.String(length=255), nullable=True),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("hunt_code", sa.String(length=60), nullable=True),
        sa.Column("hunt_window_start", sa.Date(), nullable=True),
        sa.Column("hunt_window_end", sa.Date(), nullable=True),
        sa.Column("private_land_tag_id", sa.Integer(), nullable=True),
        sa.Column("client_email", sa.String(length=255), nullable=True),
        sa.Column("hunt_type", sa.String(length=40), nullable=False, server_default="draw"),
        sa.Column("tag_status", sa.String(length=40), nullable=False, server_default="pending"),
        sa.Column("selected_pricing_item_id", sa.Integer(), nullable=True),
        sa.Column("client_addon_data", sa.JSON(), nullable=True),
        sa.Column("contract_generated_at", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["selected_pricing_item_id"], ["pricing_items.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_hunts_outfitter_id", "hunts", ["outfitter_id"])
    op.create_index("idx_hunts_outfitter_client", "hunts", ["outfitter_id", "client_email"])

    op.create_table(
        "hunt_contracts",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("hunt_id", sa.Integer(), nullable=True),
        sa.Column("template_id", sa.Integer(), nullable=True),
        sa.Column("client_email", sa.String(length=255), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=40), nullable=False, server_default="draft"),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("content_preamble", sa.Text(), nullable=True),
        sa.Column("selected_pricing_item_id", sa.Integer(), nullable=True),
        sa.Column("client_selected_start_date", sa.Date(), nullable=True),
        sa.Column("client_selected_end_date", sa.Date(), nullable=True),
        sa.Column("calculated_guide_fee_cents", sa.Integer(), nullable=True),
        sa.Column("calculated_addons_cents", sa.Integer(), nullable=True),
        sa.Column("contract_total_cents", sa.Integer(), nullable=True),
        sa.Column("client_completion_data", sa.JSON(), nullable=True),
        sa.Column("client_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_reviewed_by", sa.String(length=255), nullable=True),
        sa.Column("admin_review_notes", sa.Text(), nullable=True),
        sa.Column("docusign_envelope_id", sa.String(length=120), nullable=True),
        sa.Column("docusign_status", sa.String(length=40), nullable=False, server_default="not_sent"),
        sa.Column("docusign_sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("client_signed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("admin_signed_at", sa.DateTime(timezone=True), nullable=True),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["hunt_id"], ["hunts.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["template_id"], ["contract_templates.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["selected_pricing_item_id"], ["pricing_items.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_hunt_contracts_outfitter_id", "hunt_contracts", ["outfitter_id"])
    # Not unique: duplicate prevention is the existence check before insert.
    op.create_index("idx_hunt_contracts_hunt", "hunt_contracts", ["hunt_id"])
    op.create_index("idx_hunt_contracts_outfitter_status", "hunt_contracts", ["outfitter_id", "status"])
    op.create_index("idx_hunt_contracts_client_email", "hunt_contracts", ["client_email"])
    op.create_index("ix_hunt_contracts_docusign_envelope_id", "hunt_contracts", ["docusign_envelope_id"])

    op.create_table(
        "payment_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("contract_id", sa.Integer(), nullable=False),
        sa.Column("hunt_id", sa.Integer(), nullable=True),
        sa.Column("client_email", sa.String(length=255), nullable=False),
        sa.Column("item_type", sa.String(length=40), nullable=False, server_default="guide_fee"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("subtotal_cents", sa.Integer(), nullable=False),
        sa.Column("platform_fee_cents", sa.Integer(), nullable=False),
        sa.Column("total_cents", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(length=40), nullable=False, server_default="pending"),
        *_audit_columns(),
        sa.ForeignKeyConstraint(["contract_id"], ["hunt_contracts.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["hunt_id"], ["hunts.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_payment_items_outfitter_id", "payment_items", ["outfitter_id"])
    op.create_index("idx_payment_items_contract_type", "payment_items", ["contract_id", "item_type"])


def downgrade() -> None:
    op.drop_index("idx_payment_items_contract_type", table_name="payment_items")
    op.drop_index("ix_payment_items_outfitter_id", table_name="payment_items")
    op.drop_table("payment_items")

    op.drop_index("ix_hunt_contracts_docusign_envelope_id", table_name="hunt_contracts")
    op.drop_index("idx_hunt_contracts_client_email", table_name="hunt_contracts")
    op.drop_index("idx_hunt_contracts_outfitter_status", table_name="hunt_contracts")
    op.drop_index("idx_hunt_contracts_hunt", table_name="hunt_contracts")
    op.drop_index("ix_hunt_contracts_outfitter_id", table_name="hunt_contracts")
    op.drop_table("hunt_contracts")

    op.drop_index("idx_hunts_outfitter_client", table_name="hunts")
    op.drop_index("ix_hunts_outfitter_id", table_name="hunts")
    op.drop_table("hunts")

    op.drop_index("ix_contract_templates_outfitter_id", table_name="contract_templates")
    op.drop_table("contract_templates")

    op.drop_index("idx_pricing_items_outfitter_category", table_name="pricing_items")
    op.drop_index("ix_pricing_items_outfitter_id", table_name="pricing_items")
    op.drop_table("pricing_items")
