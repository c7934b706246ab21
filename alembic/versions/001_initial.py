"""Initial migration — listing source tables.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── properties (agent listings and developer projects) ──
    op.create_table(
        "properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("agent_id", sa.String(36), nullable=False),
        sa.Column("creator_type", sa.String(20), nullable=False, server_default="agent"),
        sa.Column("creator_id", sa.String(36), nullable=True),
        sa.Column("shared", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("title", sa.String(500), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("type", sa.String(50), nullable=True),
        sa.Column("contract_type", sa.String(10), nullable=True),
        sa.Column("slug", sa.String(255), nullable=True),
        sa.Column("price", sa.Numeric(14, 2), nullable=False, server_default="0"),
        sa.Column("bedrooms", sa.Integer, nullable=True),
        sa.Column("bathrooms", sa.Integer, nullable=True),
        sa.Column("sqft", sa.Float, nullable=True),
        sa.Column("furnishing_status", sa.String(20), nullable=True),
        sa.Column("completion_status", sa.String(20), nullable=True),
        sa.Column("parking_available", sa.Boolean, nullable=True),
        sa.Column("location", sa.String(255), nullable=False, server_default=""),
        sa.Column("lat", sa.Float, nullable=True),
        sa.Column("lng", sa.Float, nullable=True),
        sa.Column("amenities", sa.JSON, nullable=True),
        sa.Column("images", sa.JSON, nullable=True),
        sa.Column("floor_plan_image", sa.String(2048), nullable=True),
        sa.Column("handover_date", sa.String(50), nullable=True),
        sa.Column("payment_plan", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_properties_agent_id", "properties", ["agent_id"])
    op.create_index("ix_properties_shared", "properties", ["shared"])
    op.create_index("ix_properties_created_at", "properties", ["created_at"])

    # ── agent_properties (marketplace opt-ins) ──
    op.create_table(
        "agent_properties",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("agent_id", sa.String(36), nullable=False),
        sa.Column("property_id", sa.String(36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint("agent_id", "property_id", name="uq_agent_properties_agent_property"),
    )
    op.create_index("ix_agent_properties_agent_id", "agent_properties", ["agent_id"])
    op.create_index("ix_agent_properties_property_id", "agent_properties", ["property_id"])

    # ── unit_types (developer inventory) ──
    op.create_table(
        "unit_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("project_id", sa.String(36), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("developer_id", sa.String(36), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price_range", sa.String(100), nullable=True),
        sa.Column("size_range", sa.String(100), nullable=True),
        sa.Column("floor_range", sa.String(50), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="available"),
        sa.Column("units_available", sa.Integer, nullable=True),
        sa.Column("images", sa.JSON, nullable=True),
        sa.Column("floor_plan_image", sa.String(2048), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
    )
    op.create_index("ix_unit_types_project_id", "unit_types", ["project_id"])
    op.create_index("ix_unit_types_developer_id", "unit_types", ["developer_id"])

    # ── agent_unit_types (units an agent shows on their page) ──
    op.create_table(
        "agent_unit_types",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("agent_id", sa.String(36), nullable=False),
        sa.Column("unit_type_id", sa.String(36), sa.ForeignKey("unit_types.id", ondelete="CASCADE"), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True, server_default=sa.func.now()),
        sa.UniqueConstraint("agent_id", "unit_type_id", name="uq_agent_unit_types_agent_unit"),
    )
    op.create_index("ix_agent_unit_types_agent_id", "agent_unit_types", ["agent_id"])
    op.create_index("ix_agent_unit_types_unit_type_id", "agent_unit_types", ["unit_type_id"])

    # ── user_preferences ──
    op.create_table(
        "user_preferences",
        sa.Column("user_id", sa.String(36), primary_key=True),
        sa.Column("currency", sa.String(3), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("user_preferences")
    op.drop_table("agent_unit_types")
    op.drop_table("unit_types")
    op.drop_table("agent_properties")
    op.drop_table("properties")
