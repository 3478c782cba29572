"""init schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa


revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "agents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=160), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("phone", sa.String(length=40), nullable=False),
        sa.Column("avatar", sa.String(length=500), nullable=True),
        sa.Column("sales_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_revenue", sa.Float(), nullable=False, server_default="0"),
        sa.Column("rating", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_agents_email", "agents", ["email"], unique=True)

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("title_ar", sa.String(length=200), nullable=True),
        sa.Column("category", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("price_type", sa.String(length=20), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=False),
        sa.Column("bedrooms", sa.Integer(), nullable=False),
        sa.Column("bathrooms", sa.Float(), nullable=False),
        sa.Column("area", sa.Float(), nullable=False),
        sa.Column("agent", sa.String(length=160), nullable=False),
        sa.Column("assigned_agent_id", sa.Integer(), sa.ForeignKey("agents.id"), nullable=True),
        sa.Column("image", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("description_ar", sa.Text(), nullable=True),
        sa.Column("furnishing_type", sa.String(length=20), nullable=True),
        sa.Column("size", sa.Float(), nullable=True),
        sa.Column("property_age", sa.Integer(), nullable=True),
        sa.Column("available_from", sa.Date(), nullable=True),
        sa.Column("compliance_type", sa.String(length=20), nullable=True),
        sa.Column("listing_advertisement_number", sa.String(length=80), nullable=True),
        sa.Column("project_status", sa.String(length=30), nullable=True),
        sa.Column("developer", sa.String(length=160), nullable=True),
        sa.Column("unit_number", sa.String(length=40), nullable=True),
        sa.Column("floor_number", sa.String(length=40), nullable=True),
        sa.Column("parking_slots", sa.Integer(), nullable=True),
        sa.Column("downpayment", sa.Float(), nullable=True),
        sa.Column("number_of_cheques", sa.Integer(), nullable=True),
        sa.Column("amenities_json", sa.Text(), nullable=True),
        sa.Column("published_portals_json", sa.Text(), nullable=True),
        sa.Column("is_portal_enhanced", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("portal_enhancement_completed_at", sa.DateTime(), nullable=True),
        sa.Column("portal_enhancement_completed_by", sa.String(length=120), nullable=True),
        sa.Column("approval_status", sa.String(length=20), nullable=False, server_default="approved"),
        sa.Column("pending_changes_json", sa.Text(), nullable=True),
        sa.Column("edited_by", sa.String(length=120), nullable=True),
        sa.Column("edited_at", sa.DateTime(), nullable=True),
        sa.Column("rejection_reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_properties_category", "properties", ["category"])
    op.create_index("ix_properties_status", "properties", ["status"])
    op.create_index("ix_properties_approval_status", "properties", ["approval_status"])
    op.create_index("ix_properties_is_portal_enhanced", "properties", ["is_portal_enhanced"])

    op.create_table(
        "portal_configs",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="CASCADE"), nullable=False),
        sa.Column("portal", sa.String(length=40), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("location_id", sa.String(length=120), nullable=True),
        sa.Column("location_full_name", sa.String(length=255), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("last_synced_at", sa.DateTime(), nullable=True),
        sa.Column("portal_status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("validation_errors_json", sa.Text(), nullable=True),
        sa.UniqueConstraint("property_id", "portal", name="uq_portal_configs_property_portal"),
    )
    op.create_index("ix_portal_configs_property_id", "portal_configs", ["property_id"])
    op.create_index("ix_portal_configs_portal", "portal_configs", ["portal"])

    op.create_table(
        "workflow_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("property_id", sa.Integer(), sa.ForeignKey("properties.id", ondelete="SET NULL"), nullable=True),
        sa.Column("actor_id", sa.String(length=120), nullable=True),
        sa.Column("event_type", sa.String(length=80), nullable=False),
        sa.Column("payload_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_workflow_events_property_id", "workflow_events", ["property_id"])
    op.create_index("ix_workflow_events_event_type", "workflow_events", ["event_type"])

    op.create_table(
        "audit_events",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_id", sa.String(length=120), nullable=True),
        sa.Column("action", sa.String(length=80), nullable=False),
        sa.Column("entity_type", sa.String(length=80), nullable=False),
        sa.Column("entity_id", sa.String(length=80), nullable=False),
        sa.Column("before_json", sa.Text(), nullable=True),
        sa.Column("after_json", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_audit_events_entity_id", "audit_events", ["entity_id"])


def downgrade():
    op.drop_index("ix_audit_events_entity_id", table_name="audit_events")
    op.drop_table("audit_events")
    op.drop_index("ix_workflow_events_event_type", table_name="workflow_events")
    op.drop_index("ix_workflow_events_property_id", table_name="workflow_events")
    op.drop_table("workflow_events")
    op.drop_index("ix_portal_configs_portal", table_name="portal_configs")
    op.drop_index("ix_portal_configs_property_id", table_name="portal_configs")
    op.drop_table("portal_configs")
    op.drop_index("ix_properties_is_portal_enhanced", table_name="properties")
    op.drop_index("ix_properties_approval_status", table_name="properties")
    op.drop_index("ix_properties_status", table_name="properties")
    op.drop_index("ix_properties_category", table_name="properties")
    op.drop_table("properties")
    op.drop_index("ix_agents_email", table_name="agents")
    op.drop_table("agents")
