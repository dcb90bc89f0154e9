"""Initial schema

Revision ID: 0001_init
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_init"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "emissions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("electricity_kwh", sa.Float(), nullable=False, server_default="0"),
        sa.Column("diesel_litres", sa.Float(), nullable=False, server_default="0"),
        sa.Column("petrol_litres", sa.Float(), nullable=False, server_default="0"),
        sa.Column("gas_kwh", sa.Float(), nullable=False, server_default="0"),
        sa.Column("fuel_litres", sa.Float()),
        sa.Column("refrigerant_type", sa.String(length=32)),
        sa.Column("refrigerant_kg", sa.Float(), nullable=False, server_default="0"),
        sa.Column("total_co2e", sa.Float(), nullable=False, server_default="0"),
        sa.Column("factor_version", sa.String(length=40)),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_emissions_user_id", "emissions", ["user_id"])
    op.create_index("ix_emissions_user_month", "emissions", ["user_id", "month"])

    op.create_table(
        "scope3_activities",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("month", sa.Date(), nullable=False),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("label", sa.String(length=200)),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("co2e_kg", sa.Float(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_scope3_activities_user_id", "scope3_activities", ["user_id"])

    op.create_table(
        "emission_factors",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("version", sa.String(length=40), nullable=False),
        sa.Column("region", sa.String(length=8), nullable=False),
        sa.Column("category", sa.String(length=40), nullable=False),
        sa.Column("subcategory", sa.String(length=80)),
        sa.Column("factor", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(length=20)),
    )
    op.create_index("ix_emission_factors_version_region", "emission_factors", ["version", "region"])

    op.create_table(
        "ai_insights",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("period", sa.String(length=40), nullable=False),
        sa.Column("headline", sa.Text()),
        sa.Column("narrative", sa.Text()),
        sa.Column("hotspot", sa.String(length=20)),
        sa.Column("confidence", sa.String(length=10)),
        sa.Column("actions", sa.JSON(), nullable=False),
        sa.Column("raw", sa.JSON()),
        sa.Column("generated_at", sa.DateTime(), nullable=False),
        sa.UniqueConstraint("user_id", "period", name="uq_ai_insights_user_period"),
    )

    op.create_table(
        "user_plans",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=64), nullable=False),
        sa.Column("plan", sa.String(length=20), nullable=False, server_default="free"),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_user_plans_user_id", "user_plans", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_plans_user_id", table_name="user_plans")
    op.drop_table("user_plans")
    op.drop_table("ai_insights")
    op.drop_index("ix_emission_factors_version_region", table_name="emission_factors")
    op.drop_table("emission_factors")
    op.drop_index("ix_scope3_activities_user_id", table_name="scope3_activities")
    op.drop_table("scope3_activities")
    op.drop_index("ix_emissions_user_month", table_name="emissions")
    op.drop_index("ix_emissions_user_id", table_name="emissions")
    op.drop_table("emissions")
