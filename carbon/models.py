"""SQLAlchemy models for emissions data, factors, AI insights and plans."""

from datetime import UTC, date, datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    Float,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# --- Scope 1 & 2 ---
class EmissionEntry(Base):
    __tablename__ = "emissions"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    month: Mapped[date] = mapped_column(Date)
    electricity_kwh: Mapped[float] = mapped_column(Float, default=0.0)
    diesel_litres: Mapped[float] = mapped_column(Float, default=0.0)
    petrol_litres: Mapped[float] = mapped_column(Float, default=0.0)
    gas_kwh: Mapped[float] = mapped_column(Float, default=0.0)
    fuel_litres: Mapped[float] = mapped_column(Float, nullable=True)  # legacy combined fuel column
    refrigerant_type: Mapped[str] = mapped_column(String(32), nullable=True)
    refrigerant_kg: Mapped[float] = mapped_column(Float, default=0.0)
    total_co2e: Mapped[float] = mapped_column(Float, default=0.0)  # kg
    factor_version: Mapped[str] = mapped_column(String(40), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (Index("ix_emissions_user_month", "user_id", "month"),)


# --- Scope 3 ---
class Scope3Entry(Base):
    __tablename__ = "scope3_activities"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    month: Mapped[date] = mapped_column(Date)
    category: Mapped[str] = mapped_column(String(40))
    label: Mapped[str] = mapped_column(String(200), nullable=True)
    details: Mapped[dict] = mapped_column(JSON, default=dict)
    co2e_kg: Mapped[float] = mapped_column(Float, default=0.0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))


# --- Reference data ---
class EmissionFactor(Base):
    __tablename__ = "emission_factors"
    id: Mapped[int] = mapped_column(primary_key=True)
    version: Mapped[str] = mapped_column(String(40))
    region: Mapped[str] = mapped_column(String(8))
    category: Mapped[str] = mapped_column(String(40))
    subcategory: Mapped[str] = mapped_column(String(80), nullable=True)
    factor: Mapped[float] = mapped_column(Float)
    unit: Mapped[str] = mapped_column(String(20), nullable=True)

    __table_args__ = (Index("ix_emission_factors_version_region", "version", "region"),)


# --- AI ---
class AIInsight(Base):
    __tablename__ = "ai_insights"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64))
    period: Mapped[str] = mapped_column(String(40))
    headline: Mapped[str] = mapped_column(Text, nullable=True)
    narrative: Mapped[str] = mapped_column(Text, nullable=True)
    hotspot: Mapped[str] = mapped_column(String(20), nullable=True)
    confidence: Mapped[str] = mapped_column(String(10), nullable=True)
    actions: Mapped[list] = mapped_column(JSON, default=list)
    raw: Mapped[dict] = mapped_column(JSON, nullable=True)
    generated_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (UniqueConstraint("user_id", "period", name="uq_ai_insights_user_period"),)


# --- Reporting ---
class ReportLock(Base):
    __tablename__ = "report_locks"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64))
    month: Mapped[date] = mapped_column(Date)
    locked: Mapped[bool] = mapped_column(Boolean, default=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))

    __table_args__ = (UniqueConstraint("user_id", "month", name="uq_report_locks_user_month"),)


# --- Plans (read-only here; billing lives elsewhere) ---
class UserPlan(Base):
    __tablename__ = "user_plans"
    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    plan: Mapped[str] = mapped_column(String(20), default="free")  # free, growth, pro, enterprise
    created_at: Mapped[datetime] = mapped_column(DateTime, default=lambda: datetime.now(UTC))


