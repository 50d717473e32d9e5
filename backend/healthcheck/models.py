# backend/healthcheck/models.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base


# -----------------------------
# Equipment
# -----------------------------
class Equipment(Base):
    __tablename__ = "equipments"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(80), nullable=False)
    category: Mapped[str] = mapped_column(String(80), nullable=False, default="general", index=True)

    manufacturer: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    model: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    serial_number: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)

    building: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)
    zone: Mapped[Optional[str]] = mapped_column(String(80), nullable=True)

    # operational|maintenance|critical|outOfService
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="operational", index=True)
    criticality_level: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")
    health_score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=100)

    last_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    next_maintenance_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


# -----------------------------
# Templates
# -----------------------------
class ChecklistTemplateRecord(Base):
    __tablename__ = "checklist_templates"

    id: Mapped[str] = mapped_column(String(80), primary_key=True)
    equipment_type: Mapped[str] = mapped_column(String(80), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")
    frequency: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    estimated_duration: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    required_certifications_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    required_ppe_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sections_json: Mapped[str] = mapped_column(Text, nullable=False)
    scoring_rules_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )


# -----------------------------
# Checklists (inspection instances)
# -----------------------------
class Checklist(Base):
    __tablename__ = "checklists"
    __table_args__ = (
        Index("ix_checklists_equipment_completed", "equipment_id", "completed_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    equipment_id: Mapped[str] = mapped_column(String(64), ForeignKey("equipments.id"), nullable=False, index=True)
    template_id: Mapped[str] = mapped_column(String(80), ForeignKey("checklist_templates.id"), nullable=False)

    inspector_name: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    inspector_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    scheduled_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # draft|pending|in_progress|completed|cancelled
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending", index=True)
    responses_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    passed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    final_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True, index=True)
    next_check_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # optimistic concurrency: concurrent edits on the same checklist raise StaleDataError
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __mapper_args__ = {"version_id_col": version}


# -----------------------------
# Alerts
# -----------------------------
class Alert(Base):
    __tablename__ = "alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    equipment_id: Mapped[Optional[str]] = mapped_column(String(64), ForeignKey("equipments.id"), nullable=True, index=True)
    checklist_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("checklists.id"), nullable=True)

    # health_score_low|maintenance_due|critical_failure|inspection_overdue
    alert_type: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="medium")  # low|medium|high|critical
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # active|acknowledged|resolved|dismissed
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active", index=True)

    acknowledged_by: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    acknowledged_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolved_by: Mapped[Optional[str]] = mapped_column(String(160), nullable=True)
    resolved_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    resolution_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
