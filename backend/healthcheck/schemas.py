# backend/healthcheck/schemas.py
from __future__ import annotations

from typing import Any, Optional, List

from pydantic import BaseModel, Field, ConfigDict


class _CamelIn(BaseModel):
    # Seed files and the old API speak camelCase; python callers may use snake_case.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# -------------------- Templates --------------------

class ItemRangeIn(_CamelIn):
    min: float
    max: float


class SelectOptionIn(_CamelIn):
    value: Any
    label: Optional[str] = None
    acceptable: bool = True


class TemplateItemIn(_CamelIn):
    id: str = Field(min_length=1)
    type: str
    check: str = ""
    range: Optional[ItemRangeIn] = None
    options: Optional[List[SelectOptionIn]] = None


class SectionIn(_CamelIn):
    name: str
    items: List[TemplateItemIn]


class ChecklistTemplateIn(_CamelIn):
    id: str = Field(min_length=1)
    equipment_type: str = Field(alias="equipmentType")
    title: str
    description: Optional[str] = None
    version: str = "1.0"
    frequency: Optional[str] = None
    estimated_duration: Optional[int] = Field(default=None, alias="estimatedDuration")
    required_certifications: List[str] = Field(default_factory=list, alias="requiredCertifications")
    required_ppe: List[str] = Field(default_factory=list, alias="requiredPPE")
    sections: List[SectionIn]
    scoring_rules: Optional[dict[str, Any]] = Field(default=None, alias="scoringRules")


# -------------------- Equipment seed --------------------

class EquipmentIn(_CamelIn):
    id: str = Field(min_length=1)
    name: str
    type: str
    category: str = "general"
    manufacturer: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = Field(default=None, alias="serialNumber")
    building: Optional[str] = None
    zone: Optional[str] = None
    status: str = "operational"
    criticality_level: str = Field(default="medium", alias="criticalityLevel")
    health_score: Optional[int] = Field(default=100, alias="healthScore", ge=0, le=100)
