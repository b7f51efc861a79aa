# backend/modules/equipment/schemas/equipment_schemas.py

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.mixins import as_naive_utc
from ..models import (
    CalibrationResult,
    EquipmentStatus,
    MaintenanceResult,
    MaintenanceType,
)


class AlertType(str, Enum):
    """Which due date raised an alert"""

    CALIBRATION = "calibration"
    MAINTENANCE = "maintenance"


class AlertSeverity(str, Enum):
    """Urgency of an equipment alert"""

    OVERDUE = "overdue"
    UPCOMING = "upcoming"


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("must not be blank")
    return v


class EquipmentBase(BaseModel):
    """Base schema for equipment"""

    code: str = Field(..., min_length=1, max_length=100, description="Unique equipment code")
    name: str = Field(..., min_length=1, max_length=200)
    area: Optional[str] = Field(None, max_length=200)
    is_critical: bool = Field(default=False, description="Critical for batch release")
    status: EquipmentStatus = EquipmentStatus.ACTIVE
    calibration_frequency_days: Optional[int] = Field(
        None, ge=1, description="Days between calibrations"
    )
    maintenance_frequency_days: Optional[int] = Field(
        None, ge=1, description="Days between preventive maintenances"
    )
    notes: Optional[str] = None


class EquipmentCreate(EquipmentBase):
    """Schema for registering equipment"""

    actor: Optional[str] = Field(None, max_length=255)

    @field_validator("code", "name")
    @classmethod
    def validate_not_blank(cls, v):
        return _strip_required(v)


class EquipmentUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied"""

    code: Optional[str] = Field(None, min_length=1, max_length=100)
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    area: Optional[str] = Field(None, max_length=200)
    is_critical: Optional[bool] = None
    status: Optional[EquipmentStatus] = None
    calibration_frequency_days: Optional[int] = Field(None, ge=1)
    maintenance_frequency_days: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None

    @field_validator("code", "name")
    @classmethod
    def validate_not_blank(cls, v):
        if v is None:
            return v
        return _strip_required(v)


class Equipment(EquipmentBase):
    """Schema for equipment response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    last_calibration_at: Optional[datetime] = None
    next_calibration_due_at: Optional[datetime] = None
    last_maintenance_at: Optional[datetime] = None
    next_maintenance_due_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class EquipmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    is_critical: bool


class EquipmentFilters(BaseModel):
    """Filters for listing equipment"""

    status: Optional[EquipmentStatus] = None
    is_critical: Optional[bool] = None


class CalibrationCreate(BaseModel):
    """Schema for recording a calibration"""

    executed_at: Optional[datetime] = Field(None, description="Defaults to now")
    due_at: Optional[datetime] = Field(
        None, description="Explicit next due date; derived when omitted"
    )
    result: CalibrationResult = CalibrationResult.APPROVED
    certificate_ref: Optional[str] = Field(None, max_length=255)
    evidence_ref: Optional[str] = Field(None, max_length=255)
    performed_by: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    actor: Optional[str] = Field(None, max_length=255)

    @field_validator("executed_at", "due_at")
    @classmethod
    def normalize_datetime(cls, v):
        return as_naive_utc(v)


class MaintenanceCreate(BaseModel):
    """Schema for recording a maintenance"""

    executed_at: Optional[datetime] = Field(None, description="Defaults to now")
    due_at: Optional[datetime] = Field(
        None, description="Explicit next due date; derived when omitted"
    )
    maintenance_type: MaintenanceType = MaintenanceType.PREVENTIVE
    result: MaintenanceResult = MaintenanceResult.COMPLETED
    evidence_ref: Optional[str] = Field(None, max_length=255)
    performed_by: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    actor: Optional[str] = Field(None, max_length=255)

    @field_validator("executed_at", "due_at")
    @classmethod
    def normalize_datetime(cls, v):
        return as_naive_utc(v)


class CalibrationRecord(BaseModel):
    """Schema for calibration response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    executed_at: datetime
    due_at: Optional[datetime] = None
    result: CalibrationResult
    certificate_ref: Optional[str] = None
    evidence_ref: Optional[str] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class MaintenanceRecord(BaseModel):
    """Schema for maintenance response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    equipment_id: int
    executed_at: datetime
    due_at: Optional[datetime] = None
    maintenance_type: MaintenanceType
    result: MaintenanceResult
    evidence_ref: Optional[str] = None
    performed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class BatchEquipmentUsageCreate(BaseModel):
    """Schema for registering equipment use on a production batch"""

    production_batch_id: int
    equipment_id: int
    used_at: Optional[datetime] = Field(None, description="Defaults to now")
    used_by: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None
    actor: Optional[str] = Field(None, max_length=255)

    @field_validator("used_at")
    @classmethod
    def normalize_datetime(cls, v):
        return as_naive_utc(v)


class ProductionBatchSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str


class BatchEquipmentUsage(BaseModel):
    """Schema for equipment usage response"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    production_batch_id: int
    equipment_id: int
    used_at: datetime
    used_by: Optional[str] = None
    notes: Optional[str] = None
    equipment: Optional[EquipmentSummary] = None
    production_batch: Optional[ProductionBatchSummary] = None


class EquipmentHistory(BaseModel):
    """Equipment with its full event history, newest first"""

    model_config = ConfigDict(from_attributes=True)

    equipment: Equipment
    calibrations: List[CalibrationRecord] = []
    maintenances: List[MaintenanceRecord] = []
    usages: List[BatchEquipmentUsage] = []


class EquipmentAlert(BaseModel):
    """Calibration or maintenance due date inside the warning window"""

    equipment_id: int
    equipment_code: str
    equipment_name: str
    is_critical: bool
    alert_type: AlertType
    due_at: datetime
    days_remaining: int
    severity: AlertSeverity
