# backend/modules/equipment/__init__.py
"""Quality equipment module: registry, calibration and maintenance tracking, due-date alerts."""

from .services import QualityEquipmentService
from .models import (
    BatchEquipmentUsage,
    CalibrationResult,
    Equipment,
    EquipmentCalibration,
    EquipmentMaintenance,
    EquipmentStatus,
    MaintenanceResult,
    MaintenanceType,
)
from .schemas import (
    BatchEquipmentUsageCreate,
    CalibrationCreate,
    EquipmentAlert,
    EquipmentCreate,
    EquipmentHistory,
    EquipmentUpdate,
    MaintenanceCreate,
)

__all__ = [
    "QualityEquipmentService",
    "BatchEquipmentUsage",
    "CalibrationResult",
    "Equipment",
    "EquipmentCalibration",
    "EquipmentMaintenance",
    "EquipmentStatus",
    "MaintenanceResult",
    "MaintenanceType",
    "BatchEquipmentUsageCreate",
    "CalibrationCreate",
    "EquipmentAlert",
    "EquipmentCreate",
    "EquipmentHistory",
    "EquipmentUpdate",
    "MaintenanceCreate",
]
