# backend/modules/equipment/models/__init__.py
"""Equipment models module"""

from .equipment_models import (
    Equipment,
    EquipmentCalibration,
    EquipmentMaintenance,
    BatchEquipmentUsage,
    EquipmentStatus,
    CalibrationResult,
    MaintenanceType,
    MaintenanceResult,
)

__all__ = [
    "Equipment",
    "EquipmentCalibration",
    "EquipmentMaintenance",
    "BatchEquipmentUsage",
    "EquipmentStatus",
    "CalibrationResult",
    "MaintenanceType",
    "MaintenanceResult",
]
