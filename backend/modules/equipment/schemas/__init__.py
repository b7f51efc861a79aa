# backend/modules/equipment/schemas/__init__.py
"""Equipment schemas module"""

from .equipment_schemas import (
    AlertSeverity,
    AlertType,
    BatchEquipmentUsage,
    BatchEquipmentUsageCreate,
    CalibrationCreate,
    CalibrationRecord,
    Equipment,
    EquipmentAlert,
    EquipmentBase,
    EquipmentCreate,
    EquipmentFilters,
    EquipmentHistory,
    EquipmentSummary,
    EquipmentUpdate,
    MaintenanceCreate,
    MaintenanceRecord,
    ProductionBatchSummary,
)

__all__ = [
    "AlertSeverity",
    "AlertType",
    "BatchEquipmentUsage",
    "BatchEquipmentUsageCreate",
    "CalibrationCreate",
    "CalibrationRecord",
    "Equipment",
    "EquipmentAlert",
    "EquipmentBase",
    "EquipmentCreate",
    "EquipmentFilters",
    "EquipmentHistory",
    "EquipmentSummary",
    "EquipmentUpdate",
    "MaintenanceCreate",
    "MaintenanceRecord",
    "ProductionBatchSummary",
]
