# backend/modules/equipment/services/__init__.py

from .equipment_service import QualityEquipmentService

__all__ = ["QualityEquipmentService"]
