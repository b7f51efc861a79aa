# backend/modules/equipment/tests/conftest.py

import pytest
import pytest_asyncio
from typing import Any, Dict

from modules.equipment.schemas import EquipmentCreate
from modules.equipment.services import QualityEquipmentService
from modules.production.models import ProductionBatch


@pytest.fixture
def service(db_session, audit_logger, clock) -> QualityEquipmentService:
    """Equipment service wired to the test session, audit sink and fixed clock"""
    return QualityEquipmentService(db_session, audit_logger, clock=clock)


@pytest.fixture
def equipment_data() -> Dict[str, Any]:
    """Base equipment data for testing"""
    return {
        "code": "EQ-01",
        "name": "Balanza analítica",
        "area": "Laboratorio",
        "is_critical": True,
        "calibration_frequency_days": 30,
        "maintenance_frequency_days": 90,
        "actor": "qa.lead",
    }


@pytest_asyncio.fixture
async def created_equipment(service: QualityEquipmentService, equipment_data):
    """Equipment registered through the service"""
    return await service.create_equipment(EquipmentCreate(**equipment_data))


@pytest_asyncio.fixture
async def production_batch(db_session) -> ProductionBatch:
    """Production batch for usage tests"""
    batch = ProductionBatch(code="LOT-2024-001", planned_qty=100)
    db_session.add(batch)
    await db_session.commit()
    await db_session.refresh(batch)
    return batch


@pytest.fixture
def make_equipment(service: QualityEquipmentService):
    """Factory fixture registering equipment with overridable fields"""

    async def _make(code: str, **overrides) -> Any:
        data = {"code": code, "name": f"Equipo {code}"}
        data.update(overrides)
        return await service.create_equipment(EquipmentCreate(**data))

    return _make
