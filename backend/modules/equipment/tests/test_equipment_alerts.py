# backend/modules/equipment/tests/test_equipment_alerts.py

import pytest
from datetime import datetime

from core.exceptions import ValidationError
from modules.equipment.models import EquipmentStatus
from modules.equipment.schemas import (
    AlertSeverity,
    AlertType,
    CalibrationCreate,
    EquipmentUpdate,
    MaintenanceCreate,
)


async def calibrate(service, equipment, due_at):
    return await service.add_calibration(
        equipment.id,
        CalibrationCreate(executed_at=datetime(2024, 1, 1), due_at=due_at),
    )


async def maintain(service, equipment, due_at):
    return await service.add_maintenance(
        equipment.id,
        MaintenanceCreate(executed_at=datetime(2024, 1, 1), due_at=due_at),
    )


class TestEquipmentAlerts:
    """Test due-date alerting (clock fixed at 2024-02-05 12:00 UTC)"""

    async def test_overdue_calibration(self, service, make_equipment):
        """Test a calibration due five days ago is reported overdue"""
        equipment = await make_equipment("EQ-01", calibration_frequency_days=30)
        await service.add_calibration(
            equipment.id, CalibrationCreate(executed_at=datetime(2024, 1, 1))
        )

        alerts = await service.list_equipment_alerts(days_ahead=30)

        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.equipment_code == "EQ-01"
        assert alert.alert_type == AlertType.CALIBRATION
        assert alert.due_at == datetime(2024, 1, 31)
        assert alert.days_remaining == -5
        assert alert.severity == AlertSeverity.OVERDUE

    async def test_window_boundary(self, service, make_equipment):
        """Test the window includes day N and excludes day N+1"""
        inside = await make_equipment("EQ-IN")
        outside = await make_equipment("EQ-OUT")
        await calibrate(service, inside, datetime(2024, 3, 6, 23, 59))
        await calibrate(service, outside, datetime(2024, 3, 7, 0, 0))

        alerts = await service.list_equipment_alerts(days_ahead=30)

        assert [alert.equipment_code for alert in alerts] == ["EQ-IN"]
        assert alerts[0].days_remaining == 30
        assert alerts[0].severity == AlertSeverity.UPCOMING

    async def test_day_granularity(self, service, make_equipment):
        """Test a due time earlier today still counts as today"""
        equipment = await make_equipment("EQ-01")
        await calibrate(service, equipment, datetime(2024, 2, 5, 8, 0))

        alerts = await service.list_equipment_alerts(days_ahead=0)

        assert len(alerts) == 1
        assert alerts[0].days_remaining == 0
        assert alerts[0].severity == AlertSeverity.UPCOMING

    async def test_default_window_from_settings(self, service, make_equipment):
        """Test the look-ahead defaults to 30 days"""
        near = await make_equipment("EQ-NEAR")
        far = await make_equipment("EQ-FAR")
        await calibrate(service, near, datetime(2024, 3, 6))
        await calibrate(service, far, datetime(2024, 3, 8))

        alerts = await service.list_equipment_alerts()

        assert [alert.equipment_code for alert in alerts] == ["EQ-NEAR"]

    async def test_negative_window_rejected(self, service):
        """Test a negative look-ahead is rejected"""
        with pytest.raises(ValidationError) as exc_info:
            await service.list_equipment_alerts(days_ahead=-1)

        assert exc_info.value.status_code == 400
        assert exc_info.value.error_code == "VALIDATION_ERROR"

    async def test_calibration_and_maintenance_are_independent(
        self, service, make_equipment
    ):
        """Test one unit can raise both alert types"""
        equipment = await make_equipment("EQ-01")
        await calibrate(service, equipment, datetime(2024, 2, 10))
        await maintain(service, equipment, datetime(2024, 2, 1))

        alerts = await service.list_equipment_alerts(days_ahead=30)

        assert [(a.alert_type, a.days_remaining) for a in alerts] == [
            (AlertType.MAINTENANCE, -4),
            (AlertType.CALIBRATION, 5),
        ]

    async def test_alert_ordering(self, service, make_equipment):
        """Test overdue first, then soonest due date, then code"""
        for code, due_at in (
            ("EQ-E", datetime(2024, 2, 20)),
            ("EQ-D", datetime(2024, 2, 7)),
            ("EQ-C", datetime(2024, 2, 1)),
            ("EQ-B", datetime(2024, 2, 7)),
            ("EQ-A", datetime(2024, 1, 20)),
        ):
            equipment = await make_equipment(code)
            await calibrate(service, equipment, due_at)

        alerts = await service.list_equipment_alerts(days_ahead=30)

        assert [alert.equipment_code for alert in alerts] == [
            "EQ-A",
            "EQ-C",
            "EQ-B",
            "EQ-D",
            "EQ-E",
        ]
        assert [alert.severity for alert in alerts[:2]] == [AlertSeverity.OVERDUE] * 2

    async def test_inactive_equipment_is_skipped(self, service, make_equipment):
        """Test inactive equipment raises no alerts"""
        equipment = await make_equipment("EQ-01")
        await calibrate(service, equipment, datetime(2024, 1, 1))
        await service.update_equipment(
            equipment.id, EquipmentUpdate(status=EquipmentStatus.INACTIVE)
        )

        assert await service.list_equipment_alerts(days_ahead=30) == []

    async def test_equipment_without_due_dates(self, service, make_equipment):
        """Test equipment with no recorded events raises no alerts"""
        await make_equipment("EQ-01", calibration_frequency_days=30)

        assert await service.list_equipment_alerts(days_ahead=365) == []

    async def test_alert_carries_equipment_details(self, service, make_equipment):
        """Test alert payload fields"""
        equipment = await make_equipment(
            "EQ-01", name="Autoclave", is_critical=True
        )
        await maintain(service, equipment, datetime(2024, 2, 6))

        alert = (await service.list_equipment_alerts(days_ahead=7))[0]

        assert alert.equipment_id == equipment.id
        assert alert.equipment_name == "Autoclave"
        assert alert.is_critical is True
        assert alert.alert_type == AlertType.MAINTENANCE
        assert alert.days_remaining == 1

    @pytest.mark.parametrize("days_ahead,expected", [(30, 0), (31, 1), (32, 1)])
    async def test_due_in_31_days(self, service, make_equipment, days_ahead, expected):
        """Test a due date 31 days out only appears once the window reaches it"""
        equipment = await make_equipment("EQ-31")
        await calibrate(service, equipment, datetime(2024, 3, 7))

        alerts = await service.list_equipment_alerts(days_ahead=days_ahead)

        assert len(alerts) == expected
        if alerts:
            assert alerts[0].days_remaining == 31
            assert alerts[0].severity == AlertSeverity.UPCOMING
