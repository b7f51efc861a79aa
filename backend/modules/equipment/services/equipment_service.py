# backend/modules/equipment/services/equipment_service.py

import logging
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.exceptions import ConflictError, NotFoundError, ValidationError
from core.mixins import utcnow
from modules.production.models import ProductionBatch

from ..models import (
    BatchEquipmentUsage,
    CalibrationResult,
    Equipment,
    EquipmentCalibration,
    EquipmentMaintenance,
    EquipmentStatus,
    MaintenanceResult,
)
from ..schemas import (
    AlertSeverity,
    AlertType,
    BatchEquipmentUsageCreate,
    CalibrationCreate,
    EquipmentAlert,
    EquipmentCreate,
    EquipmentFilters,
    EquipmentHistory,
    EquipmentUpdate,
    MaintenanceCreate,
)

logger = logging.getLogger(__name__)

AuditLogCallable = Callable[..., Awaitable[Any]]

DUPLICATE_CODE_MESSAGE = "Ya existe un equipo con ese código"
EQUIPMENT_NOT_FOUND_MESSAGE = "Equipo no encontrado"
BATCH_NOT_FOUND_MESSAGE = "Lote de producción no encontrado"


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)


def to_day_start(value: datetime) -> datetime:
    """Truncate to the start of the (UTC) day."""
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def resolve_due_at(
    executed_at: datetime,
    explicit_due_at: Optional[datetime],
    frequency_days: Optional[int],
    failed: bool,
) -> Optional[datetime]:
    """
    Next due date for a new calibration or maintenance event.

    An explicit date wins; otherwise the configured frequency is added to
    the execution date; a failed outcome with neither is due again at once.
    """
    if explicit_due_at:
        return explicit_due_at
    if frequency_days:
        return add_days(executed_at, frequency_days)
    if failed:
        return executed_at
    return None


def _optional_strip(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


class QualityEquipmentService:
    """Equipment registry, calibration/maintenance history and due-date alerts"""

    def __init__(
        self,
        db: AsyncSession,
        log_event: AuditLogCallable,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.log_event = log_event
        self.clock = clock

    # Equipment registry
    async def create_equipment(self, payload: EquipmentCreate) -> Equipment:
        """Register equipment; the trimmed code must be unique"""
        code = payload.code.strip()
        await self._ensure_code_available(code)

        row = Equipment(
            code=code,
            name=payload.name.strip(),
            area=_optional_strip(payload.area),
            is_critical=payload.is_critical,
            status=payload.status,
            calibration_frequency_days=payload.calibration_frequency_days,
            maintenance_frequency_days=payload.maintenance_frequency_days,
            notes=payload.notes,
        )

        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("Equipment %s registered (id=%s)", row.code, row.id)

        await self.log_event(
            entity_type="equipment",
            entity_id=row.id,
            action="created",
            actor=payload.actor,
            metadata={
                "code": row.code,
                "status": row.status,
                "is_critical": row.is_critical,
            },
        )
        return row

    async def get_equipment(self, equipment_id: int) -> Equipment:
        """Get equipment by ID"""
        equipment = await self.db.get(Equipment, equipment_id)
        if not equipment:
            logger.warning("Equipment %s not found", equipment_id)
            raise NotFoundError(EQUIPMENT_NOT_FOUND_MESSAGE)
        return equipment

    async def update_equipment(
        self,
        equipment_id: int,
        payload: EquipmentUpdate,
        actor: Optional[str] = None,
    ) -> Equipment:
        """Apply the fields set on the payload and resync cached due dates"""
        row = await self.get_equipment(equipment_id)
        changes = payload.model_dump(exclude_unset=True)

        if changes.get("code") is not None:
            changes["code"] = changes["code"].strip()
            if changes["code"] != row.code:
                await self._ensure_code_available(changes["code"], exclude_id=row.id)
        if changes.get("name") is not None:
            changes["name"] = changes["name"].strip()
        if "area" in changes:
            changes["area"] = _optional_strip(changes["area"])

        for field, value in changes.items():
            if value is None and field in ("code", "name", "is_critical", "status"):
                continue
            setattr(row, field, value)

        await self._sync_equipment_due_dates(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("Equipment %s updated: %s", row.code, sorted(changes))

        await self.log_event(
            entity_type="equipment",
            entity_id=row.id,
            action="updated",
            actor=actor,
            metadata=changes,
        )
        return row

    async def list_equipment(
        self, filters: Optional[EquipmentFilters] = None
    ) -> List[Equipment]:
        """List equipment, critical units first, then by code"""
        filters = filters or EquipmentFilters()
        query = select(Equipment)
        if filters.status:
            query = query.where(Equipment.status == filters.status)
        if filters.is_critical is not None:
            query = query.where(Equipment.is_critical == filters.is_critical)

        query = query.order_by(Equipment.is_critical.desc(), Equipment.code.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    # Calibration / maintenance events
    async def add_calibration(
        self, equipment_id: int, payload: CalibrationCreate
    ) -> EquipmentCalibration:
        """Record a calibration and refresh the equipment's cached dates"""
        equipment = await self.get_equipment(equipment_id)
        executed_at = payload.executed_at or self.clock()
        due_at = resolve_due_at(
            executed_at,
            payload.due_at,
            equipment.calibration_frequency_days,
            failed=payload.result == CalibrationResult.REJECTED,
        )

        row = EquipmentCalibration(
            equipment_id=equipment.id,
            executed_at=executed_at,
            due_at=due_at,
            result=payload.result,
            certificate_ref=payload.certificate_ref,
            evidence_ref=payload.evidence_ref,
            performed_by=payload.performed_by or payload.actor,
            notes=payload.notes,
        )

        self.db.add(row)
        await self.db.flush()
        await self._sync_equipment_due_dates(equipment)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info(
            "Calibration recorded for %s (result=%s, due=%s)",
            equipment.code,
            row.result.value,
            row.due_at,
        )

        await self.log_event(
            entity_type="equipment_calibration",
            entity_id=row.id,
            action="created",
            actor=payload.actor,
            metadata={
                "equipment_id": equipment.id,
                "result": row.result,
                "executed_at": row.executed_at,
                "due_at": row.due_at,
            },
        )
        return row

    async def add_maintenance(
        self, equipment_id: int, payload: MaintenanceCreate
    ) -> EquipmentMaintenance:
        """Record a maintenance and refresh the equipment's cached dates"""
        equipment = await self.get_equipment(equipment_id)
        executed_at = payload.executed_at or self.clock()
        due_at = resolve_due_at(
            executed_at,
            payload.due_at,
            equipment.maintenance_frequency_days,
            failed=payload.result == MaintenanceResult.FAILED,
        )

        row = EquipmentMaintenance(
            equipment_id=equipment.id,
            executed_at=executed_at,
            due_at=due_at,
            maintenance_type=payload.maintenance_type,
            result=payload.result,
            evidence_ref=payload.evidence_ref,
            performed_by=payload.performed_by or payload.actor,
            notes=payload.notes,
        )

        self.db.add(row)
        await self.db.flush()
        await self._sync_equipment_due_dates(equipment)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info(
            "Maintenance recorded for %s (type=%s, result=%s, due=%s)",
            equipment.code,
            row.maintenance_type.value,
            row.result.value,
            row.due_at,
        )

        await self.log_event(
            entity_type="equipment_maintenance",
            entity_id=row.id,
            action="created",
            actor=payload.actor,
            metadata={
                "equipment_id": equipment.id,
                "type": row.maintenance_type,
                "result": row.result,
                "executed_at": row.executed_at,
                "due_at": row.due_at,
            },
        )
        return row

    # Batch usage
    async def register_batch_equipment_usage(
        self, payload: BatchEquipmentUsageCreate
    ) -> BatchEquipmentUsage:
        """Link an equipment unit to the production batch it was used on"""
        batch = await self.db.get(ProductionBatch, payload.production_batch_id)
        if not batch:
            logger.warning("Production batch %s not found", payload.production_batch_id)
            raise NotFoundError(BATCH_NOT_FOUND_MESSAGE)
        equipment = await self.get_equipment(payload.equipment_id)

        row = BatchEquipmentUsage(
            production_batch=batch,
            equipment=equipment,
            used_at=payload.used_at or self.clock(),
            used_by=payload.used_by or payload.actor,
            notes=payload.notes,
        )

        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("Equipment %s used on batch %s", equipment.code, batch.code)

        await self.log_event(
            entity_type="equipment_usage",
            entity_id=row.id,
            action="created",
            actor=payload.actor,
            metadata={
                "production_batch_id": batch.id,
                "equipment_id": equipment.id,
                "equipment_code": equipment.code,
                "used_at": row.used_at,
            },
        )
        return row

    async def list_batch_equipment_usage(
        self,
        production_batch_id: Optional[int] = None,
        equipment_id: Optional[int] = None,
    ) -> List[BatchEquipmentUsage]:
        query = select(BatchEquipmentUsage)
        if production_batch_id is not None:
            query = query.where(
                BatchEquipmentUsage.production_batch_id == production_batch_id
            )
        if equipment_id is not None:
            query = query.where(BatchEquipmentUsage.equipment_id == equipment_id)

        query = query.order_by(
            BatchEquipmentUsage.used_at.desc(), BatchEquipmentUsage.id.desc()
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_equipment_history(self, equipment_id: int) -> EquipmentHistory:
        """Equipment with its calibrations, maintenances and usages, newest first"""
        equipment = await self.get_equipment(equipment_id)

        calibrations = await self.db.execute(
            select(EquipmentCalibration)
            .where(EquipmentCalibration.equipment_id == equipment_id)
            .order_by(EquipmentCalibration.executed_at.desc(), EquipmentCalibration.id.desc())
        )
        maintenances = await self.db.execute(
            select(EquipmentMaintenance)
            .where(EquipmentMaintenance.equipment_id == equipment_id)
            .order_by(EquipmentMaintenance.executed_at.desc(), EquipmentMaintenance.id.desc())
        )
        usages = await self.list_batch_equipment_usage(equipment_id=equipment_id)

        return EquipmentHistory.model_validate(
            {
                "equipment": equipment,
                "calibrations": list(calibrations.scalars().all()),
                "maintenances": list(maintenances.scalars().all()),
                "usages": usages,
            },
            from_attributes=True,
        )

    # Alerting
    async def list_equipment_alerts(
        self, days_ahead: Optional[int] = None
    ) -> List[EquipmentAlert]:
        """
        Calibration and maintenance due dates that are overdue or fall within
        ``days_ahead`` days, compared at day granularity.

        Each active unit contributes up to two alerts. Overdue alerts come
        first, then the soonest due date, then equipment code.
        """
        if days_ahead is None:
            days_ahead = get_settings().equipment_alert_days_ahead
        if days_ahead < 0:
            raise ValidationError("days_ahead debe ser cero o positivo")

        result = await self.db.execute(
            select(Equipment)
            .where(Equipment.status == EquipmentStatus.ACTIVE)
            .order_by(Equipment.code.asc())
        )
        today = to_day_start(self.clock())
        alerts: List[EquipmentAlert] = []

        for row in result.scalars().all():
            candidates = (
                (AlertType.CALIBRATION, row.next_calibration_due_at),
                (AlertType.MAINTENANCE, row.next_maintenance_due_at),
            )
            for alert_type, due_at in candidates:
                if not due_at:
                    continue
                days_remaining = (to_day_start(due_at) - today).days
                if days_remaining > days_ahead:
                    continue

                alerts.append(
                    EquipmentAlert(
                        equipment_id=row.id,
                        equipment_code=row.code,
                        equipment_name=row.name,
                        is_critical=row.is_critical,
                        alert_type=alert_type,
                        due_at=due_at,
                        days_remaining=days_remaining,
                        severity=(
                            AlertSeverity.OVERDUE
                            if days_remaining < 0
                            else AlertSeverity.UPCOMING
                        ),
                    )
                )

        alerts.sort(
            key=lambda alert: (
                alert.severity != AlertSeverity.OVERDUE,
                alert.days_remaining,
                alert.equipment_code,
            )
        )
        logger.debug("%d equipment alerts within %d days", len(alerts), days_ahead)
        return alerts

    async def get_batch_blocking_issues(self, production_batch_id: int) -> List[str]:
        """Critical equipment used on the batch whose calibration or maintenance is overdue"""
        usages = await self.list_batch_equipment_usage(
            production_batch_id=production_batch_id
        )
        if not usages:
            return []

        now = self.clock()
        issues: List[str] = []

        for usage in usages:
            equipment = usage.equipment
            if not equipment.is_critical:
                continue

            if equipment.next_calibration_due_at and equipment.next_calibration_due_at < now:
                issue = f"equipo crítico {equipment.code} con calibración vencida"
                if issue not in issues:
                    issues.append(issue)
            if equipment.next_maintenance_due_at and equipment.next_maintenance_due_at < now:
                issue = f"equipo crítico {equipment.code} con mantenimiento vencido"
                if issue not in issues:
                    issues.append(issue)

        if issues:
            logger.debug("Batch %s blocked by: %s", production_batch_id, issues)
        return issues

    # Helpers
    async def _ensure_code_available(
        self, code: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(Equipment).where(Equipment.code == code)
        if exclude_id is not None:
            query = query.where(Equipment.id != exclude_id)
        existing = await self.db.execute(query)
        if existing.scalars().first():
            logger.warning("Equipment code %s already registered", code)
            raise ConflictError(DUPLICATE_CODE_MESSAGE)

    async def _sync_equipment_due_dates(self, equipment: Equipment) -> None:
        """Copy the latest calibration and maintenance dates onto the equipment"""
        latest_calibration = (
            await self.db.execute(
                select(EquipmentCalibration)
                .where(EquipmentCalibration.equipment_id == equipment.id)
                .order_by(
                    EquipmentCalibration.executed_at.desc(),
                    EquipmentCalibration.created_at.desc(),
                    EquipmentCalibration.id.desc(),
                )
                .limit(1)
            )
        ).scalars().first()
        latest_maintenance = (
            await self.db.execute(
                select(EquipmentMaintenance)
                .where(EquipmentMaintenance.equipment_id == equipment.id)
                .order_by(
                    EquipmentMaintenance.executed_at.desc(),
                    EquipmentMaintenance.created_at.desc(),
                    EquipmentMaintenance.id.desc(),
                )
                .limit(1)
            )
        ).scalars().first()

        equipment.last_calibration_at = (
            latest_calibration.executed_at if latest_calibration else None
        )
        equipment.next_calibration_due_at = (
            latest_calibration.due_at if latest_calibration else None
        )
        equipment.last_maintenance_at = (
            latest_maintenance.executed_at if latest_maintenance else None
        )
        equipment.next_maintenance_due_at = (
            latest_maintenance.due_at if latest_maintenance else None
        )
