# backend/modules/equipment/models/equipment_models.py

from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from core.database import Base
from core.mixins import TimestampMixin
from modules.production.models import ProductionBatch  # noqa: F401


class EquipmentStatus(str, Enum):
    """Status of equipment"""

    ACTIVE = "active"
    INACTIVE = "inactive"


class CalibrationResult(str, Enum):
    """Outcome of a calibration"""

    APPROVED = "approved"
    REJECTED = "rejected"


class MaintenanceType(str, Enum):
    """Type of maintenance"""

    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"


class MaintenanceResult(str, Enum):
    """Outcome of a maintenance intervention"""

    COMPLETED = "completed"
    WITH_OBSERVATIONS = "with_observations"
    FAILED = "failed"


class Equipment(TimestampMixin, Base):
    """Production and quality equipment subject to calibration and maintenance"""

    __tablename__ = "equipment"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    area = Column(String(200))
    is_critical = Column(Boolean, default=False, nullable=False, index=True)
    status = Column(
        SQLEnum(EquipmentStatus),
        default=EquipmentStatus.ACTIVE,
        nullable=False,
        index=True,
    )

    calibration_frequency_days = Column(Integer)
    maintenance_frequency_days = Column(Integer)

    # Cached from the latest calibration / maintenance event
    last_calibration_at = Column(DateTime)
    next_calibration_due_at = Column(DateTime)
    last_maintenance_at = Column(DateTime)
    next_maintenance_due_at = Column(DateTime)

    notes = Column(Text)


class EquipmentCalibration(TimestampMixin, Base):
    """Calibration event recorded against an equipment unit"""

    __tablename__ = "equipment_calibration"

    id = Column(Integer, primary_key=True, index=True)
    equipment_id = Column(
        Integer,
        ForeignKey("equipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    executed_at = Column(DateTime, nullable=False)
    due_at = Column(DateTime, index=True)
    result = Column(
        SQLEnum(CalibrationResult),
        default=CalibrationResult.APPROVED,
        nullable=False,
    )
    certificate_ref = Column(String(255))
    evidence_ref = Column(String(255))
    performed_by = Column(String(255))
    notes = Column(Text)

    __table_args__ = (
        Index("idx_calibration_equipment_executed", "equipment_id", "executed_at"),
    )


class EquipmentMaintenance(TimestampMixin, Base):
    """Maintenance event recorded against an equipment unit"""

    __tablename__ = "equipment_maintenance"

    id = Column(Integer, primary_key=True, index=True)
    equipment_id = Column(
        Integer,
        ForeignKey("equipment.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    executed_at = Column(DateTime, nullable=False)
    due_at = Column(DateTime, index=True)
    maintenance_type = Column(
        "type",
        SQLEnum(MaintenanceType),
        default=MaintenanceType.PREVENTIVE,
        nullable=False,
    )
    result = Column(
        SQLEnum(MaintenanceResult),
        default=MaintenanceResult.COMPLETED,
        nullable=False,
    )
    evidence_ref = Column(String(255))
    performed_by = Column(String(255))
    notes = Column(Text)

    __table_args__ = (
        Index("idx_maintenance_equipment_executed", "equipment_id", "executed_at"),
    )


class BatchEquipmentUsage(TimestampMixin, Base):
    """Use of an equipment unit while producing a batch"""

    __tablename__ = "batch_equipment_usage"

    id = Column(Integer, primary_key=True, index=True)
    production_batch_id = Column(
        Integer,
        ForeignKey("production_batch.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    equipment_id = Column(
        Integer,
        ForeignKey("equipment.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    used_at = Column(DateTime, nullable=False)
    used_by = Column(String(255))
    notes = Column(Text)

    # Async sessions cannot lazy-load, so both sides load with the row
    equipment = relationship("Equipment", lazy="selectin")
    production_batch = relationship("ProductionBatch", lazy="selectin")
