# backend/modules/production/models/production_models.py

from enum import Enum

from sqlalchemy import Column, Enum as SQLEnum, Integer, String, Text

from core.database import Base
from core.mixins import TimestampMixin


class ProductionBatchStatus(str, Enum):
    """Lifecycle of a production batch"""

    IN_PROGRESS = "in_progress"
    QC_PENDING = "qc_pending"
    READY = "ready"
    RELEASED = "released"


class ProductionBatch(TimestampMixin, Base):
    """
    Production batch as seen by the quality modules.

    The production order workflow owns these rows; only the columns needed
    for traceability are declared here.
    """

    __tablename__ = "production_batch"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), nullable=False, unique=True, index=True)
    planned_qty = Column(Integer, nullable=False, default=0)
    produced_qty = Column(Integer, nullable=False, default=0)
    status = Column(
        SQLEnum(ProductionBatchStatus),
        default=ProductionBatchStatus.IN_PROGRESS,
        nullable=False,
    )
    notes = Column(Text)
