"""
Quality audit trail.

Every state change in the quality modules is recorded as a
``QualityAuditEvent`` row and, when enabled, mirrored as a JSON line in a
daily-rotated audit file.
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi.encoders import jsonable_encoder
from sqlalchemy import JSON, Column, Index, Integer, String, Text, select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import Base
from .mixins import TimestampMixin

logger = logging.getLogger(__name__)

AUDIT_FILE_LOGGER_NAME = "audit_file"


class QualityAuditEvent(TimestampMixin, Base):
    """Database model for quality audit events."""

    __tablename__ = "quality_audit_event"

    id = Column(Integer, primary_key=True, index=True)
    entity_type = Column(String(100), nullable=False)
    entity_id = Column(String(100), nullable=False)
    action = Column(String(100), nullable=False)
    actor = Column(String(255))
    notes = Column(Text)
    # "metadata" is reserved on declarative classes
    event_metadata = Column("metadata", JSON)

    __table_args__ = (
        Index("idx_quality_audit_entity", "entity_type", "entity_id"),
    )


def get_audit_file_logger(settings: Optional[Settings] = None) -> logging.Logger:
    """Return the file audit logger, attaching its rotating handler once."""
    settings = settings or get_settings()
    file_logger = logging.getLogger(AUDIT_FILE_LOGGER_NAME)
    file_logger.setLevel(logging.INFO)

    if settings.audit_file_logging and not file_logger.handlers:
        log_dir = Path(settings.audit_log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = TimedRotatingFileHandler(
            filename=log_dir / "audit.log",
            when="midnight",
            interval=1,
            backupCount=365,  # Keep 1 year of logs
            encoding="utf-8",
        )
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        file_logger.addHandler(handler)

    return file_logger


class QualityAuditLogger:
    """
    Async audit sink bound to a database session.

    Instances are callable with the keyword signature the quality services
    expect, so the bound instance can be handed to a service directly.
    """

    def __init__(self, db: AsyncSession, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.file_logger = get_audit_file_logger(self.settings)

    async def __call__(
        self,
        *,
        entity_type: str,
        entity_id: Any,
        action: str,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> QualityAuditEvent:
        return await self.log_event(
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor=actor,
            notes=notes,
            metadata=metadata,
        )

    async def log_event(
        self,
        *,
        entity_type: str,
        entity_id: Any,
        action: str,
        actor: Optional[str] = None,
        notes: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> QualityAuditEvent:
        """Persist one audit event and mirror it to the audit file."""
        safe_metadata = jsonable_encoder(metadata) if metadata is not None else None
        event = QualityAuditEvent(
            entity_type=entity_type,
            entity_id=str(entity_id),
            action=action,
            actor=actor,
            notes=notes,
            event_metadata=safe_metadata,
        )
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)

        if self.settings.audit_file_logging:
            self.file_logger.info(
                "AUDIT: %s",
                json.dumps(
                    {
                        "entity_type": entity_type,
                        "entity_id": str(entity_id),
                        "action": action,
                        "actor": actor,
                        "notes": notes,
                        "metadata": safe_metadata,
                    },
                    ensure_ascii=False,
                ),
            )

        return event

    async def list_audit_events(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[Any] = None,
        limit: int = 200,
    ) -> List[QualityAuditEvent]:
        """Newest audit events first, optionally narrowed to one entity."""
        query = select(QualityAuditEvent)
        if entity_type:
            query = query.where(QualityAuditEvent.entity_type == entity_type)
        if entity_id is not None:
            query = query.where(QualityAuditEvent.entity_id == str(entity_id))

        query = query.order_by(
            QualityAuditEvent.created_at.desc(), QualityAuditEvent.id.desc()
        ).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
