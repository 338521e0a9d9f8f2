"""AuditLog model - record of irreversible admin actions."""

import enum
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Enum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from ..utils.clock import utcnow
from .base import Base, JSONType


class AuditAction(str, enum.Enum):
    """Types of audited actions."""

    PUBLISH_RESULTS = "publish_results"
    RESOLVE_TIE = "resolve_tie"
    ARBITRATION_SCORE = "arbitration_score"
    REASSIGN_JUDGE = "reassign_judge"


class AuditLog(Base):
    """
    An entry in the audit trail.

    Rows are append-only. Publishing results has no undo, so the log is the
    only record of who closed a round and what it decided.
    """

    __tablename__ = "audit_logs"

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    action: Mapped[AuditAction] = mapped_column(
        Enum(AuditAction, name="audit_action", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    performing_user_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    target: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Geographic scope of the action
    level: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sub_county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    details: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<AuditLog {self.action.value} by {self.performing_user_id}>"
