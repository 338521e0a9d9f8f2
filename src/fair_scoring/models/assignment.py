"""JudgeAssignment model - one judge scoring one section of one project."""

from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Index, Numeric, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..scoring.records import AssignmentRecord, AssignmentState, AssignmentStatus, Section
from .base import Base, JSONType, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from .project import Project
    from .user import User


def _enum(enum_cls, name: str) -> Enum:
    return Enum(enum_cls, name=name, values_callable=lambda x: [e.value for e in x])


class JudgeAssignment(UUIDMixin, TimestampMixin, Base):
    """
    A judge's assignment to a section of a project.

    Re-assigning archives the previous assignment instead of deleting it, so
    the audit trail of who scored what is preserved. Only active
    assignments count towards scores.
    """

    __tablename__ = "judge_assignments"

    project_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("projects.id"), nullable=False, index=True
    )
    judge_id: Mapped[UUID] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True
    )
    section: Mapped[Section] = mapped_column(_enum(Section, "judging_section"), nullable=False)

    status: Mapped[AssignmentStatus] = mapped_column(
        _enum(AssignmentStatus, "assignment_status"),
        default=AssignmentStatus.NOT_STARTED,
        nullable=False,
    )
    state: Mapped[AssignmentState] = mapped_column(
        _enum(AssignmentState, "assignment_state"),
        default=AssignmentState.ACTIVE,
        nullable=False,
    )

    # 0-30 for Part A, 0-50 for Part B & C
    score: Mapped[Optional[Decimal]] = mapped_column(Numeric(precision=5, scale=2), nullable=True)
    # Criterion id (as string key) -> awarded score
    score_breakdown: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    comments: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    recommendations: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    project: Mapped["Project"] = relationship("Project", back_populates="assignments")
    judge: Mapped["User"] = relationship("User", back_populates="assignments")

    __table_args__ = (
        Index("ix_assignment_project_section", "project_id", "section"),
        Index("ix_assignment_judge_state", "judge_id", "state"),
    )

    def __repr__(self) -> str:
        return f"<JudgeAssignment {self.section.value} of {self.project_id} by {self.judge_id}>"

    @property
    def is_completed(self) -> bool:
        return self.status == AssignmentStatus.COMPLETED

    def to_record(self) -> AssignmentRecord:
        breakdown = {
            int(k): Decimal(str(v)) for k, v in (self.score_breakdown or {}).items()
        }
        return AssignmentRecord(
            id=self.id,
            project_id=self.project_id,
            judge_id=self.judge_id,
            section=self.section,
            status=self.status,
            score=self.score,
            score_breakdown=breakdown,
            state=self.state,
            created_at=self.created_at,
        )
