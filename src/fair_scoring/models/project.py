"""Project model - a science-fair entry competing through the levels."""

import enum
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import Boolean, Enum, ForeignKey, Numeric, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..scoring.records import CompetitionLevel, ProjectRecord
from .base import Base, JSONType, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from .assignment import JudgeAssignment
    from .user import User


class ProjectStatus(str, enum.Enum):
    """Judging progress of a project as shown to its patron."""

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    REVIEW_PENDING = "Review Pending"
    WAITING = "Waiting for Judging"


class Project(UUIDMixin, TimestampMixin, Base):
    """A project registered by a patron."""

    __tablename__ = "projects"

    # Metadata
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    registration_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    students: Mapped[list] = mapped_column(JSONType, default=list, nullable=False)

    # Geography (strictly nested: school < zone < sub-county < county < region)
    school: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    zone: Mapped[str] = mapped_column(String(100), nullable=False)
    sub_county: Mapped[str] = mapped_column(String(100), nullable=False)
    county: Mapped[str] = mapped_column(String(100), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False)

    # Ownership
    patron_id: Mapped[Optional[UUID]] = mapped_column(
        Uuid(as_uuid=True), ForeignKey("users.id"), nullable=True, index=True
    )

    status: Mapped[ProjectStatus] = mapped_column(
        Enum(ProjectStatus, name="project_status", values_callable=lambda x: [e.value for e in x]),
        default=ProjectStatus.NOT_STARTED,
        nullable=False,
    )

    # Competition state: level only moves forward, elimination is terminal
    current_level: Mapped[CompetitionLevel] = mapped_column(
        Enum(CompetitionLevel, name="competition_level", values_callable=lambda x: [e.value for e in x]),
        default=CompetitionLevel.SUB_COUNTY,
        nullable=False,
    )
    is_eliminated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Manual Part A score set while breaking a tie
    override_score_a: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=5, scale=2), nullable=True
    )

    # Relationships
    patron: Mapped[Optional["User"]] = relationship("User", back_populates="projects")
    assignments: Mapped[List["JudgeAssignment"]] = relationship(
        "JudgeAssignment", back_populates="project"
    )

    def __repr__(self) -> str:
        return f"<Project '{self.title}' ({self.id})>"

    def to_record(self) -> ProjectRecord:
        return ProjectRecord(
            id=self.id,
            title=self.title,
            category=self.category,
            school=self.school,
            region=self.region,
            county=self.county,
            sub_county=self.sub_county,
            zone=self.zone,
            current_level=self.current_level,
            is_eliminated=self.is_eliminated,
            override_score_a=self.override_score_a,
        )
