"""User model - admins, judges, coordinators and patrons of the portal."""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..scoring.records import JudgeRecord, UserRole
from .base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from .assignment import JudgeAssignment
    from .project import Project

ADMIN_ROLES = (
    UserRole.SUPER_ADMIN,
    UserRole.NATIONAL_ADMIN,
    UserRole.REGIONAL_ADMIN,
    UserRole.COUNTY_ADMIN,
    UserRole.SUB_COUNTY_ADMIN,
)


class User(UUIDMixin, TimestampMixin, Base):
    """A portal user. Geography fields scope what an admin or patron sees."""

    __tablename__ = "users"

    # Identification
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role", values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )

    # Authentication
    api_key_hash: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Affiliation and geography
    school: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    region: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    sub_county: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    zone: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Coordinators arbitrate within a single category
    coordinated_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    last_active_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    assignments: Mapped[List["JudgeAssignment"]] = relationship(
        "JudgeAssignment", back_populates="judge", lazy="dynamic"
    )
    projects: Mapped[List["Project"]] = relationship(
        "Project", back_populates="patron", lazy="dynamic"
    )

    def __repr__(self) -> str:
        return f"<User {self.name} ({self.role.value})>"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def is_coordinator(self) -> bool:
        return self.role == UserRole.COORDINATOR

    def to_judge_record(self) -> JudgeRecord:
        return JudgeRecord(
            id=self.id,
            name=self.name,
            school=self.school,
            coordinated_category=self.coordinated_category if self.is_coordinator else None,
        )
