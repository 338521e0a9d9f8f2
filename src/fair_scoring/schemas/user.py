"""User schemas for API validation."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from ..scoring.records import UserRole
from ..scoring.rubric import VALID_CATEGORIES


class UserCreate(BaseModel):
    """Schema for an admin creating a portal user."""

    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    role: UserRole
    school: Optional[str] = Field(None, max_length=255)
    region: Optional[str] = Field(None, max_length=100)
    county: Optional[str] = Field(None, max_length=100)
    sub_county: Optional[str] = Field(None, max_length=100)
    zone: Optional[str] = Field(None, max_length=100)
    coordinated_category: Optional[str] = None

    @model_validator(mode="after")
    def check_role_fields(self) -> "UserCreate":
        if self.role == UserRole.COORDINATOR:
            if self.coordinated_category not in VALID_CATEGORIES:
                raise ValueError("Coordinators need a valid coordinated_category")
        elif self.coordinated_category is not None:
            raise ValueError("Only coordinators have a coordinated_category")

        required = {
            UserRole.REGIONAL_ADMIN: ("region",),
            UserRole.COUNTY_ADMIN: ("region", "county"),
            UserRole.SUB_COUNTY_ADMIN: ("region", "county", "sub_county"),
        }.get(self.role, ())
        missing = [f for f in required if not getattr(self, f)]
        if missing:
            raise ValueError(f"{self.role.value} requires: {', '.join(missing)}")
        return self


class UserResponse(BaseModel):
    """User profile."""

    id: UUID
    name: str
    email: str
    role: UserRole
    school: Optional[str]
    region: Optional[str]
    county: Optional[str]
    sub_county: Optional[str]
    zone: Optional[str]
    coordinated_category: Optional[str]
    created_at: datetime

    model_config = {"from_attributes": True}


class UserRegistrationResponse(BaseModel):
    """Response after a user is created."""

    user_id: UUID
    name: str
    role: UserRole
    api_key: str = Field(..., description="API key (shown only once)")
    message: str = "User created. Hand over the API key securely - it won't be shown again."
