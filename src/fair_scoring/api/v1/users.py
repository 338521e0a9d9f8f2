"""User API endpoints."""

from fastapi import APIRouter, HTTPException, status

from ..deps import UserServiceDep
from ...auth.api_keys import CurrentUser, OptionalUser
from ...schemas.user import UserCreate, UserRegistrationResponse, UserResponse
from ...scoring.records import UserRole
from ...services.user_service import EmailAlreadyRegisteredError

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/register",
    response_model=UserRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register_user(
    data: UserCreate,
    service: UserServiceDep,
    caller: OptionalUser,
):
    """
    Create a portal user.

    Users are created by admins. The very first account of a fresh install
    must be a Super Admin and needs no API key. Returns the new user's API
    key, which is shown only once.
    """
    if caller is None:
        if await service.count_users() > 0:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="API key required",
                headers={"WWW-Authenticate": "ApiKey"},
            )
        if data.role != UserRole.SUPER_ADMIN:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="The first account must be a Super Admin",
            )
    elif not caller.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    try:
        user, api_key = await service.create_user(data)
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Email '{data.email}' is already registered",
        )

    return UserRegistrationResponse(
        user_id=user.id,
        name=user.name,
        role=user.role,
        api_key=api_key,
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(user: CurrentUser):
    """Get the authenticated user's profile."""
    return user
