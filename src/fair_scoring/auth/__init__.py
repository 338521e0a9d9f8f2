"""Authentication and authorization."""

from .api_keys import (
    AdminUser,
    CoordinatorUser,
    CurrentUser,
    OptionalUser,
    generate_api_key,
    get_current_user,
)

__all__ = [
    "generate_api_key",
    "get_current_user",
    "CurrentUser",
    "OptionalUser",
    "AdminUser",
    "CoordinatorUser",
]
