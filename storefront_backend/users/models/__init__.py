# users/models/__init__.py

from .address import UserAddress
from .profile import CustomerProfile
from .user import User, UserManager

__all__ = [
    "User",
    "UserManager",
    "CustomerProfile",
    "UserAddress",
]
