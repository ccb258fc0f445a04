# users/models/__init__.py
from .base import CustomUser, UserRole
from .swap_profile import CommunicationPreference, SwapProfile

__all__ = [
    "CustomUser",
    "UserRole",
    "SwapProfile",
    "CommunicationPreference",
]
