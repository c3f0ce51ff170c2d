from .base import Base
from .property import Property
from .favorite import Favorite
from .recommendation import Recommendation
from .user import User

__all__ = [
    "Base",
    "Property",
    "Favorite",
    "Recommendation",
    "User",
]
