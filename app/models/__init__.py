from app.models.user import User
from app.models.weight_entry import WeightEntry

__all__ = [
    "User",
    "WeightEntry",
]
