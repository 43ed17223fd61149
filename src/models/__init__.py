from src.models.base import Base
from src.models.coin import Coin

__all__ = [
    "Base",
    "Coin",
]
