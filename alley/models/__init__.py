# Model package init
from .models import DEFAULT_USER_STATS, GameMap, Item, Npc, RoomCache, User  # noqa: F401 re-export

__all__ = [
    "DEFAULT_USER_STATS",
    "GameMap",
    "Item",
    "Npc",
    "RoomCache",
    "User",
]
