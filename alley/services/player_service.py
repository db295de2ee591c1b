"""Player-facing operations: account creation, stats and room status.

Lookups raise NotFound instead of returning placeholders; the request shell
decides how to present a missing record.
"""

from __future__ import annotations

from typing import Dict, Optional

from alley.errors import DuplicateUser, NotFound
from alley.logging_utils import get_logger
from alley.models import DEFAULT_USER_STATS, RoomCache, User
from alley.storage import Storage

log = get_logger("alley.players")

# Fields a client may overwrite through set_user
EDITABLE_USER_FIELDS = ("level", "money", "exp", "attack", "defense", "description", "location", "hp")


def map_name_for(location: int) -> str:
    return f"map_{location}"


class PlayerService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def create_user(self, name: str) -> bool:
        """Create `name` with default stats; False if the name is taken.

        Only a confirmed absence leads to creation. A StorageError from the
        existence check propagates instead of being read as "absent".
        """
        try:
            self.storage.users.find_by_name(name)
            log.info(event="user_exists", name=name)
            return False
        except NotFound:
            pass
        try:
            user_id = self.storage.users.create(User(name=name, **DEFAULT_USER_STATS))
        except DuplicateUser:
            # Lost the race against a concurrent request for the same name
            log.warn(event="user_create_race", name=name)
            return False
        log.info(event="user_created", name=name, user_id=user_id)
        return True

    def get_stats(self, name: str, kind: str = "user") -> dict:
        if kind == "npc":
            return self.storage.npcs.find_by_name(name).to_dict()
        if kind == "user":
            return self.storage.users.find_by_name(name).to_dict()
        raise ValueError(f"unknown entity kind {kind!r}")

    def set_user(self, name: str, /, **fields) -> dict:
        unknown = set(fields) - set(EDITABLE_USER_FIELDS)
        if unknown:
            raise ValueError(f"cannot set {', '.join(sorted(unknown))}")
        changes = {k: v for k, v in fields.items() if v is not None}
        user = self.storage.users.find_by_name(name)
        if changes:
            self.storage.users.update(user, **changes)
            log.info(event="user_updated", name=name, fields=",".join(sorted(changes)))
        return user.to_dict()

    def count_maps(self) -> int:
        return self.storage.maps.count()

    def npcs_in_location(self, location: int) -> Dict[int, str]:
        return {npc.id: npc.name for npc in self.storage.npcs.find_by_location(location)}

    def users_in_location(self, location: int) -> Dict[int, str]:
        return {user.id: user.name for user in self.storage.users.find_by_location(location)}

    def map_status(self, map_index: int) -> Dict[int, str]:
        """Ordinal listing of who is in a room, followed by its cached messages."""
        entries = list(self.users_in_location(map_index).values())
        entries.extend(self.npcs_in_location(map_index).values())
        entries.extend(row.current_room_status for row in self.storage.cache.find_by_map_name(map_name_for(map_index)))
        return dict(enumerate(entries))

    def record_room_message(self, location: int, message: str) -> Optional[int]:
        text = message.replace(",", "").strip()
        if not text:
            return None
        return self.storage.cache.create(RoomCache(map_name=map_name_for(location), current_room_status=text))

    def describe_location(self, location: int) -> dict:
        """Map description and occupancy; a location without a map has no description."""
        maps = self.storage.maps.find_by_location(location)
        return {
            "location": location,
            "map": maps[0].to_dict(**self.storage.occupancy(location)) if maps else None,
            "npcs": list(self.npcs_in_location(location).values()),
        }

    def user_name_by_index(self, index: int) -> str:
        return self.storage.users.get(index).name

    def npc_name_by_index(self, index: int) -> str:
        return self.storage.npcs.get(index).name

    def npc_by_name(self, name: str) -> dict:
        return self.storage.npcs.find_by_name(name).to_dict()
