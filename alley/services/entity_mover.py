"""One "move" tick of the world simulation.

A tick may grow the world by one map (until the growth limit is reached),
then draws a destination location and an NPC by ordinal position and moves
both that NPC and the acting player there in a single transaction.

The destination is drawn from [0, map_count) while map ids start at 1, so a
draw of 0 parks entities outside every seeded map. Callers that render a room
for the destination must tolerate a missing map.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from alley.logging_utils import get_logger
from alley.services.world_seeder import WorldSeeder
from alley.storage import Storage

log = get_logger("alley.mover")

DEFAULT_MAP_GROWTH_LIMIT = 11


@dataclass
class MoveOutcome:
    destination: int
    npc_id: int
    npc_name: str
    map_seeded: bool


class EntityMover:
    def __init__(
        self,
        storage: Storage,
        seeder: Optional[WorldSeeder] = None,
        rng: Optional[random.Random] = None,
        growth_limit: int = DEFAULT_MAP_GROWTH_LIMIT,
    ):
        self.storage = storage
        self.rng = rng or random.Random()
        self.seeder = seeder or WorldSeeder(storage, rng=self.rng)
        self.growth_limit = growth_limit

    def tick(self, actor_name: str) -> MoveOutcome:
        """Run a move tick and describe what happened.

        Raises EntityNotFound when there is no NPC to move and NotFound when
        the actor does not exist; neither case writes any location.
        """
        seeded = False
        if self.storage.maps.count() < self.growth_limit:
            self.seeder.seed_map()
            seeded = True
        map_count = self.storage.maps.count()
        destination = int(self.rng.random() * map_count)
        npc_index = int(self.rng.random() * self.storage.npcs.count())

        npc = self.storage.npcs.nth(npc_index)
        actor = self.storage.users.find_by_name(actor_name)
        with self.storage.transaction():
            self.storage.npcs.update(npc, location=destination)
            self.storage.users.update(actor, location=destination)
        log.info(
            event="entities_moved",
            actor=actor_name,
            npc=npc.name,
            npc_id=npc.id,
            destination=destination,
            map_count=map_count,
        )
        return MoveOutcome(destination=destination, npc_id=npc.id, npc_name=npc.name, map_seeded=seeded)

    def move(self, actor_name: str) -> int:
        """Return the new location id of `actor_name` after one tick."""
        return self.tick(actor_name).destination
