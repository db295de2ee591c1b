"""World bootstrap: seeding maps, items and NPCs.

Each `seed_*` call adds exactly one record of its kind, so repeated calls
grow the world. Stats are drawn as reals from a half-open range and truncated
toward zero, giving integers strictly below the upper bound.

`initialize_world` runs the three seeders in sequence and keeps going when one
of them fails; every outcome is reported back to the caller.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Optional

from alley.errors import AlleyError
from alley.logging_utils import get_logger
from alley.models import GameMap, Item, Npc
from alley.services.name_generator import generate_name
from alley.storage import Storage

log = get_logger("alley.seeder")

MAP_DESCRIPTIONS = {
    "start": (
        "A narrow alley behind a shuttered bar. Rain drips from a broken gutter and a single "
        "lamp flickers over the puddles. This is where everyone starts."
    ),
    "even": "A dead end stacked with rotting crates. Something shuffles behind them in the dark.",
    "odd": "A cramped passage between two brick walls, lit only by the glow of a distant street.",
}
ITEM_PREFIX = "gun_"
ITEM_DESCRIPTION = "A battered pistol with a loose grip. Better than bare hands."
FRANK = {
    "name": "Frank",
    "description": "Frank, the old bouncer who never left. Scarred knuckles and a long memory.",
    "location": 1,
    "attack": 75,
    "defense": 75,
    "hp": 3000,
}
NPC_DESCRIPTION = "A drifter who lives off the alley, wary of strangers."
NPC_LOCATION = 2

# Half-open ranges [low, high) for sampled stats
ITEM_ATTACK = (1, 10)
ITEM_DEFENSE = (1, 5)
NPC_ATTACK = (1, 50)
NPC_DEFENSE = (1, 10)
NPC_HP = (1, 1000)


def draw_stat(rng, low: float, high: float) -> int:
    """Uniform real in [low, high) truncated toward zero."""
    return int(low + rng.random() * (high - low))


def map_description(existing: int) -> str:
    if existing == 0:
        return MAP_DESCRIPTIONS["start"]
    if existing % 2 == 0:
        return MAP_DESCRIPTIONS["even"]
    return MAP_DESCRIPTIONS["odd"]


@dataclass
class SeedResult:
    kind: str
    id: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self):
        return {"ok": self.ok, "id": self.id, "error": self.error}


class WorldSeeder:
    def __init__(self, storage: Storage, rng: Optional[random.Random] = None):
        self.storage = storage
        self.rng = rng or random.Random()

    def seed_map(self) -> GameMap:
        existing = self.storage.maps.count()
        game_map = GameMap(name=f"map_{existing + 1}", description=map_description(existing))
        self.storage.maps.create(game_map)
        log.info(event="map_seeded", map_id=game_map.id, name=game_map.name)
        return game_map

    def seed_item(self) -> Item:
        attack = draw_stat(self.rng, *ITEM_ATTACK)
        defense = draw_stat(self.rng, *ITEM_DEFENSE)
        item = Item(
            name=f"{ITEM_PREFIX}{self.storage.items.count()}",
            description=ITEM_DESCRIPTION,
            attack=attack,
            defense=defense,
        )
        self.storage.items.create(item)
        log.info(event="item_seeded", item_id=item.id, name=item.name, attack=attack, defense=defense)
        return item

    def seed_npc(self) -> Npc:
        if self.storage.npcs.count() == 0:
            npc = Npc(**FRANK)
        else:
            npc = Npc(
                name=generate_name(self.rng),
                description=NPC_DESCRIPTION,
                location=NPC_LOCATION,
                attack=draw_stat(self.rng, *NPC_ATTACK),
                defense=draw_stat(self.rng, *NPC_DEFENSE),
                hp=draw_stat(self.rng, *NPC_HP),
            )
        self.storage.npcs.create(npc)
        log.info(event="npc_seeded", npc_id=npc.id, name=npc.name, location=npc.location)
        return npc

    def initialize_world(self) -> Dict[str, SeedResult]:
        """Seed one map, one item and one NPC; a failure in one does not stop the rest."""
        report = {}
        for kind, seed in (("map", self.seed_map), ("item", self.seed_item), ("npc", self.seed_npc)):
            try:
                report[kind] = SeedResult(kind, id=seed().id)
            except AlleyError as exc:
                log.error(event="seed_failed", kind=kind, error=exc)
                report[kind] = SeedResult(kind, error=str(exc))
        return report
