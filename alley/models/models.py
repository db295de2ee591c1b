"""
project: The Alley
module: models.py
License: MIT

Database models used by The Alley.

Notes:
- `name` is the external identifier for users and NPCs. Only user names are
    unique; generated NPC names may repeat.
- `location` columns hold a GameMap id by convention; there is no foreign key
    so NPCs and users can be moved to a location before its map is seeded.
"""

from alley import db

# Defaults for a freshly created player
DEFAULT_USER_STATS = {
    "level": 1,
    "money": 1,
    "exp": 1,
    "attack": 1,
    "defense": 1,
    "description": "A weak vagrant with no weapon",
    "location": 1,
    "hp": 1000,
}


class User(db.Model):
    """A player, created on first reference by name.

    Attributes:
        name: Unique player handle.
        level, money, exp: Progression counters.
        attack, defense, hp: Combat stats.
        location: GameMap id the player currently stands in.
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), unique=True, nullable=False)
    level = db.Column(db.Integer, nullable=False, default=1)
    money = db.Column(db.Integer, nullable=False, default=1)
    exp = db.Column(db.Integer, nullable=False, default=1)
    attack = db.Column(db.Integer, nullable=False, default=1)
    defense = db.Column(db.Integer, nullable=False, default=1)
    description = db.Column(db.Text, nullable=True)
    location = db.Column(db.Integer, nullable=False, default=1, index=True)
    hp = db.Column(db.Integer, nullable=False, default=1000)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "level": self.level,
            "money": self.money,
            "exp": self.exp,
            "attack": self.attack,
            "defense": self.defense,
            "description": self.description,
            "location": self.location,
            "hp": self.hp,
        }


class GameMap(db.Model):
    """A room of the world. Names run map_1, map_2, ... in creation order."""

    __tablename__ = "map"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(40), nullable=False)
    description = db.Column(db.Text, nullable=False)

    def to_dict(self, items: int = 0, npcs: int = 0, users: int = 0):
        # Occupancy is derived by the caller from location queries
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "items": items,
            "npcs": npcs,
            "users": users,
        }


class Item(db.Model):
    """Equipment granting attack/defense bonuses.

    Seeded items are not placed in any room (`location` is NULL).
    """

    __tablename__ = "items"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False)
    description = db.Column(db.Text, nullable=True)
    attack = db.Column(db.Integer, nullable=False, default=0)
    defense = db.Column(db.Integer, nullable=False, default=0)
    location = db.Column(db.Integer, nullable=True, index=True)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "attack": self.attack,
            "defense": self.defense,
            "location": self.location,
        }


class Npc(db.Model):
    __tablename__ = "npc"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    attack = db.Column(db.Integer, nullable=False, default=0)
    defense = db.Column(db.Integer, nullable=False, default=0)
    location = db.Column(db.Integer, nullable=False, default=2, index=True)
    hp = db.Column(db.Integer, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "attack": self.attack,
            "defense": self.defense,
            "location": self.location,
            "hp": self.hp,
        }


class RoomCache(db.Model):
    """Free-text messages typed into a room, shown in its status listing."""

    __tablename__ = "cache"

    id = db.Column(db.Integer, primary_key=True)
    map_name = db.Column(db.String(40), nullable=False, index=True)
    current_room_status = db.Column(db.Text, nullable=False)
