import random

from alley import db
from alley.errors import DuplicateUser, StorageError
from alley.models import GameMap, Item, Npc, RoomCache, User
from alley.routes.engine import NO_IMPLEMENTATION
from alley.services.player_service import PlayerService
from alley.services.world_seeder import ITEM_ATTACK, ITEM_DEFENSE, WorldSeeder
from alley.storage import Storage
from tests.factories import FailingSession, create_maps, create_npcs, create_user


def test_index_initializes_world(client):
    r = client.get("/")
    assert r.status_code == 200
    data = r.get_json()
    assert set(data) == {"map", "item", "npc"}
    assert all(entry["ok"] for entry in data.values())
    assert GameMap.query.count() == Item.query.count() == Npc.query.count() == 1
    assert Npc.query.one().name == "Frank"


def test_single_seed_endpoints(client):
    assert client.get("/initializeMap").get_json()["name"] == "map_1"
    assert client.get("/initializeItem").get_json()["name"] == "gun_0"
    assert client.get("/initializeNpc").get_json()["name"] == "Frank"
    assert client.get("/CountMaps").get_json() == {"count": 1}


def test_create_new_user_twice(client):
    r1 = client.get("/createNewUser", query_string={"name": "Alice"})
    assert r1.status_code == 200
    assert r1.get_json()["created"] is True
    r2 = client.get("/createNewUser", query_string={"name": "Alice"})
    body = r2.get_json()
    assert body["created"] is False
    assert "already exists" in body["message"]
    assert User.query.filter_by(name="Alice").count() == 1


def test_create_new_user_requires_name(client):
    r = client.get("/createNewUser")
    assert r.status_code == 400


def test_set_user_and_full_information(client):
    create_user("Alice")
    r = client.get("/setUser", query_string={"name": "Alice", "lvl": 4, "money": 20})
    assert r.status_code == 200
    assert r.get_json()["level"] == 4
    info = client.get("/getFullInformation", query_string={"name": "Alice"}).get_json()
    assert info["level"] == 4 and info["money"] == 20 and info["hp"] == 1000


def test_full_information_for_npc_and_missing(client):
    create_npcs(1, prefix="Frank")
    r = client.get("/getFullInformation", query_string={"name": "Frank0", "user": "npc"})
    assert r.status_code == 200
    assert r.get_json()["name"] == "Frank0"
    missing = client.get("/getFullInformation", query_string={"name": "Ghost"})
    assert missing.status_code == 404
    assert missing.get_json()["kind"] == "user"


def test_various_input_move(client, test_app):
    test_app.config["RNG"] = random.Random(4)
    create_maps(10)
    create_npcs(3)
    create_user("Alice")
    r = client.get("/variousInput", query_string={"name": "Alice", "value": "move, north", "location": 1})
    assert r.status_code == 200
    data = r.get_json()
    assert 0 <= data["location"] < 11
    assert "npcInfo" in data and "mapInfo" in data
    assert GameMap.query.count() == 11
    # The typed line lands in the room cache without commas
    assert RoomCache.query.one().current_room_status == "move north"
    db.session.expire_all()
    assert User.query.filter_by(name="Alice").one().location == data["location"]


def test_various_input_move_without_npcs_is_404(client):
    create_user("Alice")
    r = client.get("/variousInput", query_string={"name": "Alice", "value": "move"})
    assert r.status_code == 404
    assert r.get_json()["kind"] == "npc"


def test_various_input_other_commands(client):
    create_user("Alice")
    stats = client.get("/variousInput", query_string={"name": "Alice", "value": "inv"}).get_json()
    assert stats["name"] == "Alice"
    look = client.get("/variousInput", query_string={"name": "Alice", "value": "look", "location": 1}).get_json()
    assert look["status"] == {"0": "Alice", "1": "look"}
    other = client.get("/variousInput", query_string={"name": "Alice", "value": "dance"}).get_json()
    assert other == {"msg": NO_IMPLEMENTATION}


def test_update_room(client):
    create_npcs(2, location=3)
    r = client.get("/updateRoom", query_string={"mapIndex": 3})
    assert r.get_json() == {"0": "npc0", "1": "npc1"}
    assert client.get("/updateRoom").status_code == 400


def test_find_by_index(client):
    alice = create_user("Alice")
    npc = create_npcs(1)[0]
    assert client.get("/findUserByIndex", query_string={"index": alice.id}).get_json() == {"name": "Alice"}
    assert client.get("/findNpcByIndex", query_string={"index": npc.id}).get_json() == {"name": "npc0"}
    assert client.get("/findNpcByIndex", query_string={"index": 999}).status_code == 404


def test_home(client):
    client.get("/")
    create_user("Alice")
    data = client.get("/home", query_string={"name": "Alice"}).get_json()
    assert data["name"] == "Alice"
    assert data["mapInfo"]
    assert data["npcInfo"] == ["Frank"]


def test_initialize_item_returns_item_fields(client):
    data = client.get("/initializeItem").get_json()
    assert data["msg"] == "Success initializing item values"
    assert data["location"] is None
    assert ITEM_ATTACK[0] <= data["attack"] < ITEM_ATTACK[1]
    assert ITEM_DEFENSE[0] <= data["defense"] < ITEM_DEFENSE[1]
    assert data["id"] == Item.query.one().id


def test_storage_failure_is_503(client, monkeypatch):
    broken = Storage(session=FailingSession(db.session, fail=("query",)))
    monkeypatch.setattr("alley.routes.engine.get_storage", lambda: broken)
    r = client.get("/CountMaps")
    assert r.status_code == 503
    assert r.get_json() == {"error": "storage unavailable"}


def test_duplicate_user_race_is_409(client, monkeypatch):
    def racing_create_user(self, name):
        raise DuplicateUser(name)

    monkeypatch.setattr(PlayerService, "create_user", racing_create_user)
    r = client.get("/createNewUser", query_string={"name": "Bob"})
    assert r.status_code == 409
    assert "Bob" in r.get_json()["error"]


def test_initialize_world_partial_failure_is_500(client, monkeypatch):
    def broken_seed_item(self):
        raise StorageError("item.create failed: database is locked")

    monkeypatch.setattr(WorldSeeder, "seed_item", broken_seed_item)
    r = client.get("/initializeWorld")
    assert r.status_code == 500
    data = r.get_json()
    assert data["item"]["ok"] is False
    assert "database is locked" in data["item"]["error"]
    assert data["map"]["ok"] is True and data["npc"]["ok"] is True
    assert Item.query.count() == 0
    assert GameMap.query.count() == Npc.query.count() == 1


def test_non_integer_parameters_are_400(client):
    create_user("Alice")
    r = client.get("/setUser", query_string={"name": "Alice", "lvl": "abc", "money": 50})
    assert r.status_code == 400
    assert "lvl" in r.get_json()["error"]
    db.session.expire_all()
    alice = User.query.filter_by(name="Alice").one()
    assert alice.level == 1 and alice.money == 1
    assert client.get("/updateRoom", query_string={"mapIndex": "x"}).status_code == 400
    assert client.get("/findUserByIndex", query_string={"index": "one"}).status_code == 400
    assert client.get("/variousInput", query_string={"name": "Alice", "value": "look", "location": "2a"}).status_code == 400
