"""
project: The Alley
module: engine.py
License: MIT

In-game engine endpoints: world bootstrap, player creation/update, the
free-text command box and room status lookups.

Services are built per request around a shared `Storage`; an injected
`random.Random` can be supplied through `app.config["RNG"]` (tests use this
for deterministic draws).
"""

from flask import Blueprint, current_app, jsonify, request

from alley.errors import DuplicateUser, NotFound, StorageError
from alley.logging_utils import get_logger
from alley.services.entity_mover import EntityMover
from alley.services.player_service import PlayerService
from alley.services.world_seeder import WorldSeeder
from alley.storage import get_storage

bp_engine = Blueprint("engine", __name__)
log = get_logger("alley.http")

NO_IMPLEMENTATION = "No implementation for that string yet"


def _seeder() -> WorldSeeder:
    return WorldSeeder(get_storage(), rng=current_app.config.get("RNG"))


def _mover() -> EntityMover:
    return EntityMover(
        get_storage(),
        rng=current_app.config.get("RNG"),
        growth_limit=current_app.config.get("MAP_GROWTH_LIMIT", 11),
    )


def _players() -> PlayerService:
    return PlayerService(get_storage())


def _int_arg(key: str, default=None):
    """Integer query parameter; an unparsable value is a 400, not a silent default."""
    raw = request.args.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"parameter '{key}' must be an integer") from None


def _missing(param: str):
    return jsonify({"error": f"missing required parameter '{param}'"}), 400


@bp_engine.errorhandler(NotFound)
def _not_found(exc):
    return jsonify({"error": str(exc), "kind": exc.kind}), 404


@bp_engine.errorhandler(DuplicateUser)
def _duplicate(exc):
    return jsonify({"error": str(exc)}), 409


@bp_engine.errorhandler(StorageError)
def _storage_failed(exc):
    log.error(event="storage_error", path=request.path, error=exc)
    return jsonify({"error": "storage unavailable"}), 503


@bp_engine.errorhandler(ValueError)
def _bad_value(exc):
    return jsonify({"error": str(exc)}), 400


# --- World bootstrap -------------------------------------------------------------------


@bp_engine.route("/")
@bp_engine.route("/initializeWorld")
def initialize_world():
    report = _seeder().initialize_world()
    body = {kind: result.to_dict() for kind, result in report.items()}
    status = 200 if all(r.ok for r in report.values()) else 500
    return jsonify(body), status


@bp_engine.route("/initializeMap")
def initialize_map():
    game_map = _seeder().seed_map()
    return jsonify({"msg": "Success initializing map values", "id": game_map.id, "name": game_map.name})


@bp_engine.route("/initializeItem")
def initialize_item():
    item = _seeder().seed_item()
    return jsonify({"msg": "Success initializing item values", **item.to_dict()})


@bp_engine.route("/initializeNpc")
def initialize_npc():
    npc = _seeder().seed_npc()
    return jsonify({"msg": "Success initializing npc values", "id": npc.id, "name": npc.name})


@bp_engine.route("/CountMaps")
def count_maps():
    return jsonify({"count": _players().count_maps()})


# --- Players ---------------------------------------------------------------------------


@bp_engine.route("/createNewUser")
def create_new_user():
    name = (request.args.get("name") or "").strip()
    if not name:
        return _missing("name")
    if _players().create_user(name):
        return jsonify({"created": True, "message": f"New User Created name {name} created...."})
    return jsonify(
        {"created": False, "message": f"User already exists, logging in using {name} and redirect to home"}
    )


@bp_engine.route("/setUser")
def set_user():
    name = request.args.get("name")
    if not name:
        return _missing("name")
    fields = {
        "level": _int_arg("lvl"),
        "money": _int_arg("money"),
        "exp": _int_arg("exp"),
        "attack": _int_arg("attack"),
        "defense": _int_arg("defense"),
        "description": request.args.get("description"),
        "location": _int_arg("location"),
        "hp": _int_arg("hp"),
    }
    return jsonify(_players().set_user(name, **fields))


@bp_engine.route("/getFullInformation")
def get_full_information():
    name = request.args.get("name")
    if not name:
        return _missing("name")
    kind = request.args.get("user", "user")
    return jsonify(_players().get_stats(name, kind=kind))


@bp_engine.route("/home")
def home():
    name = request.args.get("name")
    if not name:
        return _missing("name")
    players = _players()
    user = players.get_stats(name)
    where = players.describe_location(user["location"])
    return jsonify(
        {
            "name": user["name"],
            "mapInfo": where["map"]["description"] if where["map"] else None,
            "npcInfo": where["npcs"],
        }
    )


# --- Free-text command box -------------------------------------------------------------


@bp_engine.route("/variousInput")
def various_input():
    """Interpret a line typed by a player.

    The text (commas stripped) is cached as a message in the player's room.
    Recognised commands: "move" (one move tick), "inv"/"stats" (own stats),
    "look" (room status). Anything else gets a placeholder reply.
    """
    name = request.args.get("name")
    if not name:
        return _missing("name")
    value = request.args.get("value", "").replace(",", "")
    location = _int_arg("location", 0)
    players = _players()
    if value.strip():
        players.record_room_message(location, value)

    command = value.lower()
    if "move" in command:
        destination = _mover().move(name)
        where = players.describe_location(destination)
        return jsonify(
            {
                "location": destination,
                "mapInfo": where["map"]["description"] if where["map"] else None,
                "npcInfo": where["npcs"],
            }
        )
    if "inv" in command or "stats" in command:
        return jsonify(players.get_stats(name))
    if "look" in command:
        return jsonify({"location": location, "status": players.map_status(location)})
    return jsonify({"msg": NO_IMPLEMENTATION})


# --- Room / index lookups --------------------------------------------------------------


@bp_engine.route("/updateRoom")
def update_room():
    map_index = _int_arg("mapIndex")
    if map_index is None:
        return _missing("mapIndex")
    return jsonify(_players().map_status(map_index))


@bp_engine.route("/findUserByIndex")
def find_user_by_index():
    index = _int_arg("index")
    if index is None:
        return _missing("index")
    return jsonify({"name": _players().user_name_by_index(index)})


@bp_engine.route("/findNpcByIndex")
def find_npc_by_index():
    index = _int_arg("index")
    if index is None:
        return _missing("index")
    return jsonify({"name": _players().npc_name_by_index(index)})
