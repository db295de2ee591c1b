import random

import pytest

from alley import db
from alley.errors import EntityNotFound, NotFound, StorageError
from alley.models import GameMap, Npc, User
from alley.services.entity_mover import EntityMover
from alley.storage import Storage
from tests.factories import FailingSession, create_maps, create_npcs, create_user


def test_move_grows_world_and_stays_in_bounds(storage):
    create_maps(10)
    create_npcs(3)
    create_user("Alice")
    destination = EntityMover(storage, rng=random.Random(21)).move("Alice")
    assert GameMap.query.count() == 11
    assert 0 <= destination < 11


def test_move_at_growth_limit_does_not_seed(storage):
    create_maps(11)
    create_npcs(1)
    create_user("Alice")
    mover = EntityMover(storage, rng=random.Random(2))
    for _ in range(5):
        assert 0 <= mover.move("Alice") < 11
    assert GameMap.query.count() == 11


def test_move_on_empty_world_seeds_first_map(storage):
    create_npcs(1)
    create_user("Alice")
    outcome = EntityMover(storage, rng=random.Random(0)).tick("Alice")
    assert outcome.map_seeded
    # One map means the only possible draw is 0
    assert outcome.destination == 0
    assert GameMap.query.one().name == "map_1"


def test_move_relocates_drawn_npc_and_actor(storage):
    create_maps(4)
    npcs = create_npcs(3)
    create_user("Alice")
    outcome = EntityMover(storage, rng=random.Random(5)).tick("Alice")

    replay = random.Random(5)
    expected_destination = int(replay.random() * 5)
    expected_index = int(replay.random() * 3)
    assert outcome.destination == expected_destination
    assert outcome.npc_id == npcs[expected_index].id

    db.session.expire_all()
    assert User.query.filter_by(name="Alice").one().location == expected_destination
    assert db.session.get(Npc, outcome.npc_id).location == expected_destination


def test_move_without_npcs_raises_and_writes_nothing(storage):
    create_maps(2)
    create_user("Alice", location=1)
    with pytest.raises(EntityNotFound):
        EntityMover(storage, rng=random.Random(1)).move("Alice")
    db.session.expire_all()
    assert User.query.filter_by(name="Alice").one().location == 1


def test_move_unknown_actor_raises_not_found(storage):
    create_maps(2)
    create_npcs(2, location=2)
    with pytest.raises(NotFound):
        EntityMover(storage, rng=random.Random(1)).move("Nobody")
    db.session.expire_all()
    assert {n.location for n in Npc.query.all()} == {2}


def test_move_commit_failure_rolls_back_both_updates():
    create_maps(3)
    create_npcs(2, location=2)
    create_user("Alice", location=1)
    failing = Storage(session=FailingSession(db.session, fail=("commit",)))
    # growth_limit=0 skips map seeding so the only commit is the move itself
    mover = EntityMover(failing, rng=random.Random(8), growth_limit=0)
    with pytest.raises(StorageError):
        mover.move("Alice")
    db.session.expire_all()
    assert User.query.filter_by(name="Alice").one().location == 1
    assert {n.location for n in Npc.query.all()} == {2}
