"""Storage contract over the Flask-SQLAlchemy session.

One `Repository` per entity kind exposes the small capability set the game
services need (create, lookups by id/name/location/ordinal, count, update).
`Storage` bundles the repositories and owns the transaction scope so several
updates can be committed atomically.

Every SQLAlchemy failure is rolled back and re-raised as `StorageError`;
lookups that find nothing raise `NotFound`. Callers can therefore tell a
confirmed absence apart from a failed query.

Usage:
    storage = Storage()
    frank = storage.npcs.find_by_name("Frank")
    with storage.transaction():
        storage.npcs.update(frank, location=3)
        storage.users.update(user, location=3)
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, List, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from alley import db
from alley.errors import DuplicateUser, EntityNotFound, NotFound, StorageError
from alley.models import GameMap, Item, Npc, RoomCache, User


class Repository:
    """CRUD-style access to one model class."""

    def __init__(self, storage: "Storage", model: Type[db.Model], kind: str):
        self.storage = storage
        self.model = model
        self.kind = kind

    @property
    def session(self):
        return self.storage.session

    @contextmanager
    def _guard(self, op: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"{self.kind}.{op} failed: {exc}") from exc

    # -- writes -----------------------------------------------------------

    def create(self, entity) -> int:
        """Persist a new entity and return its id."""
        with self._guard("create"):
            self.session.add(entity)
            self.storage._commit()
        return entity.id

    def update(self, entity, **fields: Any):
        unknown = sorted(key for key in fields if not hasattr(self.model, key))
        if unknown:
            raise ValueError(f"{self.kind} has no attribute {', '.join(unknown)}")
        for key, value in fields.items():
            setattr(entity, key, value)
        with self._guard("update"):
            self.storage._commit()
        return entity

    # -- reads ------------------------------------------------------------

    def get(self, entity_id: int):
        with self._guard("get"):
            row = self.session.get(self.model, entity_id)
        if row is None:
            raise NotFound(self.kind, entity_id)
        return row

    def find_by_name(self, name: str):
        with self._guard("find_by_name"):
            row = self.session.query(self.model).filter_by(name=name).order_by(self.model.id).first()
        if row is None:
            raise NotFound(self.kind, name)
        return row

    def find_by_location(self, location: int) -> List[Any]:
        with self._guard("find_by_location"):
            return self.session.query(self.model).filter_by(location=location).order_by(self.model.id).all()

    def nth(self, index: int):
        """Return the row at ordinal `index` (0-based, ordered by id)."""
        if index < 0:
            raise EntityNotFound(self.kind, index)
        with self._guard("nth"):
            row = self.session.query(self.model).order_by(self.model.id).offset(index).first()
        if row is None:
            raise EntityNotFound(self.kind, index)
        return row

    def count(self) -> int:
        with self._guard("count"):
            return self.session.query(self.model).count()


class UserRepository(Repository):
    def create(self, entity) -> int:
        try:
            return super().create(entity)
        except StorageError as exc:
            # Unique constraint on users.name closes the check-then-create race
            if isinstance(exc.__cause__, IntegrityError):
                raise DuplicateUser(entity.name) from exc.__cause__
            raise


class MapRepository(Repository):
    def find_by_location(self, location: int) -> List[Any]:
        # A map *is* a location; the lookup is by primary key
        with self._guard("find_by_location"):
            row = self.session.get(self.model, location)
        return [row] if row is not None else []


class CacheRepository(Repository):
    def find_by_map_name(self, map_name: str) -> List[RoomCache]:
        with self._guard("find_by_map_name"):
            return self.session.query(RoomCache).filter_by(map_name=map_name).order_by(RoomCache.id).all()


class Storage:
    """Bundle of repositories sharing one session and transaction scope."""

    def __init__(self, session=None):
        self._session = session
        self._depth = 0
        self.users = UserRepository(self, User, "user")
        self.maps = MapRepository(self, GameMap, "map")
        self.items = Repository(self, Item, "item")
        self.npcs = Repository(self, Npc, "npc")
        self.cache = CacheRepository(self, RoomCache, "cache")

    @property
    def session(self):
        return self._session if self._session is not None else db.session

    def _commit(self):
        # Inside a transaction() block writes are flushed, committed on exit
        if self._depth:
            self.session.flush()
        else:
            self.session.commit()

    @contextmanager
    def transaction(self) -> Iterator["Storage"]:
        """Commit every write made in the block at once, or none of them."""
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"transaction failed: {exc}") from exc
        except Exception:
            self.session.rollback()
            raise
        finally:
            self._depth -= 1

    def occupancy(self, location: int) -> dict:
        """Live item/npc/user counts for one location."""
        return {
            "items": len(self.items.find_by_location(location)),
            "npcs": len(self.npcs.find_by_location(location)),
            "users": len(self.users.find_by_location(location)),
        }


def get_storage() -> Storage:
    """Storage bound to the current app context session.

    Built per call so the transaction depth is never shared between
    concurrent requests.
    """
    return Storage()
