"""Game session: player position, inventory and durable state layout."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, TypeVar

from .generator import CacheGenerator
from .inventory import transfer
from .memento import MementoStore, decode_item, encode_item
from .models import Cache, Cell, Direction, Geopoint, Item
from .storage import KeyValueStore
from .world import World

LOCATION_KEY = "locationData"
MOVEMENT_KEY = "movementData"
INVENTORY_KEY = "inventoryData"
CACHE_KEY = "cacheData"
STATE_KEYS = (LOCATION_KEY, MOVEMENT_KEY, INVENTORY_KEY, CACHE_KEY)

T = TypeVar("T")

OAKES_CLASSROOM = Geopoint(lat=36.98949379578401, lng=-122.06277128548504)


@dataclass(slots=True)
class PlayerState:
    location: Geopoint
    movement_history: list[Geopoint] = field(default_factory=list)
    inventory: list[Item] = field(default_factory=list)


def _encode_point(point: Geopoint) -> dict[str, float]:
    return {"lat": point.lat, "lng": point.lng}


def _decode_point(raw: object) -> Geopoint:
    if not isinstance(raw, dict):
        raise TypeError("geopoint must be an object")
    lat, lng = raw["lat"], raw["lng"]
    if not all(isinstance(value, (int, float)) and not isinstance(value, bool) for value in (lat, lng)):
        raise TypeError("geopoint coordinates must be numbers")
    point = Geopoint(lat=float(lat), lng=float(lng))
    if not (math.isfinite(point.lat) and math.isfinite(point.lng)):
        raise ValueError("geopoint coordinates must be finite")
    return point


class Game:
    """Coordinates the world, cache persistence and the player.

    Every successful mutation is written through to ``store`` so a restarted
    process resumes where the last one stopped.
    """

    def __init__(
        self,
        *,
        world: World,
        generator: CacheGenerator,
        store: KeyValueStore,
        start: Geopoint = OAKES_CLASSROOM,
        visibility_radius: int = 8,
        logger: logging.Logger | None = None,
    ) -> None:
        self.world = world
        self.generator = generator
        self.mementos = MementoStore(generator, make_cell=world.cell)
        self._store = store
        self._start = start
        self._visibility_radius = visibility_radius
        self._logger = logger or logging.getLogger("smileycache.game")
        self._player = self._default_player()

    @property
    def player(self) -> PlayerState:
        return self._player

    @property
    def location(self) -> Geopoint:
        return self._player.location

    @property
    def player_inventory(self) -> list[Item]:
        return self._player.inventory

    def player_cell(self) -> Cell:
        return self.world.cell_for_point(self._player.location)

    def cache_at(self, cell: Cell) -> Cache | None:
        """Return the cache hosted by ``cell``, or ``None`` for an empty cell."""
        if not self.generator.has_cache(cell):
            return None
        return self.mementos.get_or_create(cell)

    def visible_caches(self, radius: int | None = None) -> list[Cache]:
        radius = self._visibility_radius if radius is None else radius
        caches: list[Cache] = []
        for cell in self.world.neighborhood(self.player_cell(), radius):
            cache = self.cache_at(cell)
            if cache is not None:
                caches.append(cache)
        return caches

    def move(self, direction: Direction) -> Geopoint:
        """Step one cell edge in ``direction``."""
        d_lat, d_lng = direction.offset
        size = self.world.cell_degrees
        current = self._player.location
        return self.move_to(Geopoint(lat=current.lat + d_lat * size, lng=current.lng + d_lng * size))

    def move_to(self, point: Geopoint) -> Geopoint:
        self._player.location = point
        self._player.movement_history.append(point)
        self._logger.info("player_moved", extra={"lat": point.lat, "lng": point.lng})
        self.save()
        return point

    def collect(self, cache: Cache) -> Item | None:
        item = transfer(cache.inventory, self._player.inventory)
        if item is not None:
            self._after_transfer("item_collected", cache, item)
        return item

    def deposit(self, cache: Cache) -> Item | None:
        item = transfer(self._player.inventory, cache.inventory)
        if item is not None:
            self._after_transfer("item_deposited", cache, item)
        return item

    def _after_transfer(self, event: str, cache: Cache, item: Item) -> None:
        self.mementos.save(cache)
        self.save()
        self._logger.info(
            event,
            extra={"cell_key": self.mementos.key(cache.location), "serial": item.serial, "item_type": item.type},
        )

    def save(self) -> None:
        player = self._player
        self._store.set(LOCATION_KEY, json.dumps(_encode_point(player.location)))
        self._store.set(MOVEMENT_KEY, json.dumps([_encode_point(point) for point in player.movement_history]))
        self._store.set(
            INVENTORY_KEY,
            json.dumps([encode_item(item) for item in player.inventory], ensure_ascii=False),
        )
        self._store.set(CACHE_KEY, self.mementos.dump())

    def load(self) -> PlayerState:
        """Restore state from the store; each missing or unreadable key falls back to its default."""
        defaults = self._default_player()
        self._player = PlayerState(
            location=self._load_value(LOCATION_KEY, _decode_point, defaults.location),
            movement_history=self._load_value(MOVEMENT_KEY, self._decode_history, defaults.movement_history),
            inventory=self._load_value(INVENTORY_KEY, self._decode_inventory, defaults.inventory),
        )
        self.mementos.restore(self._store.get(CACHE_KEY))
        return self._player

    def reset(self) -> None:
        for key in STATE_KEYS:
            self._store.remove(key)
        self.mementos.clear()
        self._player = self._default_player()
        self._logger.info("game_reset")

    def _default_player(self) -> PlayerState:
        return PlayerState(location=self._start, movement_history=[self._start])

    def _load_value(self, key: str, decode: Callable[[object], T], default: T) -> T:
        text = self._store.get(key)
        if text is None:
            return default
        try:
            return decode(json.loads(text))
        except (ValueError, KeyError, TypeError, OverflowError, RecursionError):
            self._logger.warning("state_corrupt", extra={"state_key": key})
            return default

    @staticmethod
    def _decode_history(raw: object) -> list[Geopoint]:
        if not isinstance(raw, list):
            raise TypeError("movement history must be a list")
        return [_decode_point(point) for point in raw]

    def _decode_inventory(self, raw: object) -> list[Item]:
        if not isinstance(raw, list):
            raise TypeError("inventory must be a list")
        return [decode_item(item, self.world.cell) for item in raw]
