"""CLI entrypoint for Smileycache."""

from __future__ import annotations

import math
from pathlib import Path

import typer
from rich import print

from smileycache.catalog import load_catalog
from smileycache.config import settings
from smileycache.game import Game
from smileycache.generator import CacheGenerator
from smileycache.models import Cache, Cell, Direction, Geopoint, coords, describe_items
from smileycache.storage import InMemoryKeyValueStore, JsonFileKeyValueStore, SqliteKeyValueStore
from smileycache.telemetry import configure_logging
from smileycache.world import World

app = typer.Typer(help="Smileycache world and cache engine")


def _build_store():
    backend = settings.storage_backend.lower()
    path = Path(settings.state_path).expanduser()
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "sqlite":
        return SqliteKeyValueStore(path.with_suffix(".sqlite3"))
    return JsonFileKeyValueStore(path)


def _build_game() -> Game:
    configure_logging(settings.log_level)
    world = World(cell_degrees=settings.cell_degrees)
    generator = CacheGenerator(
        load_catalog(settings.item_catalog_path),
        max_items=settings.max_cache_items,
        spawn_probability=settings.cache_spawn_probability,
    )
    game = Game(
        world=world,
        generator=generator,
        store=_build_store(),
        start=Geopoint(lat=settings.start_lat, lng=settings.start_lng),
        visibility_radius=settings.visibility_radius,
    )
    game.load()
    return game


def _format_bounds(world: World, target: Cell) -> list[list[float]]:
    bounds = world.cell_bounds(target)
    return [[bounds.start.lat, bounds.start.lng], [bounds.end.lat, bounds.end.lng]]


def _format_cache(game: Game, cache: Cache) -> dict:
    return {
        "cell": coords(cache.location),
        "bounds": _format_bounds(game.world, cache.location),
        "num_items": cache.num_items,
        "items": describe_items(cache.inventory),
    }


def _require_cache(game: Game, i: int, j: int) -> Cache:
    cache = game.cache_at(game.world.cell(i, j))
    if cache is None:
        print({"cache": None, "cell": f"({i}, {j})", "message": "There is no cache here."})
        raise typer.Exit(code=1)
    return cache


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "cell_degrees": settings.cell_degrees,
            "storage_backend": settings.storage_backend,
            "state_path": settings.state_path,
            "visibility_radius": settings.visibility_radius,
        }
    )


@app.command()
def cell(lat: float = typer.Argument(...), lng: float = typer.Argument(...)) -> None:
    """Show the grid cell containing a point."""
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise typer.BadParameter("latitude and longitude must be finite numbers")
    world = World(cell_degrees=settings.cell_degrees)
    target = world.cell_for_point(Geopoint(lat=lat, lng=lng))
    print({"cell": coords(target), "bounds": _format_bounds(world, target)})


@app.command()
def look(radius: int = typer.Option(None, help="Cells to scan around the player")) -> None:
    """List caches around the player."""
    game = _build_game()
    caches = game.visible_caches(radius)
    game.save()
    print(
        {
            "player_cell": coords(game.player_cell()),
            "caches": [_format_cache(game, cache) for cache in caches],
        }
    )


@app.command()
def cache(i: int = typer.Argument(...), j: int = typer.Argument(...)) -> None:
    """Show the contents of the cache at cell (i, j)."""
    game = _build_game()
    found = _require_cache(game, i, j)
    game.save()
    print({"cache": _format_cache(game, found)})


@app.command()
def move(direction: Direction = typer.Argument(..., case_sensitive=False)) -> None:
    """Step the player one cell north, south, east or west."""
    game = _build_game()
    location = game.move(direction)
    print({"location": [location.lat, location.lng], "cell": coords(game.player_cell())})


@app.command()
def collect(i: int = typer.Argument(...), j: int = typer.Argument(...)) -> None:
    """Take the most recently added item from a cache."""
    game = _build_game()
    target = _require_cache(game, i, j)
    item = game.collect(target)
    print(
        {
            "collected": describe_items([item], with_names=True) if item else None,
            "cache": _format_cache(game, target),
            "inventory": describe_items(game.player_inventory, with_names=True),
        }
    )


@app.command()
def deposit(i: int = typer.Argument(...), j: int = typer.Argument(...)) -> None:
    """Put the most recently collected item into a cache."""
    game = _build_game()
    target = _require_cache(game, i, j)
    item = game.deposit(target)
    print(
        {
            "deposited": describe_items([item], with_names=True) if item else None,
            "cache": _format_cache(game, target),
            "inventory": describe_items(game.player_inventory, with_names=True),
        }
    )


@app.command()
def inventory() -> None:
    """Show the player's items."""
    game = _build_game()
    if not game.player_inventory:
        print({"inventory": f"Go out and collect some {settings.item_name}s!"})
        return
    print({"inventory": describe_items(game.player_inventory, with_names=True)})


@app.command()
def reset(yes: bool = typer.Option(False, "--yes", help="Skip the confirmation prompt")) -> None:
    """Erase saved progress and return to the start location."""
    if not yes:
        typer.confirm("Erase all saved progress?", abort=True)
    game = _build_game()
    game.reset()
    print({"reset": True, "location": [game.location.lat, game.location.lng]})


if __name__ == "__main__":
    app()
