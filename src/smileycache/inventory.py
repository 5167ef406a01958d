"""Single-item moves between inventories."""

from __future__ import annotations

from .models import Item


def transfer(source: list[Item], target: list[Item]) -> Item | None:
    """Move the most recently added item of ``source`` onto ``target``.

    Returns the moved item, or ``None`` without mutating anything when ``source`` is empty.
    """
    if not source:
        return None
    item = source.pop()
    target.append(item)
    return item
