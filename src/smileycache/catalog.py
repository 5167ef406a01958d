"""Static item-type catalog."""

from __future__ import annotations

from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class CatalogError(ValueError):
    """Raised when the item catalog is missing or malformed."""


class ItemCatalog(BaseModel):
    """Ordered, immutable list of item types indexed by the cache generator."""

    model_config = ConfigDict(frozen=True)

    types: tuple[str, ...] = Field(min_length=1)

    @field_validator("types")
    @classmethod
    def _non_empty_names(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if any(not name.strip() for name in value):
            raise ValueError("item types must be non-empty strings")
        return value

    def __len__(self) -> int:
        return len(self.types)

    def __getitem__(self, index: int) -> str:
        return self.types[index]


def parse_catalog(text: str) -> ItemCatalog:
    try:
        return ItemCatalog.model_validate_json(text)
    except ValidationError as exc:
        raise CatalogError(f"Invalid item catalog: {exc}") from exc


def load_catalog(path: str | Path | None = None) -> ItemCatalog:
    """Load the catalog from ``path`` or from the bundled ``items.json``."""
    if path is None:
        text = (resources.files("smileycache") / "data" / "items.json").read_text(encoding="utf-8")
        return parse_catalog(text)

    target = Path(path).expanduser()
    try:
        text = target.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogError(f"Item catalog not readable: {target}") from exc
    return parse_catalog(text)

