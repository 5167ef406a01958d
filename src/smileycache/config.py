"""Runtime configuration for Smileycache."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven runtime settings."""

    model_config = SettingsConfigDict(env_prefix="SMILEYCACHE_", env_file=".env", extra="ignore")

    app_name: str = "Smileycache"
    item_name: str = "Smiley"
    log_level: str = "WARNING"
    cell_degrees: float = Field(default=1e-4, gt=0, description="Edge length of a grid cell in degrees.")
    max_cache_items: int = Field(default=10, ge=1)
    cache_spawn_probability: float = Field(default=0.1, ge=0.0, le=1.0)
    visibility_radius: int = Field(default=8, ge=0)
    start_lat: float = 36.98949379578401
    start_lng: float = -122.06277128548504
    storage_backend: str = Field(default="json", description="memory/json/sqlite")
    state_path: str = Field(
        default="~/.smileycache/state.json",
        description="File backing the json or sqlite storage backend.",
    )
    item_catalog_path: str | None = Field(
        default=None,
        description="Optional JSON catalog overriding the bundled item types.",
    )


settings = Settings()
