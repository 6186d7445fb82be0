"""Pydantic models for snapshot configuration."""

from pydantic import BaseModel, Field

from db_snapshot.catalog.models import TableCatalog


class DatabaseProfile(BaseModel):
    """Database connection profile from db-snapshot.toml."""

    url: str
    description: str = ""
    db_password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class SnapshotSettings(BaseModel):
    """Engine settings from the ``[settings]`` table."""

    chunk_size: int = Field(default=50, ge=1)
    backups_dir: str = "backups"
    default_profile: str | None = None


class SnapshotConfig(BaseModel):
    """Complete configuration from db-snapshot.toml.

    ``catalog`` is ``None`` when the file declares no ``[catalog]``; callers
    then fall back to the built-in catalog.
    """

    profiles: dict[str, DatabaseProfile] = Field(default_factory=dict)
    settings: SnapshotSettings = Field(default_factory=SnapshotSettings)
    catalog: TableCatalog | None = None
