"""Configuration loading from db-snapshot.toml."""

import tomllib
from pathlib import Path

from db_snapshot.catalog.models import TableCatalog, TableDef
from db_snapshot.catalog.orderer import sort_tables
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig, SnapshotSettings

CONFIG_FILENAME = "db-snapshot.toml"


def load_config(config_path: Path | None = None) -> SnapshotConfig:
    """Load snapshot configuration from a TOML file.

    Args:
        config_path: Path to the config file (default:
            ``Path.cwd() / "db-snapshot.toml"``).

    Returns:
        SnapshotConfig with profiles, settings and optional catalog.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config format is invalid.
        CatalogError: If ``[catalog] sort = true`` and the tables form a
            cycle or reference unknown tables.
    """
    if config_path is None:
        config_path = Path.cwd() / CONFIG_FILENAME

    if not config_path.exists():
        raise FileNotFoundError(
            f"Snapshot config not found: {config_path}\n"
            f"Create {CONFIG_FILENAME} with at least one [profiles.<name>] table."
        )

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    # Parse profiles
    profiles = {}
    for name, profile_data in data.get("profiles", {}).items():
        profiles[name] = DatabaseProfile(**profile_data)

    settings = SnapshotSettings(**data.get("settings", {}))

    # Parse optional catalog
    catalog = None
    catalog_data = data.get("catalog")
    if catalog_data is not None:
        tables = [TableDef(**t) for t in catalog_data.get("tables", [])]
        if not tables:
            raise ValueError("[catalog] declares no tables")
        if catalog_data.get("sort", False):
            catalog = sort_tables(tables)
        else:
            catalog = TableCatalog(tables=tables)

    return SnapshotConfig(profiles=profiles, settings=settings, catalog=catalog)
