"""Configuration management: profiles, settings, catalog and TOML loading.

Usage:
    >>> from db_snapshot.config import load_config, DatabaseProfile, SnapshotConfig
"""

from db_snapshot.config.loader import load_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig, SnapshotSettings

__all__ = ["load_config", "DatabaseProfile", "SnapshotConfig", "SnapshotSettings"]
