"""Store factory.

Resolves the active profile and builds a ``RelationalStore`` for it.
Profile priority:

1. Explicit ``profile_name`` argument
2. ``{env_prefix}DB_PROFILE`` environment variable
3. ``[settings] default_profile`` in db-snapshot.toml

Usage:
    from db_snapshot.factory import get_store

    store = await get_store()                       # active profile
    store = await get_store(profile_name="local")
    store = await get_store(database_url="sqlite:///data/dev.db")
"""

import os
from pathlib import Path
from urllib.parse import quote

from db_snapshot.config.loader import load_config
from db_snapshot.config.models import DatabaseProfile, SnapshotConfig
from db_snapshot.stores.base import RelationalStore
from db_snapshot.stores.sqlalchemy_store import AsyncSQLAlchemyStore


class ProfileNotFoundError(Exception):
    """Raised when no database profile is configured."""

    pass


def get_active_profile_name(
    env_prefix: str = "",
    config: SnapshotConfig | None = None,
) -> str:
    """Get active profile name from env var or config default.

    Args:
        env_prefix: Prefix for the environment variable
            (``"APP_"`` reads ``APP_DB_PROFILE``).
        config: Loaded config whose ``default_profile`` is the fallback.

    Returns:
        Profile name.

    Raises:
        ProfileNotFoundError: If no profile is configured.
    """
    env_profile = os.environ.get(f"{env_prefix}DB_PROFILE")
    if env_profile:
        return env_profile

    if config is not None and config.settings.default_profile:
        return config.settings.default_profile

    raise ProfileNotFoundError(
        "No database profile configured.\n"
        f"Set {env_prefix}DB_PROFILE=<name>, pass --profile <name>, or set "
        "default_profile under [settings] in db-snapshot.toml."
    )


def resolve_url(profile: DatabaseProfile) -> str:
    """Resolve profile URL with password substitution.

    Args:
        profile: Database profile from config.

    Returns:
        Connection URL with ``[YOUR-PASSWORD]`` replaced by the URL-encoded
        ``db_password``.
    """
    url = profile.url
    if profile.db_password and "[YOUR-PASSWORD]" in url:
        url = url.replace("[YOUR-PASSWORD]", quote(profile.db_password, safe=""))
    return url


async def get_store(
    profile_name: str | None = None,
    env_prefix: str = "",
    database_url: str | None = None,
    config_path: Path | None = None,
) -> RelationalStore:
    """Create a new store for a profile or URL.

    No caching: every call returns a new store the caller must close.

    Args:
        profile_name: Profile name from db-snapshot.toml.
        env_prefix: Prefix for environment variable lookup.
        database_url: Direct URL; skips profile resolution entirely.
        config_path: Config file path (default: ``./db-snapshot.toml``).

    Returns:
        An ``AsyncSQLAlchemyStore``.

    Raises:
        ProfileNotFoundError: If no profile is configured.
        FileNotFoundError: If the config file is missing.
        KeyError: If the profile is not in the config file.
    """
    if database_url is not None:
        return AsyncSQLAlchemyStore(database_url)

    config = load_config(config_path)
    if profile_name is None:
        profile_name = get_active_profile_name(env_prefix, config)

    if profile_name not in config.profiles:
        available = ", ".join(config.profiles.keys()) or "(none)"
        raise KeyError(
            f"Profile '{profile_name}' not found in db-snapshot.toml. "
            f"Available: {available}"
        )

    return AsyncSQLAlchemyStore(resolve_url(config.profiles[profile_name]))
