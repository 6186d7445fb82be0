"""Snapshot document: model, normalization, validation and files.

A snapshot is stored as a single JSON object::

    {
      "_meta": {"exportedAt": "2026-01-15T09:30:00+00:00", "version": 1},
      "Company": [{"id": 1, "name": "Acme"}],
      "Contact": [{"id": 1, "companyId": 1, "referredById": null}],
      ...
    }

Usage:
    from db_snapshot.transfer.snapshot import (
        Snapshot,
        load_snapshot_document,
        save_snapshot,
        validate_snapshot,
    )

    path = save_snapshot(snapshot)
    document = load_snapshot_document(path)
    report = validate_snapshot(document, catalog)
"""

import base64
import json
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import Path
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from db_snapshot.catalog.models import TableCatalog

META_KEY = "_meta"
SNAPSHOT_VERSION = 1

Scalar = None | bool | int | float | str
SCALAR_TYPES = (type(None), bool, int, float, str)

Row = Mapping[str, Scalar]


class SnapshotValidationError(ValueError):
    """Raised when a snapshot document fails pre-flight validation.

    Attributes:
        errors: Validation error messages.
        warnings: Validation warnings found alongside the errors.
    """

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        self.errors = errors
        self.warnings = warnings or []
        super().__init__(f"Invalid snapshot: {'; '.join(errors)}")


class SnapshotMeta(BaseModel):
    """Snapshot metadata marker."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    exported_at: str = Field(alias="exportedAt")
    version: int = SNAPSHOT_VERSION


class Snapshot(BaseModel):
    """Complete in-memory snapshot: metadata plus rows per table.

    Read-only throughout: ``tables`` and every row are read-only mappings
    and each table's rows are a tuple.  Rows are copied on construction,
    so later changes to the source data do not leak in.
    """

    model_config = ConfigDict(frozen=True)

    meta: SnapshotMeta
    tables: Mapping[str, tuple[Row, ...]] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("tables", mode="after")
    @classmethod
    def _freeze_tables(
        cls, tables: Mapping[str, tuple[Row, ...]]
    ) -> Mapping[str, tuple[Row, ...]]:
        return MappingProxyType(
            {
                name: tuple(MappingProxyType(dict(row)) for row in rows)
                for name, rows in tables.items()
            }
        )

    def rows(self, table_name: str) -> tuple[Row, ...]:
        """Rows of one table; empty when the table is absent."""
        return self.tables.get(table_name, ())

    def counts(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self.tables.items()}

    def to_document(self) -> dict[str, Any]:
        """Serialize to the JSON document layout."""
        document: dict[str, Any] = {
            META_KEY: self.meta.model_dump(by_alias=True),
        }
        for name, rows in self.tables.items():
            document[name] = [dict(row) for row in rows]
        return document

    @classmethod
    def from_document(cls, document: dict[str, Any], catalog: TableCatalog) -> "Snapshot":
        """Build a snapshot from a validated document.

        Catalog tables missing from the document become empty lists; keys
        that are not catalog tables are dropped.

        Raises:
            SnapshotValidationError: If the document fails validation.
        """
        report = validate_snapshot(document, catalog)
        if report["errors"]:
            raise SnapshotValidationError(report["errors"], report["warnings"])

        raw_meta = document[META_KEY]
        meta = SnapshotMeta(
            exported_at=str(raw_meta.get("exportedAt", "")),
            version=raw_meta.get("version", SNAPSHOT_VERSION),
        )
        tables = {name: list(document.get(name) or []) for name in catalog.table_names}
        return cls(meta=meta, tables=tables)


# ------------------------------------------------------------------
# Value normalization
# ------------------------------------------------------------------


def normalize_value(value: Any) -> Scalar:
    """Reduce a driver value to a portable JSON scalar.

    - ``Decimal`` -> ``int`` when integral, else ``float``
    - ``datetime``/``date``/``time`` -> ISO-8601 string
    - ``UUID`` -> string
    - ``bytes``/``bytearray``/``memoryview`` -> base64 text
    - ``None``/``bool``/``int``/``float``/``str`` unchanged
    - anything else -> ``str(value)``
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return str(value)


def normalize_row(row: dict[str, Any]) -> dict[str, Scalar]:
    """Normalize every value in a row dict, keeping column order."""
    return {k: normalize_value(v) for k, v in row.items()}


# ------------------------------------------------------------------
# Validation
# ------------------------------------------------------------------


def validate_snapshot(document: Any, catalog: TableCatalog) -> dict:
    """Validate a deserialized snapshot document against a catalog.

    Pure check -- no I/O.  Restore refuses to touch the store when
    ``errors`` is non-empty.

    Args:
        document: Deserialized JSON document.
        catalog: Catalog the snapshot will be restored with.

    Returns:
        Dict with ``valid`` (bool), ``errors`` (list[str]),
        and ``warnings`` (list[str]).

    Example:
        report = validate_snapshot(document, CONTACTS_CATALOG)
        if not report["valid"]:
            raise SnapshotValidationError(report["errors"])
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(document, dict):
        errors.append("Snapshot document must be a JSON object")
        return {"valid": False, "errors": errors, "warnings": warnings}

    meta = document.get(META_KEY)
    if meta is None:
        errors.append(f"Missing required key: {META_KEY}")
    elif not isinstance(meta, dict):
        errors.append(f"'{META_KEY}' must be an object")
    else:
        if "exportedAt" not in meta:
            warnings.append("Missing metadata field: exportedAt")
        if "version" in meta and meta["version"] != SNAPSHOT_VERSION:
            errors.append(
                f"Unsupported snapshot version '{meta['version']}' "
                f"(expected {SNAPSHOT_VERSION})"
            )

    catalog_names = set(catalog.table_names)
    for key in document:
        if key != META_KEY and key not in catalog_names:
            warnings.append(f"Unknown table '{key}' will be ignored")

    for table_def in catalog.tables:
        if table_def.name not in document:
            warnings.append(f"Missing table '{table_def.name}' (restored as empty)")
            continue

        rows = document[table_def.name]
        if not isinstance(rows, list):
            errors.append(f"'{table_def.name}' must be a list of rows")
            continue

        bad_rows = [i for i, row in enumerate(rows) if not isinstance(row, dict)]
        if bad_rows:
            errors.append(
                f"{table_def.name} has {len(bad_rows)} non-object row(s), "
                f"first at index {bad_rows[0]}"
            )
            continue
        if not rows:
            continue

        bad_cells = [
            (i, column)
            for i, row in enumerate(rows)
            for column, value in row.items()
            if not isinstance(value, SCALAR_TYPES)
        ]
        if bad_cells:
            i, column = bad_cells[0]
            errors.append(
                f"{table_def.name} has {len(bad_cells)} non-scalar value(s), "
                f"first at row {i} column '{column}'"
            )
            continue

        first_columns = set(rows[0].keys())
        mismatched = sum(1 for row in rows[1:] if set(row.keys()) != first_columns)
        if mismatched:
            warnings.append(
                f"{table_def.name}: {mismatched} row(s) have columns differing "
                f"from the first row"
            )

        # Self-references must resolve within the same table
        self_refs = table_def.self_references
        if self_refs:
            keyless = [i for i, row in enumerate(rows) if row.get(table_def.pk) is None]
            if keyless:
                errors.append(
                    f"{table_def.name} has {len(keyless)} row(s) without a "
                    f"'{table_def.pk}' value, first at index {keyless[0]}; "
                    f"self-references cannot be restored"
                )
                continue
            pk_values = {row.get(table_def.pk) for row in rows}
            for fk in self_refs:
                dangling = [
                    row.get(table_def.pk) for row in rows
                    if row.get(fk.column) is not None
                    and row.get(fk.column) not in pk_values
                ]
                if dangling:
                    warnings.append(
                        f"{table_def.name}: {len(dangling)} row(s) have "
                        f"{fk.column} pointing outside the snapshot"
                    )

    valid = len(errors) == 0
    return {"valid": valid, "errors": errors, "warnings": warnings}


# ------------------------------------------------------------------
# Files
# ------------------------------------------------------------------


class SnapshotFile(BaseModel):
    """A snapshot file found on disk."""

    name: str
    path: str
    modified_at: datetime
    size: int


def save_snapshot(
    snapshot: Snapshot,
    output_path: str | None = None,
    backups_dir: str | Path = "backups",
) -> str:
    """Write a snapshot to a JSON file.

    Args:
        snapshot: Snapshot to write.
        output_path: Path to save the file.  When ``None``, generates a
            timestamped path under ``backups_dir`` (relative to the
            current working directory).
        backups_dir: Directory for generated paths.

    Returns:
        Path of the written file.
    """
    if output_path is None:
        directory = Path.cwd() / backups_dir
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d-%H%M%S")
        output_path = str(directory / f"backup-{timestamp}.json")

    output_path_obj = Path(output_path)
    output_path_obj.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        json.dump(snapshot.to_document(), f, indent=2, default=str)

    return output_path


def load_snapshot_document(path: str | Path) -> dict[str, Any]:
    """Read a snapshot JSON file without validating its structure.

    Raises:
        SnapshotValidationError: If the file is missing or not valid JSON.
    """
    try:
        with open(path, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        raise SnapshotValidationError([f"Snapshot file not found: {path}"])
    except json.JSONDecodeError as e:
        raise SnapshotValidationError([f"Invalid JSON: {e}"])


def list_snapshots(directory: str | Path = "backups") -> list[SnapshotFile]:
    """List ``backup-*.json`` files in a directory, newest first."""
    directory = Path(directory)
    if not directory.is_dir():
        return []

    files: list[SnapshotFile] = []
    for path in directory.glob("backup-*.json"):
        stat = path.stat()
        files.append(
            SnapshotFile(
                name=path.name,
                path=str(path),
                modified_at=datetime.fromtimestamp(stat.st_mtime),
                size=stat.st_size,
            )
        )
    files.sort(key=lambda f: f.modified_at, reverse=True)
    return files
