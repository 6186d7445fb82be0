"""Progress events for export, delete and import phases."""

from collections.abc import Callable
from typing import Literal

from pydantic import BaseModel, ConfigDict

Phase = Literal["export", "delete", "import"]


class ProgressEvent(BaseModel):
    """One table operation finished within a phase."""

    model_config = ConfigDict(frozen=True)

    phase: Phase
    table: str
    index: int      # 0-based position within the phase
    total: int


ProgressCallback = Callable[[ProgressEvent], None]


def report_progress(
    callback: ProgressCallback | None,
    phase: Phase,
    table: str,
    index: int,
    total: int,
) -> None:
    """Invoke ``callback`` synchronously, if one was given."""
    if callback is not None:
        callback(ProgressEvent(phase=phase, table=table, index=index, total=total))
