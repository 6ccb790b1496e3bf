"""Conversion and validation of data volume status blocks."""

from __future__ import annotations

import re
from typing import Any, Sequence

from kvprovider.models import DataVolumeStatus

PHASES: tuple[str, ...] = (
    "",
    "Pending",
    "PVCBound",
    "ImportScheduled",
    "ImportInProgress",
    "CloneScheduled",
    "CloneInProgress",
    "SnapshotForSmartCloneInProgress",
    "SmartClonePVCInProgress",
    "UploadScheduled",
    "UploadReady",
    "Succeeded",
    "Failed",
    "Unknown",
)

_INTEGER = re.compile(r"[+-]?[0-9]+")
_PROGRESS_MIN = 0
_PROGRESS_MAX = 100


def expand_data_volume_status(items: Sequence[Any] | None) -> DataVolumeStatus:
    """Build a status from its schema block; an empty block gives an empty status."""
    result = DataVolumeStatus()
    if not items or items[0] is None:
        return result
    block = items[0]
    if isinstance(phase := block.get("phase"), str):
        result.phase = phase
    if isinstance(progress := block.get("progress"), str):
        result.progress = progress
    return result


def flatten_data_volume_status(status: DataVolumeStatus) -> list[dict[str, str]]:
    """Turn a status into its single-element schema list."""
    return [{"phase": status.phase, "progress": status.progress}]


def validate_phase(value: Any) -> str:
    """Return ``value`` if it is a known phase, otherwise raise ValueError."""
    if not isinstance(value, str) or value not in PHASES:
        raise ValueError(f"expected phase to be one of {list(PHASES)!r}, got {value!r}")
    return value


def validate_progress(value: Any) -> str:
    """Return ``value`` if it is an integer string between 0 and 100, otherwise raise ValueError."""
    if not isinstance(value, str) or not _INTEGER.fullmatch(value):
        raise ValueError(f"expected progress to be an integer string, got {value!r}")
    number = int(value)
    if not _PROGRESS_MIN <= number <= _PROGRESS_MAX:
        raise ValueError(
            f"expected progress to be in the range ({_PROGRESS_MIN} - {_PROGRESS_MAX}), got {number}"
        )
    return value