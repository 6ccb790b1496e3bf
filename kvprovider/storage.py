"""Conversion between schema lists and data volume storage specifications."""

from __future__ import annotations

from collections.abc import Set
from typing import Any, Sequence

from kvprovider.models import ResourceRequirements, StorageSpec
from kvprovider.quantity import QuantityError, parse_quantity
from kvprovider.source import expand_access_modes


def expand_data_volume_storage(items: Sequence[Any] | None) -> StorageSpec | None:
    """Build a storage spec from its schema block, or None when it holds nothing usable.

    Request values that are empty or not valid quantities are skipped.
    """
    if not items or items[0] is None:
        return None
    block = items[0]
    result = StorageSpec()

    modes = block.get("access_modes")
    if isinstance(modes, (Set, list, tuple)) and len(modes) > 0:
        ordered = sorted(modes) if isinstance(modes, Set) else list(modes)
        result.access_modes = expand_access_modes(ordered)

    resources = block.get("resources")
    if isinstance(resources, (list, tuple)) and resources and isinstance(resources[0], dict):
        requests = resources[0].get("requests")
        if isinstance(requests, dict):
            for name, text in requests.items():
                if not isinstance(text, str) or not text:
                    continue
                try:
                    result.resources.requests[name] = parse_quantity(text)
                except QuantityError:
                    continue

    if not result.access_modes and not result.resources.requests:
        return None
    return result


def flatten_resource_requirements(resources: ResourceRequirements) -> list[dict[str, Any]] | None:
    """Turn resource requests into their schema list, or None when there are none."""
    if not resources.requests:
        return None
    return [{"requests": {name: str(amount) for name, amount in resources.requests.items()}}]


def flatten_data_volume_storage(storage: StorageSpec) -> list[dict[str, Any]] | None:
    """Turn a storage spec into its schema list, or None when it has no requests."""
    block: dict[str, Any] = {}
    if storage.resources.requests:
        block["resources"] = flatten_resource_requirements(storage.resources)
    if not block:
        return None
    return [block]