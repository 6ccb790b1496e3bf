"""Conversion between schema lists and data volume specifications."""

from __future__ import annotations

from collections.abc import Set
from typing import Any, Iterable, Mapping, Sequence

from kvprovider.models import (
    DataVolumeSpec,
    LabelSelector,
    LabelSelectorRequirement,
    PersistentVolumeClaimSpec,
    ResourceRequirements,
)
from kvprovider.quantity import Quantity, parse_quantity
from kvprovider.source import (
    expand_access_modes,
    expand_data_volume_source,
    expand_data_volume_source_ref,
    flatten_data_volume_source,
    flatten_data_volume_source_ref,
)
from kvprovider.storage import expand_data_volume_storage, flatten_data_volume_storage
from kvprovider.storage import flatten_resource_requirements

CONTENT_TYPES: tuple[str, ...] = ("kubevirt", "archive")


def _single_block(items: Sequence[Any] | None) -> Mapping[str, Any] | None:
    if not items or items[0] is None:
        return None
    return items[0]


def _non_empty_list(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


def _ordered_modes(modes: Any) -> list[Any]:
    if isinstance(modes, Set):
        return sorted(modes)
    if isinstance(modes, (list, tuple)):
        return list(modes)
    return []


def _expand_quantities(values: Any) -> dict[str, Quantity]:
    if not isinstance(values, Mapping):
        return {}
    return {name: parse_quantity(text) for name, text in values.items()}


def _expand_resources(items: Any) -> ResourceRequirements:
    result = ResourceRequirements()
    if not _non_empty_list(items) or not isinstance(items[0], Mapping):
        return result
    block = items[0]
    result.requests = _expand_quantities(block.get("requests"))
    result.limits = _expand_quantities(block.get("limits"))
    return result


def _expand_label_selector(value: Any) -> LabelSelector | None:
    if _non_empty_list(value):
        value = value[0]
    if not isinstance(value, Mapping):
        return None
    selector = LabelSelector()
    labels = value.get("match_labels")
    if isinstance(labels, Mapping):
        selector.match_labels = {str(k): str(v) for k, v in labels.items()}
    expressions = value.get("match_expressions")
    if isinstance(expressions, (list, tuple)):
        for expression in expressions:
            if not isinstance(expression, Mapping):
                continue
            values = expression.get("values") or []
            selector.match_expressions.append(
                LabelSelectorRequirement(
                    key=str(expression.get("key", "")),
                    operator=str(expression.get("operator", "")),
                    values=[str(v) for v in _ordered_modes(values)],
                )
            )
    return selector


def expand_persistent_volume_claim_spec(items: Sequence[Any] | None) -> PersistentVolumeClaimSpec:
    """Build a claim spec from its schema block.

    Raises QuantityError when a request or limit is not a valid quantity.
    """
    result = PersistentVolumeClaimSpec()
    block = _single_block(items)
    if block is None:
        return result
    modes = _ordered_modes(block.get("access_modes"))
    if modes:
        result.access_modes = expand_access_modes(modes)
    result.resources = _expand_resources(block.get("resources"))
    result.selector = _expand_label_selector(block.get("selector"))
    if isinstance(volume_name := block.get("volume_name"), str):
        result.volume_name = volume_name
    storage_class = block.get("storage_class_name")
    if isinstance(storage_class, str) and storage_class:
        result.storage_class_name = storage_class
    return result


def expand_data_volume_spec(items: Sequence[Any] | None) -> DataVolumeSpec:
    """Build a data volume spec from its schema block.

    A present ``source_ref`` key takes precedence over ``source``; a claim
    spec takes precedence over ``storage``.
    """
    result = DataVolumeSpec()
    block = _single_block(items)
    if block is None:
        return result

    if block.get("source_ref") is None:
        source = block.get("source")
        if _non_empty_list(source):
            result.source = expand_data_volume_source(source)
    else:
        source_ref = block.get("source_ref")
        if _non_empty_list(source_ref):
            result.source_ref = expand_data_volume_source_ref(source_ref)

    pvc = block.get("pvc")
    storage = block.get("storage")
    if _non_empty_list(pvc):
        result.pvc = expand_persistent_volume_claim_spec(pvc)
    elif _non_empty_list(storage):
        storage_spec = expand_data_volume_storage(storage)
        if storage_spec is not None:
            result.storage = storage_spec

    if isinstance(content_type := block.get("content_type"), str):
        result.content_type = content_type
    return result


def flatten_access_modes(modes: Iterable[str] | None) -> frozenset[str] | None:
    """Turn access modes into a set of names, or None when there are none."""
    names = frozenset(str(mode) for mode in modes or ())
    return names or None


def flatten_label_selector(selector: LabelSelector | None) -> dict[str, Any] | None:
    """Turn a label selector into its schema mapping, or None when it selects nothing."""
    if selector is None:
        return None
    result: dict[str, Any] = {}
    if selector.match_labels:
        result["match_labels"] = dict(selector.match_labels)
    if selector.match_expressions:
        result["match_expressions"] = [
            {"key": exp.key, "operator": exp.operator, "values": list(exp.values)}
            for exp in selector.match_expressions
        ]
    return result or None


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def flatten_persistent_volume_claim_spec(
    spec: PersistentVolumeClaimSpec,
) -> list[dict[str, Any]] | None:
    """Turn a claim spec into its schema list, leaving out empty values."""
    block: dict[str, Any] = {}
    modes = flatten_access_modes(spec.access_modes)
    if modes:
        block["access_modes"] = modes
    resources = flatten_resource_requirements(spec.resources)
    if resources:
        block["resources"] = resources
    if spec.selector is not None:
        selector = flatten_label_selector(spec.selector)
        if selector:
            block["selector"] = selector
    if spec.volume_name:
        block["volume_name"] = spec.volume_name
    if spec.storage_class_name is not None:
        block["storage_class_name"] = spec.storage_class_name

    block = {key: value for key, value in block.items() if not _is_empty(value)}
    if not block:
        return None
    return [block]


def flatten_data_volume_spec(spec: DataVolumeSpec) -> list[dict[str, Any]] | None:
    """Turn a data volume spec into its schema list, or None when it is empty."""
    block: dict[str, Any] = {}
    if spec.source is not None:
        block["source"] = flatten_data_volume_source(spec.source)
    if spec.pvc is not None:
        block["pvc"] = flatten_persistent_volume_claim_spec(spec.pvc)
    if spec.source_ref is not None:
        block["source_ref"] = flatten_data_volume_source_ref(spec.source_ref)
    if spec.content_type:
        block["content_type"] = spec.content_type
    if spec.storage is not None:
        storage = flatten_data_volume_storage(spec.storage)
        if storage is not None:
            block["storage"] = storage
    if not block:
        return None
    return [block]