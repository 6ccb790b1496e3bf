"""Conversion between schema lists and data volume source objects."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from kvprovider.models import (
    DataVolumeSource,
    DataVolumeSourceHTTP,
    DataVolumeSourcePVC,
    DataVolumeSourceRef,
)


def _single_block(items: Sequence[Any] | None) -> dict[str, Any] | None:
    if not items or items[0] is None:
        return None
    return items[0]


def expand_data_volume_source(items: Sequence[Any] | None) -> DataVolumeSource:
    """Build a source from its schema block; an empty block gives an empty source."""
    block = _single_block(items)
    if block is None:
        return DataVolumeSource()
    return DataVolumeSource(
        http=expand_data_volume_source_http(block.get("http") or []),
        pvc=expand_data_volume_source_pvc(block.get("pvc") or []),
    )


def expand_data_volume_source_http(items: Sequence[Any] | None) -> DataVolumeSourceHTTP | None:
    """Build an HTTP source from its schema block, or None when absent."""
    block = _single_block(items)
    if block is None:
        return None
    result = DataVolumeSourceHTTP()
    if isinstance(url := block.get("url"), str):
        result.url = url
    if isinstance(secret_ref := block.get("secret_ref"), str):
        result.secret_ref = secret_ref
    if isinstance(cert_config_map := block.get("cert_config_map"), str):
        result.cert_config_map = cert_config_map
    return result


def expand_data_volume_source_pvc(items: Sequence[Any] | None) -> DataVolumeSourcePVC | None:
    """Build a PVC source from its schema block, or None when absent."""
    block = _single_block(items)
    if block is None:
        return None
    result = DataVolumeSourcePVC()
    if isinstance(namespace := block.get("namespace"), str):
        result.namespace = namespace
    if isinstance(name := block.get("name"), str):
        result.name = name
    return result


def expand_data_volume_source_ref(items: Sequence[Any] | None) -> DataVolumeSourceRef | None:
    """Build a source reference from its schema block, or None when absent."""
    block = _single_block(items)
    if block is None:
        return None
    result = DataVolumeSourceRef()
    if isinstance(namespace := block.get("namespace"), str):
        result.namespace = namespace
    if isinstance(name := block.get("name"), str):
        result.name = name
    if isinstance(kind := block.get("kind"), str):
        result.kind = kind
    return result


def expand_access_modes(values: Iterable[Any]) -> list[str]:
    """Turn schema access mode values into a list of mode names."""
    modes = []
    for value in values:
        if not isinstance(value, str):
            raise TypeError(f"access mode must be a string, got {value!r}")
        modes.append(value)
    return modes


def flatten_data_volume_source(source: DataVolumeSource) -> list[dict[str, Any]]:
    """Turn a source into its single-element schema list."""
    block: dict[str, Any] = {}
    if source.http is not None:
        block["http"] = flatten_data_volume_source_http(source.http)
    if source.pvc is not None:
        block["pvc"] = flatten_data_volume_source_pvc(source.pvc)
    return [block]


def flatten_data_volume_source_http(http: DataVolumeSourceHTTP) -> list[dict[str, Any]]:
    """Turn an HTTP source into its single-element schema list."""
    return [
        {
            "url": http.url,
            "secret_ref": http.secret_ref,
            "cert_config_map": http.cert_config_map,
        }
    ]


def flatten_data_volume_source_pvc(pvc: DataVolumeSourcePVC) -> list[dict[str, Any]]:
    """Turn a PVC source into its single-element schema list."""
    return [{"namespace": pvc.namespace, "name": pvc.name}]


def flatten_data_volume_source_ref(ref: DataVolumeSourceRef) -> list[dict[str, Any]]:
    """Turn a source reference into its single-element schema list."""
    return [
        {
            "namespace": ref.namespace if ref.namespace is not None else "",
            "name": ref.name,
            "kind": ref.kind,
        }
    ]