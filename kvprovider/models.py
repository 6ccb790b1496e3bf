"""Data volume objects exchanged with the cluster and the resource schema."""

from __future__ import annotations

from dataclasses import dataclass, field

from kvprovider.quantity import Quantity


@dataclass
class DataVolumeSourceHTTP:
    """Import data from an HTTP endpoint."""

    url: str = ""
    secret_ref: str = ""
    cert_config_map: str = ""


@dataclass
class DataVolumeSourcePVC:
    """Clone data from an existing persistent volume claim."""

    namespace: str = ""
    name: str = ""


@dataclass
class DataVolumeSourceRef:
    """An indirect reference to the source of the data."""

    kind: str = ""
    name: str = ""
    namespace: str | None = None


@dataclass
class DataVolumeSource:
    """Where the data of a data volume comes from."""

    http: DataVolumeSourceHTTP | None = None
    pvc: DataVolumeSourcePVC | None = None


@dataclass
class ResourceRequirements:
    """Requested and limited amounts of named resources."""

    requests: dict[str, Quantity] = field(default_factory=dict)
    limits: dict[str, Quantity] = field(default_factory=dict)


@dataclass
class StorageSpec:
    """Storage requirements of a data volume."""

    access_modes: list[str] = field(default_factory=list)
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)


@dataclass
class LabelSelectorRequirement:
    """One ``key operator values`` expression of a label selector."""

    key: str
    operator: str
    values: list[str] = field(default_factory=list)


@dataclass
class LabelSelector:
    """Selects objects by exact labels and label expressions."""

    match_labels: dict[str, str] = field(default_factory=dict)
    match_expressions: list[LabelSelectorRequirement] = field(default_factory=list)


@dataclass
class PersistentVolumeClaimSpec:
    """The claim a data volume is backed by."""

    access_modes: list[str] = field(default_factory=list)
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)
    selector: LabelSelector | None = None
    volume_name: str = ""
    storage_class_name: str | None = None


@dataclass
class DataVolumeSpec:
    """The desired state of a data volume."""

    source: DataVolumeSource | None = None
    source_ref: DataVolumeSourceRef | None = None
    pvc: PersistentVolumeClaimSpec | None = None
    storage: StorageSpec | None = None
    content_type: str = ""


@dataclass
class DataVolumeStatus:
    """The observed phase and progress of a data volume."""

    phase: str = ""
    progress: str = ""