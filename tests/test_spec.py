import pytest

from kvprovider.models import (
    DataVolumeSource,
    DataVolumeSourceHTTP,
    DataVolumeSourceRef,
    DataVolumeSpec,
    LabelSelector,
    LabelSelectorRequirement,
    PersistentVolumeClaimSpec,
    ResourceRequirements,
    StorageSpec,
)
from kvprovider.quantity import QuantityError, parse_quantity
from kvprovider.spec import (
    expand_data_volume_spec,
    expand_persistent_volume_claim_spec,
    flatten_access_modes,
    flatten_data_volume_spec,
    flatten_label_selector,
    flatten_persistent_volume_claim_spec,
)

QUANTITY_MESSAGE = (
    "quantities must match the regular expression '^([+-]?[0-9.]+)([eEinumkKMGTP]*[-+]?[0-9]*)$'"
)


def test_expand_source_ref():
    spec = [{"source_ref": [{"name": "test-source", "kind": "DataSource"}]}]
    out = expand_data_volume_spec(spec)
    assert out.source_ref is not None
    assert out.source_ref.name == "test-source"
    assert out.source_ref.kind == "DataSource"


def test_expand_storage():
    spec = [{"storage": [{"resources": [{"requests": {"storage": "10Gi"}}]}]}]
    out = expand_data_volume_spec(spec)
    assert out.storage is not None
    assert str(out.storage.resources.requests["storage"]) == "10Gi"


def test_flatten_persistent_volume_claim_spec():
    spec = PersistentVolumeClaimSpec(
        access_modes=["ReadWriteOnce"],
        resources=ResourceRequirements(requests={"storage": parse_quantity("10Gi")}),
    )
    flattened = flatten_persistent_volume_claim_spec(spec)
    assert flattened is not None
    assert flattened[0]["resources"][0]["requests"]["storage"] == "10Gi"
    assert flattened[0]["access_modes"] == {"ReadWriteOnce"}


def test_flatten_data_volume_spec():
    spec = DataVolumeSpec(
        source_ref=DataVolumeSourceRef(name="test-source", kind="DataSource", namespace=""),
        storage=StorageSpec(
            resources=ResourceRequirements(requests={"storage": parse_quantity("10Gi")})
        ),
    )
    flattened = flatten_data_volume_spec(spec)
    assert flattened is not None
    assert flattened[0]["source_ref"][0]["name"] == "test-source"
    assert flattened[0]["storage"][0]["resources"][0]["requests"]["storage"] == "10Gi"


@pytest.mark.parametrize("field", ["requests", "limits"])
def test_bad_pvc_quantity_raises(field):
    spec = [{"pvc": [{"resources": [{field: {"storage": "a5"}}]}]}]
    with pytest.raises(QuantityError) as info:
        expand_data_volume_spec(spec)
    assert str(info.value) == QUANTITY_MESSAGE


def test_source_ref_key_takes_precedence_over_source():
    spec = [
        {
            "source": [{"http": [{"url": "https://images.example.com/disk.img"}]}],
            "source_ref": [],
        }
    ]
    out = expand_data_volume_spec(spec)
    assert out.source is None
    assert out.source_ref is None


def test_source_used_without_source_ref():
    spec = [{"source": [{"http": [{"url": "https://images.example.com/disk.img"}]}]}]
    out = expand_data_volume_spec(spec)
    assert out.source.http.url == "https://images.example.com/disk.img"
    assert out.source.pvc is None


def test_pvc_takes_precedence_over_storage():
    spec = [
        {
            "pvc": [{"resources": [{"requests": {"storage": "10Gi"}}]}],
            "storage": [{"resources": [{"requests": {"storage": "5Gi"}}]}],
        }
    ]
    out = expand_data_volume_spec(spec)
    assert out.storage is None
    assert str(out.pvc.resources.requests["storage"]) == "10Gi"


@pytest.mark.parametrize("items", [None, [], [None]])
def test_expand_empty_spec(items):
    assert expand_data_volume_spec(items) == DataVolumeSpec()


def test_content_type_carried():
    out = expand_data_volume_spec([{"content_type": "archive"}])
    assert out.content_type == "archive"
    assert flatten_data_volume_spec(out) == [{"content_type": "archive"}]


def test_flatten_empty_spec_is_none():
    assert flatten_data_volume_spec(DataVolumeSpec()) is None


def test_expand_pvc_fields():
    out = expand_persistent_volume_claim_spec(
        [
            {
                "access_modes": {"ReadWriteOnce"},
                "volume_name": "vol-a",
                "storage_class_name": "local",
                "selector": [{"match_labels": {"app": "db"}}],
            }
        ]
    )
    assert out.access_modes == ["ReadWriteOnce"]
    assert out.volume_name == "vol-a"
    assert out.storage_class_name == "local"
    assert out.selector.match_labels == {"app": "db"}


def test_pvc_round_trip():
    original = [
        {
            "access_modes": frozenset({"ReadWriteOnce"}),
            "resources": [{"requests": {"storage": "10Gi"}}],
            "volume_name": "vol-a",
            "storage_class_name": "local",
        }
    ]
    spec = expand_persistent_volume_claim_spec(original)
    assert flatten_persistent_volume_claim_spec(spec) == original


def test_spec_round_trip_with_source():
    spec = DataVolumeSpec(
        source=DataVolumeSource(http=DataVolumeSourceHTTP(url="https://images.example.com/a.img")),
        pvc=PersistentVolumeClaimSpec(
            access_modes=["ReadWriteOnce"],
            resources=ResourceRequirements(requests={"storage": parse_quantity("10Gi")}),
        ),
    )
    assert expand_data_volume_spec(flatten_data_volume_spec(spec)) == spec


def test_flatten_empty_pvc_is_none():
    assert flatten_persistent_volume_claim_spec(PersistentVolumeClaimSpec()) is None


def test_flatten_access_modes():
    assert flatten_access_modes([]) is None
    assert flatten_access_modes(["ReadWriteOnce", "ReadWriteOnce"]) == {"ReadWriteOnce"}


def test_flatten_label_selector():
    assert flatten_label_selector(None) is None
    assert flatten_label_selector(LabelSelector()) is None
    selector = LabelSelector(
        match_labels={"app": "db"},
        match_expressions=[LabelSelectorRequirement("tier", "In", ["a", "b"])],
    )
    assert flatten_label_selector(selector) == {
        "match_labels": {"app": "db"},
        "match_expressions": [{"key": "tier", "operator": "In", "values": ["a", "b"]}],
    }