# kvprovider

Python tools for KubeVirt `VirtualMachine` and CDI `DataVolume` objects.

## What is in the package

- `kvprovider.models`: dataclasses for data volume specs and their parts
  (`DataVolumeSpec`, `DataVolumeSource`, `DataVolumeSourceHTTP`,
  `DataVolumeSourcePVC`, `DataVolumeSourceRef`, `StorageSpec`,
  `PersistentVolumeClaimSpec`, `ResourceRequirements`, `LabelSelector`,
  `LabelSelectorRequirement`, `DataVolumeStatus`).
- `kvprovider.spec`, `kvprovider.source`, `kvprovider.storage`,
  `kvprovider.status`: conversion between resource data (lists holding one
  dict per block) and those models, via `expand_*` and `flatten_*` functions.
  `kvprovider.status` also has `validate_phase` and `validate_progress`,
  which raise `ValueError` on bad values.
- `kvprovider.quantity`: `parse_quantity("10Gi")` returns a `Quantity`;
  `str()` prints it back in its own notation. Malformed text raises
  `QuantityError`.
- `kvprovider.client`: `KubeVirtClient` creates, gets, JSON-patches and
  deletes virtual machines and data volumes over the API server's REST
  interface, using a `RestConfig` for host, credentials and TLS. Objects are
  plain dicts. A missing object raises `NotFoundError`; other failures raise
  `ApiError`.
- `kvprovider.config`: `ProviderSettings`, filled from `KUBE_*` environment
  variables by `settings_from_env`; `load_config_file` reads a kubeconfig
  file (with optional context, user and cluster overrides) and returns
  `None` when the file does not exist; `build_rest_config` merges the file
  with explicitly set values; `provider_configure` returns a ready client.
  An unusable kubeconfig raises `ConfigLoadError`.
- `kvprovider.workspace`: preparing a Terraform working directory —
  `unpack` copies a file or directory of assets (read from `assets_dir()`,
  which honours `OPENSHIFT_INSTALL_DATA` and otherwise uses
  `../terraform/data`), `render_versions_file` / `add_versions_files` write a
  `versions.tf` into the directory and every subdirectory, and
  `write_var_files` writes `TfVarFile` objects with owner-only permissions.
- `kvprovider.diagnose`: `diagnose_apply_error` turns known cloud failure
  messages into a `kvprovider.diagnostics.DiagnosticError` carrying a reason
  and an explanation.
- `kvprovider.lineprinter`: `LinePrinter` buffers written bytes and hands
  each complete line to a print callable; `Trimmer` strips the trailing
  newline before passing it on.

## Installation

```
pip install kvprovider
```

For running the tests:

```
pip install "kvprovider[test]"
pytest
```

## Examples

Expanding and flattening a data volume spec:

```python
from kvprovider.spec import expand_data_volume_spec, flatten_data_volume_spec

spec = expand_data_volume_spec([{
    "source_ref": [{"name": "fedora", "kind": "DataSource"}],
    "storage": [{"resources": [{"requests": {"storage": "10Gi"}}]}],
}])
print(spec.source_ref.name)                            # fedora
print(spec.storage.resources.requests["storage"])      # 10Gi
print(flatten_data_volume_spec(spec))
```

Talking to a cluster:

```python
from kvprovider.config import settings_from_env, provider_configure

client = provider_configure(settings_from_env(), "1.5.0")
vm = client.get_virtual_machine("default", "my-vm")
print(vm["metadata"]["name"])
```

Splitting a stream into lines for a logger:

```python
import logging
from kvprovider.lineprinter import LinePrinter, Trimmer

log = logging.getLogger("terraform")
with LinePrinter(Trimmer(log.debug).print) as out:
    out.write(b"first line\nsecond ")
    out.write(b"line\n")
```

Classifying an apply error:

```python
from kvprovider.diagnose import diagnose_apply_error

err = diagnose_apply_error(RuntimeError('Error: Code="OSProvisioningTimedOut"'))
print(err)  # error(AzureVirtualMachineFailure) from Infrastructure Provider: ...
```

## What the package does not do

- It has no command-line program and is not a Terraform provider plugin:
  there is no resource lifecycle (create, wait for readiness, update, delete)
  built on top of the client, and nothing speaks the plugin protocol.
- It does not run `terraform`; the workspace helpers only prepare files.
- Virtual machine objects are passed through as dicts; only data volume
  specs have typed models and schema conversion.
- Kubeconfig support covers static credentials (token, token file,
  username/password, client certificates); exec and auth-provider plugins
  are not supported.