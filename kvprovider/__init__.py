"""KubeVirt data volume and virtual machine tooling: models and schema conversion, quantities, a REST client, provider configuration and workspace helpers."""

__version__ = "0.1.0"

__all__ = [
    "client",
    "config",
    "diagnose",
    "diagnostics",
    "lineprinter",
    "models",
    "quantity",
    "source",
    "spec",
    "status",
    "storage",
    "workspace",
]