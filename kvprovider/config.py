"""Provider settings and building the cluster connection from them."""

from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from kvprovider.client import KubeVirtClient, RestConfig

log = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "~/.kube/config"
DEFAULT_TERRAFORM_VERSION = "0.11+compatible"

_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})

# Environment variable and the text setting it fills.
_TEXT_SETTINGS = (
    ("KUBE_HOST", "host"),
    ("KUBE_USER", "username"),
    ("KUBE_PASSWORD", "password"),
    ("KUBE_CLIENT_CERT_DATA", "client_certificate"),
    ("KUBE_CLIENT_KEY_DATA", "client_key"),
    ("KUBE_CLUSTER_CA_CERT_DATA", "cluster_ca_certificate"),
    ("KUBE_CTX", "config_context"),
    ("KUBE_CTX_AUTH_INFO", "config_context_auth_info"),
    ("KUBE_CTX_CLUSTER", "config_context_cluster"),
    ("KUBE_TOKEN", "token"),
)


class ConfigLoadError(Exception):
    """Raised when a kubeconfig file exists but cannot be used."""


@dataclass
class ProviderSettings:
    """Everything the provider block can configure."""

    host: str = ""
    username: str = ""
    password: str = ""
    insecure: bool = False
    client_certificate: str = ""
    client_key: str = ""
    cluster_ca_certificate: str = ""
    config_path: str = DEFAULT_CONFIG_PATH
    config_context: str = ""
    config_context_auth_info: str = ""
    config_context_cluster: str = ""
    token: str = ""
    load_config_file: bool = True


def _parse_bool(name: str, text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean value {text!r} for {name}")


def settings_from_env(environ: Mapping[str, str] | None = None) -> ProviderSettings:
    """Build settings from the environment variables the provider honours."""
    env = os.environ if environ is None else environ

    def flag(key: str, default: bool) -> bool:
        value = env.get(key)
        return _parse_bool(key, value) if value else default

    config_path = next(
        (env[key] for key in ("KUBE_CONFIG", "KUBECONFIG") if env.get(key)),
        DEFAULT_CONFIG_PATH,
    )
    text_values = {field: env.get(key) or "" for key, field in _TEXT_SETTINGS}
    return ProviderSettings(
        **text_values,
        insecure=flag("KUBE_INSECURE", False),
        config_path=config_path,
        load_config_file=flag("KUBE_LOAD_CONFIG_FILE", True),
    )


def _expand_home(path: str) -> str:
    if not path or not path.startswith("~"):
        return path
    if len(path) > 1 and path[1] not in "/\\":
        raise ConfigLoadError("cannot expand user-specific home dir")
    return os.path.expanduser(path)


def _named(raw: Mapping[str, Any], section: str, key: str) -> dict[str, dict[str, Any]]:
    entries = raw.get(section) or []
    if not isinstance(entries, list):
        raise ValueError(f"invalid configuration: {section} must be a list")
    result = {}
    for entry in entries:
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise ValueError(f"invalid configuration: malformed entry in {section}")
        result[str(entry["name"])] = dict(entry.get(key) or {})
    return result


def _data_or_file(block: Mapping[str, Any], key: str, base_dir: Path) -> bytes:
    data = block.get(f"{key}-data")
    if data:
        return base64.b64decode(str(data), validate=True)
    filename = block.get(key)
    if filename:
        return (base_dir / str(filename)).read_bytes()
    return b""


def _client_config(
    raw: Any,
    base_dir: Path,
    current_context: str,
    auth_info: str,
    cluster: str,
) -> RestConfig:
    if raw is None:
        raw = {}
    if not isinstance(raw, Mapping):
        raise ValueError("invalid configuration: the document is not a mapping")

    contexts = _named(raw, "contexts", "context")
    clusters = _named(raw, "clusters", "cluster")
    users = _named(raw, "users", "user")

    context_name = current_context or str(raw.get("current-context") or "")
    context: dict[str, Any] = {}
    if context_name:
        if context_name not in contexts:
            raise ValueError(f'context "{context_name}" does not exist')
        context = contexts[context_name]

    cluster_name = cluster or str(context.get("cluster") or "")
    user_name = auth_info or str(context.get("user") or "")

    if not cluster_name:
        raise ValueError("invalid configuration: no configuration has been provided")
    if cluster_name not in clusters:
        raise ValueError(f'cluster "{cluster_name}" does not exist')
    cluster_block = clusters[cluster_name]
    server = str(cluster_block.get("server") or "")
    if not server:
        raise ValueError(f'invalid configuration: no server found for cluster "{cluster_name}"')

    user_block: dict[str, Any] = {}
    if user_name:
        if user_name not in users:
            raise ValueError(f'user "{user_name}" does not exist')
        user_block = users[user_name]

    bearer = str(user_block.get("token") or "")
    if not bearer and user_block.get("tokenFile"):
        bearer = (base_dir / str(user_block["tokenFile"])).read_text().strip()

    password = str(user_block.get("password") or "")
    return RestConfig(
        host=server,
        username=str(user_block.get("username") or ""),
        password=password,
        bearer_token=bearer,
        insecure=bool(cluster_block.get("insecure-skip-tls-verify", False)),
        ca_data=_data_or_file(cluster_block, "certificate-authority", base_dir),
        cert_data=_data_or_file(user_block, "client-certificate", base_dir),
        key_data=_data_or_file(user_block, "client-key", base_dir),
    )


def load_config_file(settings: ProviderSettings) -> RestConfig | None:
    """Load connection settings from the kubeconfig file the settings point at.

    Returns None when the file does not exist.
    """
    path = _expand_home(settings.config_path)

    ctx_suffix = "; default context"
    if settings.config_context or settings.config_context_auth_info or settings.config_context_cluster:
        ctx_suffix = "; overriden context"
        if settings.config_context:
            ctx_suffix += f"; config ctx: {settings.config_context}"
            log.debug("Using custom current context: %r", settings.config_context)
        if settings.config_context_auth_info:
            ctx_suffix += f"; auth_info: {settings.config_context_auth_info}"
        if settings.config_context_cluster:
            ctx_suffix += f"; cluster: {settings.config_context_cluster}"
        log.debug(
            "Using overidden context: auth_info=%r cluster=%r",
            settings.config_context_auth_info,
            settings.config_context_cluster,
        )

    if not path:
        log.info("Unable to load config file as no path was given")
        return None
    config_file = Path(path)
    try:
        text = config_file.read_text(encoding="utf-8")
    except FileNotFoundError:
        log.info("Unable to load config file as it doesn't exist at %r", path)
        return None
    except OSError as exc:
        raise ConfigLoadError(f"Failed to load config ({path}{ctx_suffix}): {exc}") from exc

    try:
        config = _client_config(
            yaml.safe_load(text),
            config_file.parent,
            settings.config_context,
            settings.config_context_auth_info,
            settings.config_context_cluster,
        )
    except (ValueError, OSError, yaml.YAMLError) as exc:
        raise ConfigLoadError(f"Failed to load config ({path}{ctx_suffix}): {exc}") from exc

    log.info("Successfully loaded config file (%s%s)", path, ctx_suffix)
    return config


def build_rest_config(settings: ProviderSettings, terraform_version: str) -> RestConfig:
    """Combine the kubeconfig file (if enabled) with the explicitly set values."""
    config = load_config_file(settings) if settings.load_config_file else None
    if config is None:
        config = RestConfig()

    changes: dict[str, Any] = {"user_agent": f"HashiCorp/1.0 Terraform/{terraform_version}"}
    if settings.host:
        changes["host"] = settings.host
    if settings.username:
        changes["username"] = settings.username
    if settings.password:
        changes["password"] = settings.password
    if settings.insecure:
        changes["insecure"] = True
    if settings.cluster_ca_certificate:
        changes["ca_data"] = settings.cluster_ca_certificate.encode("utf-8")
    if settings.client_certificate:
        changes["cert_data"] = settings.client_certificate.encode("utf-8")
    if settings.client_key:
        changes["key_data"] = settings.client_key.encode("utf-8")
    if settings.token:
        changes["bearer_token"] = settings.token
    return replace(config, **changes)


def provider_configure(settings: ProviderSettings, terraform_version: str = "") -> KubeVirtClient:
    """Build the API client the resources use."""
    version = terraform_version or DEFAULT_TERRAFORM_VERSION
    return KubeVirtClient(build_rest_config(settings, version))