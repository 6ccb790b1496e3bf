"""A small REST client for virtual machine and data volume objects."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import weakref
from dataclasses import dataclass
from typing import Any, Sequence

import requests

log = logging.getLogger(__name__)


@dataclass
class RestConfig:
    """Connection settings for the cluster API server."""

    host: str = ""
    username: str = ""
    password: str = ""
    bearer_token: str = ""
    insecure: bool = False
    ca_data: bytes = b""
    cert_data: bytes = b""
    key_data: bytes = b""
    user_agent: str = ""


class ApiError(Exception):
    """An error reported by, or while talking to, the API server."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class NotFoundError(ApiError):
    """The requested object does not exist."""


@dataclass(frozen=True)
class _Resource:
    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    def path(self, namespace: str, name: str | None = None) -> str:
        path = f"/apis/{self.group}/{self.version}/namespaces/{namespace}/{self.plural}"
        return f"{path}/{name}" if name is not None else path


_VIRTUAL_MACHINES = _Resource("kubevirt.io", "v1", "virtualmachines", "VirtualMachine")
_DATA_VOLUMES = _Resource("cdi.kubevirt.io", "v1beta1", "datavolumes", "DataVolume")

_JSON_PATCH = "application/json-patch+json"


def _remove_files(paths: list[str]) -> None:
    for path in paths:
        try:
            os.unlink(path)
        except OSError:
            pass


def _base_url(config: RestConfig) -> str:
    host = config.host or "localhost"
    if "://" not in host:
        tls = config.insecure or bool(config.ca_data or config.cert_data)
        host = ("https://" if tls else "http://") + host
    return host.rstrip("/")


def _status_error(response: requests.Response) -> ApiError:
    message = ""
    try:
        body = response.json()
        if isinstance(body, dict):
            message = str(body.get("message") or "")
    except ValueError:
        pass
    if not message:
        message = response.text.strip() or f"the server responded with status {response.status_code}"
    error_type = NotFoundError if response.status_code == 404 else ApiError
    return error_type(message, response.status_code)


class KubeVirtClient:
    """Create, read, patch and delete virtual machines and data volumes."""

    def __init__(self, config: RestConfig, session: requests.Session | None = None) -> None:
        self._temp_files: list[str] = []
        weakref.finalize(self, _remove_files, self._temp_files)
        try:
            self._base = _base_url(config)
            self._session = session if session is not None else requests.Session()
            self._configure(config)
        except (ValueError, OSError) as exc:
            msg = f"Failed to create client, with error: {exc}"
            log.error(msg)
            raise ApiError(msg) from exc

    def _temp_file(self, data: bytes) -> str:
        fd, path = tempfile.mkstemp(suffix=".pem")
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
        self._temp_files.append(path)
        return path

    def _configure(self, config: RestConfig) -> None:
        if config.bearer_token and (config.username or config.password):
            raise ValueError("username/password or bearer token may be set, but not both")
        if config.insecure and config.ca_data:
            raise ValueError(
                "specifying a root certificates file with the insecure flag is not allowed"
            )
        session = self._session
        if config.user_agent:
            session.headers["User-Agent"] = config.user_agent
        if config.bearer_token:
            session.headers["Authorization"] = f"Bearer {config.bearer_token}"
        elif config.username or config.password:
            session.auth = (config.username, config.password)
        if config.insecure:
            session.verify = False
        elif config.ca_data:
            session.verify = self._temp_file(config.ca_data)
        if config.cert_data and config.key_data:
            session.cert = (self._temp_file(config.cert_data), self._temp_file(config.key_data))

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        try:
            response = self._session.request(method, self._base + path, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(str(exc)) from exc
        if response.status_code >= 400:
            raise _status_error(response)
        return response

    @staticmethod
    def _decode(response: requests.Response, kind: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            body, error = None, exc
        else:
            error = "response is not an object"
        if not isinstance(body, dict):
            msg = f"Failed to translate unstructed to {kind}, with error: {error}"
            log.error(msg)
            raise ApiError(msg)
        return body

    def _create(self, obj: dict[str, Any], resource: _Resource) -> dict[str, Any]:
        body = {**obj, "apiVersion": resource.api_version, "kind": resource.kind}
        namespace = (body.get("metadata") or {}).get("namespace", "")
        try:
            response = self._request("POST", resource.path(namespace), json=body)
        except ApiError as exc:
            msg = f"Failed to create {resource.plural}, with error: {exc}"
            log.error(msg)
            raise ApiError(msg, exc.status_code) from exc
        return self._decode(response, resource.kind)

    def _get(self, namespace: str, name: str, resource: _Resource) -> dict[str, Any]:
        try:
            response = self._request("GET", resource.path(namespace, name))
        except NotFoundError:
            log.warning("%s %s not found (namespace=%s)", resource.kind, name, namespace)
            raise
        except ApiError as exc:
            msg = f"Failed to get {resource.kind}, with error: {exc}"
            log.error(msg)
            raise ApiError(msg, exc.status_code) from exc
        return self._decode(response, resource.kind)

    def _update(
        self, namespace: str, name: str, resource: _Resource, patch: Any
    ) -> dict[str, Any]:
        if isinstance(patch, (bytes, bytearray)):
            data = bytes(patch)
        elif isinstance(patch, str):
            data = patch.encode("utf-8")
        else:
            data = json.dumps(list(patch)).encode("utf-8")
        try:
            response = self._request(
                "PATCH",
                resource.path(namespace, name),
                data=data,
                headers={"Content-Type": _JSON_PATCH},
            )
        except ApiError as exc:
            msg = f"Failed to update {resource.plural}, with error: {exc}"
            log.error(msg)
            raise ApiError(msg, exc.status_code) from exc
        return self._decode(response, resource.kind)

    def _delete(self, namespace: str, name: str, resource: _Resource) -> None:
        self._request("DELETE", resource.path(namespace, name))

    def create_virtual_machine(self, vm: dict[str, Any]) -> dict[str, Any]:
        """Create a virtual machine and return the object the server stored."""
        return self._create(vm, _VIRTUAL_MACHINES)

    def get_virtual_machine(self, namespace: str, name: str) -> dict[str, Any]:
        """Fetch a virtual machine; raises NotFoundError when it does not exist."""
        return self._get(namespace, name, _VIRTUAL_MACHINES)

    def update_virtual_machine(
        self, namespace: str, name: str, patch: bytes | str | Sequence[dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply a JSON patch to a virtual machine and return the result."""
        return self._update(namespace, name, _VIRTUAL_MACHINES, patch)

    def delete_virtual_machine(self, namespace: str, name: str) -> None:
        """Delete a virtual machine."""
        self._delete(namespace, name, _VIRTUAL_MACHINES)

    def create_data_volume(self, dv: dict[str, Any]) -> dict[str, Any]:
        """Create a data volume and return the object the server stored."""
        return self._create(dv, _DATA_VOLUMES)

    def get_data_volume(self, namespace: str, name: str) -> dict[str, Any]:
        """Fetch a data volume; raises NotFoundError when it does not exist."""
        return self._get(namespace, name, _DATA_VOLUMES)

    def update_data_volume(
        self, namespace: str, name: str, patch: bytes | str | Sequence[dict[str, Any]]
    ) -> dict[str, Any]:
        """Apply a JSON patch to a data volume and return the result."""
        return self._update(namespace, name, _DATA_VOLUMES, patch)

    def delete_data_volume(self, namespace: str, name: str) -> None:
        """Delete a data volume."""
        self._delete(namespace, name, _DATA_VOLUMES)