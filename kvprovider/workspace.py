"""Preparing a working directory for apply runs: assets, version pins and variable files."""

from __future__ import annotations

import os
import posixpath
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Sequence

_DEFAULT_ASSETS = "../terraform/data"
_ASSETS_ENV = "OPENSHIFT_INSTALL_DATA"

_VERSIONS_FILE = "versions.tf"

_HTML_ESCAPES = {
    "\0": "\ufffd",
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "+": "&#43;",
}


@dataclass(frozen=True)
class TfVarFile:
    """A variables file to be written into the working directory."""

    filename: str
    data: bytes


@dataclass(frozen=True)
class ProviderSource:
    """A required provider: its local name and where it is installed from."""

    name: str
    source: str


DEFAULT_PROVIDERS: tuple[ProviderSource, ...] = (
    ProviderSource("kubevirt", "terraform.local/local/kubevirt"),
)


def assets_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Return the directory assets are read from."""
    env = os.environ if environ is None else environ
    return Path(env.get(_ASSETS_ENV) or _DEFAULT_ASSETS)


def _asset_path(root: Path, uri: str) -> Path:
    relative = posixpath.normpath("/" + uri).lstrip("/")
    return root.joinpath(*relative.split("/")) if relative else root


def _copy_tree(source: Path, target: Path) -> None:
    if source.is_dir():
        try:
            target.mkdir()
        except OSError:
            pass
        for child in sorted(source.iterdir(), key=lambda p: p.name):
            _copy_tree(child, target / child.name)
        return
    with source.open("rb") as src, target.open("wb") as dst:
        shutil.copyfileobj(src, dst)


def unpack(base: str | os.PathLike, uri: str, assets: str | os.PathLike | None = None) -> None:
    """Copy the asset at ``uri`` (a file or a whole directory) to ``base``."""
    root = Path(assets) if assets is not None else assets_dir()
    _copy_tree(_asset_path(root, uri), Path(base))


def _escape(value: str) -> str:
    return "".join(_HTML_ESCAPES.get(ch, ch) for ch in value)


def render_versions_file(providers: Iterable[ProviderSource] | None = None) -> str:
    """Render the ``versions.tf`` contents pinning the given providers."""
    chosen = DEFAULT_PROVIDERS if providers is None else providers
    blocks = "".join(
        f"\n    {_escape(p.name)} = {{\n      source = \"{_escape(p.source)}\"\n    }}"
        for p in chosen
    )
    return (
        "terraform {\n"
        '  required_version = ">= 1.0.0"\n'
        "  required_providers {"
        f"{blocks}\n"
        "  }\n"
        "}\n"
    )


def add_file_to_all_directories(name: str, data: bytes, work_dir: str | os.PathLike) -> None:
    """Write ``data`` as ``name`` into ``work_dir`` and every directory beneath it."""
    root = Path(work_dir)
    (root / name).write_bytes(data)
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            add_file_to_all_directories(name, data, entry)


def add_versions_files(work_dir: str | os.PathLike) -> None:
    """Place a ``versions.tf`` in the working directory and all its subdirectories."""
    data = render_versions_file(DEFAULT_PROVIDERS).encode("utf-8")
    add_file_to_all_directories(_VERSIONS_FILE, data, work_dir)


def write_var_files(work_dir: str | os.PathLike, var_files: Sequence[TfVarFile]) -> list[Path]:
    """Write the variable files with owner-only permissions and return their paths."""
    paths = []
    for var_file in var_files:
        path = Path(work_dir) / var_file.filename
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as handle:
            handle.write(var_file.data)
        paths.append(path)
    return paths