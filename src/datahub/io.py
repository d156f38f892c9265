"""Helpers for downloading tables and tracking cache metadata."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

import requests

METADATA_SUFFIX = ".meta.json"


def sha256sum(path: Path) -> str:
    """Compute the SHA256 checksum for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def metadata_path(table: Path) -> Path:
    return table.with_name(table.name + METADATA_SUFFIX)


def read_metadata(path: Path) -> Mapping[str, Any]:
    """Load metadata JSON attached to a table, returning an empty mapping on failure."""
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        return {}


def write_metadata(path: Path, payload: Mapping[str, Any]) -> None:
    """Persist metadata next to the table so later fetches can detect local edits."""
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))


def needs_download(table: Path, expected_sha: Optional[str]) -> bool:
    """Determine whether the table must be re-downloaded.

    Without an explicit checksum, the one recorded in the metadata sidecar is
    used instead; a table with neither is trusted as is.
    """
    if not table.exists():
        return True
    if not expected_sha:
        expected_sha = read_metadata(metadata_path(table)).get("sha256")
        if not expected_sha:
            return False
    return sha256sum(table) != expected_sha


def download_stream(url: str, dest: Path) -> None:
    """Stream a remote file to disk atomically."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with requests.get(url, stream=True, timeout=60) as response:
        response.raise_for_status()
        with tempfile.NamedTemporaryFile(delete=False, dir=dest.parent) as tmp:
            for chunk in response.iter_content(chunk_size=8192):
                if chunk:
                    tmp.write(chunk)
    os.replace(tmp.name, dest)


def fetch_table(
    url: str,
    dest: Path,
    expected_sha: Optional[str] = None,
    force: bool = False,
) -> Path:
    """Download `url` to `dest` unless a matching copy is already cached."""
    if not force and not needs_download(dest, expected_sha):
        return dest

    download_stream(url, dest)
    digest = sha256sum(dest)
    if expected_sha and digest != expected_sha:
        dest.unlink()
        raise ValueError(f"Checksum mismatch for {url}: expected {expected_sha}, got {digest}")
    write_metadata(metadata_path(dest), {"url": url, "sha256": digest})
    return dest


__all__ = [
    "METADATA_SUFFIX",
    "download_stream",
    "fetch_table",
    "metadata_path",
    "needs_download",
    "read_metadata",
    "sha256sum",
    "write_metadata",
]
