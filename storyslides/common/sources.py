"""
Loading helpers for background photos and configuration files.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Mapping

import requests
import yaml

from .errors import ConfigurationError, PhotoSourceError

PathLike = str | Path
PhotoSource = bytes | bytearray | memoryview | PathLike

DEFAULT_REQUEST_TIMEOUT = 30.0

logger = logging.getLogger(__name__)


def resolve_request_timeout(timeout: float | None = None) -> float:
    if timeout is not None:
        return float(timeout)

    raw = os.getenv("STORYSLIDES_REQUEST_TIMEOUT")
    if not raw:
        return DEFAULT_REQUEST_TIMEOUT
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"STORYSLIDES_REQUEST_TIMEOUT must be a number, got {raw!r}"
        ) from exc


def load_photo(source: PhotoSource, *, timeout: float | None = None) -> bytes:
    """
    Return the raw bytes of a background photo.

    ``source`` may already be bytes, a local file path, or an ``http(s)`` URL.
    """

    if isinstance(source, (bytes, bytearray, memoryview)):
        data = bytes(source)
        if not data:
            raise PhotoSourceError("Photo bytes are empty.")
        return data

    location = str(source).strip()
    if not location:
        raise PhotoSourceError("Photo source must be a non-empty path or URL.")

    if location.lower().startswith(("http://", "https://")):
        return _fetch_photo(location, resolve_request_timeout(timeout))

    path = Path(location).expanduser()
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise PhotoSourceError(f"Could not read photo file {path}") from exc
    if not data:
        raise PhotoSourceError(f"Photo file {path} is empty.")
    return data


def _fetch_photo(url: str, timeout: float) -> bytes:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Photo download failed for %s: %s", url, exc)
        raise PhotoSourceError(f"Could not download photo from {url}") from exc
    return response.content


def load_mapping_file(path: PathLike) -> Mapping[str, Any]:
    """
    Load a YAML or JSON file that must deserialize to a mapping.
    """

    file_path = Path(path)
    text = file_path.read_text(encoding="utf-8")
    suffix = file_path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text)
    elif suffix == ".json":
        data = json.loads(text)
    else:
        raise ConfigurationError("Unsupported configuration file format. Use YAML or JSON.")

    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ConfigurationError(f"{file_path} must deserialize to a mapping.")
    return data
