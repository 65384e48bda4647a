"""Input validation for the values collected at the start of a run."""

from __future__ import annotations

import os
import re
from pathlib import Path

from .exceptions import InvalidInputError

_URL_PATTERN = re.compile(r"https?://")
# Shape only: 999.999.999.999 is accepted
_IP_PATTERN = re.compile(r"[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}\.[0-9]{1,3}")
_PORT_PATTERN = re.compile(r"[0-9]+")

MIN_PORT = 1
MAX_PORT = 65535


def validate_url(url: str) -> bool:
    return bool(_URL_PATTERN.match(url))


def validate_ip(ip: str) -> bool:
    return _IP_PATTERN.fullmatch(ip) is not None


def validate_port(port: str) -> bool:
    if _PORT_PATTERN.fullmatch(port) is None:
        return False
    return MIN_PORT <= int(port) <= MAX_PORT


def derive_project_name(repo_url: str) -> str:
    """Last path segment of the URL without a trailing ``.git``."""
    slug = repo_url.rstrip("/").split("/")[-1]
    if slug.endswith(".git"):
        slug = slug[:-4]
    return slug or "repository"


def resolve_ssh_key(path: str) -> Path:
    """Expand ``~``, require an existing file and restrict it to 0600."""
    key_path = Path(os.path.expanduser(path))
    if not key_path.is_file():
        raise InvalidInputError(f"SSH key file not found: {key_path}")
    try:
        key_path.chmod(0o600)
    except OSError as exc:
        raise InvalidInputError(f"Cannot set permissions on SSH key {key_path}: {exc}") from exc
    return key_path
