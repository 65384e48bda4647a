"""SSH credential helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class SSHCredentials:
    """Normalized key-based credential payload."""

    host: str
    username: str
    key_path: str
    port: int = 22
    passphrase: Optional[str] = None
    connect_timeout: int = 10

    @property
    def target(self) -> str:
        return f"{self.username}@{self.host}"

    def validate(self) -> None:
        if not self.host:
            raise ValueError("No host provided")
        if not self.username:
            raise ValueError("No username provided")
        if not self.key_path:
            raise ValueError("Key authentication selected but no key_path provided")
