"""SSH utilities for shipwright."""

from .credentials import SSHCredentials
from .session import SSHCommandResult, SSHConnectionError, SSHSession
from .probe import RemoteProbe, RemoteToolVersions

__all__ = [
    "SSHCredentials",
    "SSHCommandResult",
    "SSHConnectionError",
    "SSHSession",
    "RemoteProbe",
    "RemoteToolVersions",
]
