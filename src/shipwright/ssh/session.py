"""SSH session management built on Paramiko."""

from __future__ import annotations

import socket
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

import paramiko

from ..exceptions import DeployerError
from .credentials import SSHCredentials

READ_CHUNK_SIZE = 32768
POLL_INTERVAL = 0.05


class SSHConnectionError(DeployerError):
    """Raised when an SSH connection cannot be established."""

    pass


@dataclass
class SSHCommandResult:
    command: str
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class SSHSession:
    """High-level wrapper around paramiko.SSHClient.

    Host keys are never verified: unknown hosts are accepted automatically.
    """

    def __init__(
        self,
        credentials: SSHCredentials,
        *,
        client_factory: Callable[[], paramiko.SSHClient] | None = None,
    ) -> None:
        self.credentials = credentials
        self._client_factory = client_factory or paramiko.SSHClient
        self._client: Optional[paramiko.SSHClient] = None

    def __enter__(self) -> "SSHSession":
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        self.close()

    @property
    def connected(self) -> bool:
        return self._client is not None

    def connect(self) -> None:
        if self._client:
            return
        client = self._client_factory()
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        connect_kwargs = {
            "hostname": self.credentials.host,
            "port": self.credentials.port,
            "username": self.credentials.username,
            "key_filename": self.credentials.key_path,
            "timeout": self.credentials.connect_timeout,
            "banner_timeout": self.credentials.connect_timeout,
            "auth_timeout": self.credentials.connect_timeout,
            "look_for_keys": False,
            "allow_agent": False,
        }
        if self.credentials.passphrase:
            connect_kwargs["passphrase"] = self.credentials.passphrase
        try:
            client.connect(**connect_kwargs)
        except (paramiko.SSHException, OSError) as exc:
            client.close()
            raise SSHConnectionError(
                f"Cannot connect to {self.credentials.target}: {exc}"
            ) from exc
        self._client = client

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def run(
        self,
        command: str,
        *,
        stdin_data: Optional[str] = None,
        timeout: Optional[int] = None,
    ) -> SSHCommandResult:
        """
        Execute a command on the remote server and wait for it to finish.

        Args:
            command: Shell command line run by the remote user's shell
            stdin_data: Text fed to the command's standard input
            timeout: Total seconds the command may run before it is abandoned

        Returns:
            SSHCommandResult; exit_status is -1 when the command timed out
        """
        if not self._client:
            self.connect()
        assert self._client is not None

        try:
            stdin, stdout, stderr = self._client.exec_command(command, timeout=timeout)
        except (paramiko.SSHException, OSError) as exc:
            raise SSHConnectionError(f"Lost connection to {self.credentials.target}: {exc}") from exc

        if stdin_data is not None:
            stdin.write(stdin_data)
            stdin.flush()
            stdin.channel.shutdown_write()

        # stdout and stderr share one channel window, so both are read each pass
        channel = stdout.channel
        stdout_chunks: List[bytes] = []
        stderr_chunks: List[bytes] = []
        deadline = time.monotonic() + timeout if timeout else None
        try:
            while True:
                has_activity = False
                while channel.recv_ready():
                    stdout_chunks.append(channel.recv(READ_CHUNK_SIZE))
                    has_activity = True
                while channel.recv_stderr_ready():
                    stderr_chunks.append(channel.recv_stderr(READ_CHUNK_SIZE))
                    has_activity = True

                if channel.exit_status_ready() and not (channel.recv_ready() or channel.recv_stderr_ready()):
                    break
                if deadline is not None and time.monotonic() > deadline:
                    raise socket.timeout()
                if not has_activity:
                    time.sleep(POLL_INTERVAL)
            exit_status = channel.recv_exit_status()
        except socket.timeout:
            channel.close()
            return SSHCommandResult(
                command=command,
                stdout=_decode(stdout_chunks).strip(),
                stderr=f"TIMEOUT: Command did not complete within {timeout} seconds.",
                exit_status=-1,
            )

        return SSHCommandResult(
            command=command,
            stdout=_decode(stdout_chunks).strip(),
            stderr=_decode(stderr_chunks).strip(),
            exit_status=exit_status,
        )


def _decode(chunks: List[bytes]) -> str:
    return b"".join(chunks).decode("utf-8", errors="replace")
