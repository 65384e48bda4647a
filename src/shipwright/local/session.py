"""Local command execution session."""

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass
class LocalCommandResult:
    """Result of executing a local command."""
    command: str
    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class LocalSession:
    """
    Local command execution session.

    Runs argument lists without a shell so that paths and options with spaces
    reach the program unchanged.
    """

    def __init__(self, working_dir: Optional[str] = None) -> None:
        """
        Initialize local session.

        Args:
            working_dir: Working directory for commands. Defaults to the current directory.
        """
        self.working_dir = working_dir or os.getcwd()

    def run(self, args: Sequence[str], *, timeout: Optional[int] = None) -> LocalCommandResult:
        command = " ".join(args)
        try:
            result = subprocess.run(
                list(args),
                capture_output=True,
                text=True,
                timeout=timeout,
                cwd=self.working_dir,
                check=False,
            )
        except FileNotFoundError as exc:
            return LocalCommandResult(command=command, stdout="", stderr=str(exc), exit_status=127)
        except subprocess.TimeoutExpired:
            return LocalCommandResult(
                command=command,
                stdout="",
                stderr=f"TIMEOUT: Command did not complete within {timeout} seconds.",
                exit_status=-1,
            )

        return LocalCommandResult(
            command=command,
            stdout=result.stdout.strip(),
            stderr=result.stderr.strip(),
            exit_status=result.returncode,
        )
