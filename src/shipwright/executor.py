"""Typed remote command execution.

Each remote action is a :class:`RemoteCommand` run on its own through the SSH
session, with its output and exit status captured. A sequence stops at the
first failure whose ``allow_failure`` flag is unset; commands that already ran
keep their effects on the remote host.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from .exceptions import RemoteCommandError
from .ssh import SSHCommandResult, SSHSession
from .utils.logging import TRANSCRIPT_LOGGER, get_logger

logger = get_logger(__name__)
transcript = get_logger(TRANSCRIPT_LOGGER)


@dataclass(frozen=True)
class RemoteCommand:
    """One remote invocation.

    ``unless`` is a probe command: when it succeeds, the command is skipped.
    """

    description: str
    command: str
    allow_failure: bool = False
    unless: Optional[str] = None
    stdin_data: Optional[str] = None


@dataclass
class RemoteCommandOutcome:
    command: RemoteCommand
    result: Optional[SSHCommandResult]
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.skipped or (self.result is not None and self.result.ok)


class RemoteExecutor:
    """Runs remote commands over one SSH session and records the transcript."""

    def __init__(self, session: SSHSession, *, timeout: Optional[int] = None) -> None:
        self.session = session
        self.timeout = timeout

    def run(self, command: RemoteCommand) -> RemoteCommandOutcome:
        if command.unless:
            probe = self.session.run(command.unless, timeout=self.timeout)
            if probe.ok:
                logger.info("%s: already present, skipping", command.description)
                return RemoteCommandOutcome(command=command, result=probe, skipped=True)

        logger.info("%s...", command.description)
        result = self.session.run(
            command.command,
            stdin_data=command.stdin_data,
            timeout=self.timeout,
        )
        record_transcript(result.command, result.exit_status, result.stdout, result.stderr)

        outcome = RemoteCommandOutcome(command=command, result=result)
        if not result.ok:
            if command.allow_failure:
                transcript.info("(exit status %d tolerated)", result.exit_status)
                return outcome
            raise RemoteCommandError(
                command.description,
                command.command,
                result.exit_status,
                result.stderr,
            )
        return outcome

    def run_all(self, commands: Iterable[RemoteCommand]) -> List[RemoteCommandOutcome]:
        return [self.run(command) for command in commands]

    def close(self) -> None:
        self.session.close()


def record_transcript(command: str, exit_status: int, stdout: str, stderr: str) -> None:
    transcript.info("$ %s", command)
    for line in stdout.splitlines():
        transcript.info("  %s", line)
    for line in stderr.splitlines():
        transcript.info("  ! %s", line)
    transcript.info("  -> exit status %d", exit_status)
