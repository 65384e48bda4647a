"""Error taxonomy shared by every pipeline step."""

from __future__ import annotations


class DeployerError(RuntimeError):
    """Base class for failures that abort the current pipeline step."""

    pass


class InvalidInputError(DeployerError):
    """Raised when collected input cannot be accepted."""

    pass


class StepFailed(DeployerError):
    """Raised by a step action that detected a failure itself."""

    pass


class LocalCommandError(DeployerError):
    """Raised when a local command (rsync, ...) exits non-zero."""

    def __init__(self, command: list[str], exit_code: int, stderr: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Command {command[0]} failed with code {exit_code}: {stderr}")


class RemoteCommandError(DeployerError):
    """Raised when a remote command fails and failure is not tolerated."""

    def __init__(self, description: str, command: str, exit_status: int, stderr: str = "") -> None:
        self.description = description
        self.command = command
        self.exit_status = exit_status
        self.stderr = stderr
        message = f"{description} failed with code {exit_status}"
        if stderr:
            message += f": {stderr.splitlines()[-1]}"
        super().__init__(message)
