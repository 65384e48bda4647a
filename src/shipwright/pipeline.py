"""Strictly ordered step execution with categorized exit codes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Callable, Optional, Sequence

from .exceptions import DeployerError, StepFailed
from .executor import RemoteExecutor
from .models import DeploymentRequest
from .utils.logging import get_logger

logger = get_logger(__name__)


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_INPUT = 1
    CLONE_FAILED = 2
    SSH_FAILED = 3
    DEPLOY_FAILED = 4
    PROXY_FAILED = 5
    VALIDATION_FAILED = 6

    GENERIC_FAILURE = 1  # alias of INVALID_INPUT


@dataclass
class RunState:
    """Values produced by earlier steps and consumed by later ones."""

    request: Optional[DeploymentRequest] = None
    executor: Optional[RemoteExecutor] = None
    use_compose: Optional[bool] = None

    def require_request(self) -> DeploymentRequest:
        if self.request is None:
            raise StepFailed("No deployment request collected")
        return self.request

    def require_executor(self) -> RemoteExecutor:
        if self.executor is None:
            raise StepFailed("No SSH session established")
        return self.executor

    def close(self) -> None:
        if self.executor is not None:
            self.executor.close()
            self.executor = None


@dataclass(frozen=True)
class Step:
    name: str
    action: Callable[[RunState], None]
    exit_code: ExitCode


@dataclass
class PipelineResult:
    exit_code: ExitCode
    failed_step: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.exit_code == ExitCode.SUCCESS


class PipelineRunner:
    """Runs steps in order and stops at the first failing one.

    There is no retry and no resumption point: a step that raises a
    DeployerError ends the run with that step's exit code.
    """

    def __init__(self, steps: Sequence[Step], *, log_file: Optional[Path] = None) -> None:
        self.steps = list(steps)
        self.log_file = log_file

    def run(self, state: RunState) -> PipelineResult:
        for index, step in enumerate(self.steps, 1):
            logger.info("=== Step %d: %s ===", index, step.name)
            try:
                step.action(state)
            except DeployerError as exc:
                logger.error("%s", exc)
                if self.log_file is not None:
                    logger.info("Check log file: %s", self.log_file)
                return PipelineResult(exit_code=step.exit_code, failed_step=step.name)
        return PipelineResult(exit_code=ExitCode.SUCCESS)
