"""Command-line interface for shipwright."""

from __future__ import annotations

import argparse
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from types import FrameType
from typing import Optional

from .config import AppConfig, load_config
from .pipeline import ExitCode
from .utils.logging import configure_run_logging, get_logger
from .workflow import DeploymentWorkflow

logger = get_logger(__name__)


@dataclass
class CLIContext:
    """Context captured from CLI arguments."""

    config: AppConfig
    log_file: Path
    cleanup: bool


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shipwright",
        description=(
            "Clone a Git repository, provision a remote host with Docker and "
            "Nginx, and deploy the application over SSH."
        ),
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Remove the containers, images, proxy site and files of a previous deployment.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON config file overriding defaults.",
    )
    return parser


def _build_context(args: argparse.Namespace) -> CLIContext:
    config = load_config(args.config)
    log_file = configure_run_logging(
        Path(config.logging.log_dir),
        prefix=config.logging.log_prefix,
    )
    return CLIContext(config=config, log_file=log_file, cleanup=args.cleanup)


def install_signal_handlers(log_file: Path) -> None:
    """Abort the run on SIGINT/SIGTERM. Remote resources are left as they are."""

    def _abort(signum: int, frame: Optional[FrameType]) -> None:
        if frame is not None:
            logger.error(
                "Script interrupted or failed at line %d (%s)",
                frame.f_lineno,
                frame.f_code.co_filename,
            )
        else:
            logger.error("Script interrupted by signal %d", signum)
        logger.info("Check log file: %s", log_file)
        sys.exit(int(ExitCode.GENERIC_FAILURE))

    signal.signal(signal.SIGINT, _abort)
    signal.signal(signal.SIGTERM, _abort)


def dispatch_command(context: CLIContext, workflow: Optional[DeploymentWorkflow] = None) -> int:
    workflow = workflow or DeploymentWorkflow(config=context.config, log_file=context.log_file)

    logger.info("==========================================")
    logger.info("  Automated Deployment Started")
    logger.info("==========================================")
    logger.info("Log file: %s", context.log_file)

    if context.cleanup:
        result = workflow.run_cleanup()
    else:
        result = workflow.run_deploy()
    return int(result.exit_code)


def run_cli(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    context = _build_context(args)
    install_signal_handlers(context.log_file)
    try:
        return dispatch_command(context)
    except Exception as exc:
        logger.error("Unexpected failure: %s", exc)
        logger.info("Check log file: %s", context.log_file)
        return int(ExitCode.GENERIC_FAILURE)
