"""Interactive collection of the deployment request."""

from __future__ import annotations

from typing import Callable

from ..exceptions import InvalidInputError
from ..models import DeploymentRequest
from ..utils.logging import get_logger, log_success
from ..validation import resolve_ssh_key, validate_ip, validate_port, validate_url
from .handler import InputType, InteractionRequest, UserInteractionHandler

logger = get_logger(__name__)


def _ask(handler: UserInteractionHandler, request: InteractionRequest) -> str:
    response = handler.ask(request)
    if response.cancelled:
        raise InvalidInputError(f"Input cancelled at prompt: {request.question}")
    return response.value.strip()


def _ask_until_valid(
    handler: UserInteractionHandler,
    question: str,
    is_valid: Callable[[str], bool],
    error_message: str,
) -> str:
    while True:
        value = _ask(handler, InteractionRequest(question=question))
        if is_valid(value):
            return value
        logger.error(error_message)


def collect_request(handler: UserInteractionHandler, *, default_branch: str = "main") -> DeploymentRequest:
    """Prompt for every input value in order and validate each one.

    The URL, server IP and port prompts repeat until the value is valid. An
    empty token or username, or an unusable key file, raises
    InvalidInputError straight away.
    """
    repo_url = _ask_until_valid(
        handler,
        "Enter Git Repository URL",
        validate_url,
        "Invalid URL format. Please enter a valid HTTP/HTTPS URL.",
    )

    token = _ask(
        handler,
        InteractionRequest("Enter Personal Access Token (PAT)", input_type=InputType.SECRET),
    )
    if not token:
        raise InvalidInputError("PAT cannot be empty")

    branch = _ask(handler, InteractionRequest("Enter branch name", default=default_branch))
    branch = branch or default_branch

    ssh_user = _ask(handler, InteractionRequest("Enter SSH username"))
    if not ssh_user:
        raise InvalidInputError("SSH username cannot be empty")

    server_ip = _ask_until_valid(
        handler,
        "Enter server IP address",
        validate_ip,
        "Invalid IP address format.",
    )

    key_path = resolve_ssh_key(_ask(handler, InteractionRequest("Enter SSH key path")))

    app_port = _ask_until_valid(
        handler,
        "Enter application port",
        validate_port,
        "Invalid port number (1-65535).",
    )

    request = DeploymentRequest(
        repo_url=repo_url,
        token=token,
        branch=branch,
        ssh_user=ssh_user,
        server_ip=server_ip,
        key_path=str(key_path),
        app_port=int(app_port),
    )
    log_success(logger, "Input collection completed")
    logger.info("Project: %s | Branch: %s | Port: %d", request.project_name, request.branch, request.app_port)
    return request
