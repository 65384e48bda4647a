"""Operator interaction: prompts and input collection."""

from .handler import (
    UserInteractionHandler,
    InteractionRequest,
    InteractionResponse,
    CLIInteractionHandler,
    AutoResponseHandler,
    InputType,
)
from .collector import collect_request

__all__ = [
    "UserInteractionHandler",
    "InteractionRequest",
    "InteractionResponse",
    "CLIInteractionHandler",
    "AutoResponseHandler",
    "InputType",
    "collect_request",
]
