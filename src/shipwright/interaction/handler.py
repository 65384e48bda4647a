"""User interaction handlers for collecting deployment input."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Union

from rich.console import Console
from rich.prompt import Prompt

from ..utils.logging import get_logger

logger = get_logger(__name__)


class InputType(str, Enum):
    """Type of user input expected."""
    TEXT = "text"           # free text, echoed
    SECRET = "secret"       # tokens, passwords: never echoed


@dataclass
class InteractionRequest:
    """A single question put to the operator."""

    question: str
    input_type: InputType = InputType.TEXT
    default: Optional[str] = None


@dataclass
class InteractionResponse:
    """Operator's answer to an interaction request."""

    value: str
    cancelled: bool = False

    @classmethod
    def cancelled_response(cls) -> "InteractionResponse":
        return cls(value="", cancelled=True)


class UserInteractionHandler(ABC):
    """Abstract base class for handling user interactions."""

    @abstractmethod
    def ask(self, request: InteractionRequest) -> InteractionResponse:
        """
        Present a request to the user and get their response.

        Args:
            request: The interaction request to present

        Returns:
            The user's response; an empty answer falls back to ``request.default``
        """
        pass

    @abstractmethod
    def notify(self, message: str, level: str = "info") -> None:
        pass


class CLIInteractionHandler(UserInteractionHandler):
    """Terminal prompts rendered with rich."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def ask(self, request: InteractionRequest) -> InteractionResponse:
        try:
            value = Prompt.ask(
                request.question,
                console=self.console,
                password=request.input_type == InputType.SECRET,
                default=request.default or "",
                show_default=bool(request.default),
            )
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return InteractionResponse.cancelled_response()
        return InteractionResponse(value=value.strip())

    def notify(self, message: str, level: str = "info") -> None:
        styles = {
            "info": "blue",
            "success": "green",
            "warning": "yellow",
            "error": "red",
        }
        self.console.print(message, style=styles.get(level))


class AutoResponseHandler(UserInteractionHandler):
    """
    Scripted response handler for testing or non-interactive runs.

    ``responses`` maps a keyword of the question to the answer. A list of
    answers is consumed one per question, which makes it possible to feed
    invalid values followed by a valid one. Questions without a scripted
    answer, or whose answers ran out, are cancelled.
    """

    def __init__(self, responses: Optional[Dict[str, Union[str, List[str]]]] = None) -> None:
        self.responses: Dict[str, Union[str, List[str]]] = {
            key: list(value) if isinstance(value, list) else value
            for key, value in (responses or {}).items()
        }
        self.asked: List[str] = []

    def ask(self, request: InteractionRequest) -> InteractionResponse:
        self.asked.append(request.question)
        for keyword, response in self.responses.items():
            if keyword.lower() not in request.question.lower():
                continue
            if isinstance(response, list):
                if not response:
                    return InteractionResponse.cancelled_response()
                response = response.pop(0)
            return InteractionResponse(value=response or (request.default or ""))

        if request.default is not None:
            return InteractionResponse(value=request.default)
        return InteractionResponse.cancelled_response()

    def notify(self, message: str, level: str = "info") -> None:
        logger.info("[%s] %s", level, message)
