"""Local execution utilities."""

from .session import LocalCommandResult, LocalSession

__all__ = ["LocalCommandResult", "LocalSession"]
