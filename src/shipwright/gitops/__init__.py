"""Git operations helpers."""

from .manager import GitCloneResult, GitCommandError, GitRepositoryManager, authenticated_url

__all__ = ["GitCloneResult", "GitCommandError", "GitRepositoryManager", "authenticated_url"]
