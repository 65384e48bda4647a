"""Git-based repository management."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..exceptions import DeployerError

REDACTED = "****"


class GitCommandError(DeployerError):
    """Raised when a git command fails."""

    def __init__(self, command: list[str], exit_code: int, stderr: str) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr
        super().__init__(f"Git command {' '.join(command)} failed with code {exit_code}: {stderr}")


@dataclass
class GitCloneResult:
    """Details about a completed clone/update."""

    commit_sha: str
    updated: bool = False  # True when an existing checkout was pulled


def authenticated_url(repo_url: str, token: str) -> str:
    """Inject an access token into an HTTPS clone URL.

    GitLab expects ``oauth2:<token>``; every other host gets the GitHub form.
    """
    if repo_url.startswith("https://gitlab.com/"):
        return repo_url.replace("https://", f"https://oauth2:{token}@", 1)
    if repo_url.startswith("https://"):
        return repo_url.replace("https://", f"https://{token}@", 1)
    return repo_url


class GitRepositoryManager:
    """Wraps `git` CLI commands for cloning and updating repositories."""

    def __init__(self, git_binary: str = "git") -> None:
        self.git_binary = git_binary

    def clone_or_update(
        self,
        repo_url: str,
        target_dir: Path,
        *,
        branch: str = "main",
        token: Optional[str] = None,
    ) -> GitCloneResult:
        target_dir = target_dir.resolve()
        if (target_dir / ".git").exists():
            self._run(["fetch", "origin"], cwd=target_dir, secret=token)
            self._run(["checkout", branch], cwd=target_dir, secret=token)
            self._run(["pull", "origin", branch], cwd=target_dir, secret=token)
            updated = True
        else:
            if target_dir.exists():
                shutil.rmtree(target_dir, ignore_errors=True)
            target_dir.parent.mkdir(parents=True, exist_ok=True)
            clone_url = authenticated_url(repo_url, token) if token else repo_url
            self._run(["clone", "-b", branch, clone_url, str(target_dir)], secret=token)
            updated = False

        commit_sha = self._run(["rev-parse", "HEAD"], cwd=target_dir).strip()
        return GitCloneResult(commit_sha=commit_sha, updated=updated)

    def _run(
        self,
        args: list[str],
        cwd: Optional[Path] = None,
        secret: Optional[str] = None,
    ) -> str:
        command = [self.git_binary] + args
        shown = [_redact(part, secret) for part in command]
        try:
            process = subprocess.run(
                command,
                cwd=str(cwd) if cwd else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitCommandError(shown, 127, _redact(str(exc), secret)) from exc
        if process.returncode != 0:
            raise GitCommandError(shown, process.returncode, _redact(process.stderr.strip(), secret))
        return process.stdout


def _redact(text: str, secret: Optional[str]) -> str:
    if not secret:
        return text
    return text.replace(secret, REDACTED)
