"""Deployment request captured at the start of a run."""

from __future__ import annotations

from dataclasses import dataclass, field

from .validation import derive_project_name


@dataclass(frozen=True)
class DeploymentRequest:
    """Operator-provided values for one run. Immutable once collected."""

    repo_url: str
    token: str = field(repr=False)
    ssh_user: str
    server_ip: str
    key_path: str
    app_port: int
    branch: str = "main"

    @property
    def project_name(self) -> str:
        return derive_project_name(self.repo_url)

    @property
    def target(self) -> str:
        return f"{self.ssh_user}@{self.server_ip}"
