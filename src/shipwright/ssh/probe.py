"""Remote host probing utilities."""

from __future__ import annotations

from dataclasses import dataclass

from .session import SSHCommandResult, SSHSession

REACHABILITY_COMMAND = "echo 'SSH connection successful'"


@dataclass
class RemoteToolVersions:
    docker: str
    docker_compose: str
    nginx: str


class RemoteProbe:
    """Runs read-only commands to learn about the remote host."""

    def check_reachable(self, session: SSHSession) -> SSHCommandResult:
        return session.run(REACHABILITY_COMMAND)

    def collect_versions(self, session: SSHSession) -> RemoteToolVersions:
        return RemoteToolVersions(
            docker=self._safe_run(session, "docker --version") or "unknown",
            docker_compose=self._safe_run(session, "docker-compose --version") or "unknown",
            # nginx prints its version on stderr
            nginx=self._safe_run(session, "nginx -v 2>&1") or "unknown",
        )

    def _safe_run(self, session: SSHSession, command: str) -> str:
        result = session.run(command)
        if not result.ok:
            return ""
        return result.stdout or result.stderr
