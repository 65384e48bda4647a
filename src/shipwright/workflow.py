"""High-level workflow orchestration."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Callable, List, Optional

import requests

from .commands import (
    COMPOSE_FILES,
    build_and_run_commands,
    cleanup_commands,
    compose_down_command,
    container_logs_command,
    local_endpoint_probe,
    provision_commands,
    remove_project_dir_command,
    rsync_args,
    running_containers_command,
    stop_containers_commands,
    validation_commands,
)
from .config import AppConfig
from .exceptions import LocalCommandError, StepFailed
from .executor import RemoteExecutor, record_transcript
from .gitops import GitRepositoryManager
from .interaction import CLIInteractionHandler, UserInteractionHandler, collect_request
from .local import LocalSession
from .models import DeploymentRequest
from .pipeline import ExitCode, PipelineResult, PipelineRunner, RunState, Step
from .proxy import NginxSite, render_site_config
from .ssh import RemoteProbe, SSHConnectionError, SSHCredentials, SSHSession
from .utils.logging import get_logger, log_success

logger = get_logger(__name__)

__all__ = ["DeploymentWorkflow"]


class DeploymentWorkflow:
    """Coordinates the deploy and cleanup pipelines."""

    def __init__(
        self,
        config: AppConfig,
        interaction_handler: Optional[UserInteractionHandler] = None,
        *,
        git_manager: Optional[GitRepositoryManager] = None,
        session_factory: Optional[Callable[[SSHCredentials], SSHSession]] = None,
        local_session: Optional[LocalSession] = None,
        remote_probe: Optional[RemoteProbe] = None,
        http_get: Optional[Callable[..., requests.Response]] = None,
        sleep: Callable[[float], None] = time.sleep,
        log_file: Optional[Path] = None,
    ) -> None:
        self.config = config
        self.workspace = Path(config.deployment.workspace_root)
        self.interaction_handler = interaction_handler or CLIInteractionHandler()
        self.git_manager = git_manager or GitRepositoryManager()
        self.session_factory = session_factory or SSHSession
        self.local_session = local_session or LocalSession()
        self.remote_probe = remote_probe or RemoteProbe()
        self.http_get = http_get or requests.get
        self.sleep = sleep
        self.log_file = log_file
        self._state = RunState()

    # ------------------------------------------------------------------
    # Pipelines
    # ------------------------------------------------------------------

    def deploy_steps(self) -> List[Step]:
        return [
            Step("Collecting User Input", self.collect_input, ExitCode.INVALID_INPUT),
            Step("Cloning Repository", self.clone_repository, ExitCode.CLONE_FAILED),
            Step("Verifying Project Structure", self.verify_project_structure, ExitCode.VALIDATION_FAILED),
            Step("Testing SSH Connection", self.test_ssh_connection, ExitCode.SSH_FAILED),
            Step("Preparing Remote Environment", self.prepare_remote_environment, ExitCode.DEPLOY_FAILED),
            Step("Deploying Dockerized Application", self.deploy_application, ExitCode.DEPLOY_FAILED),
            Step("Configuring Nginx Reverse Proxy", self.configure_reverse_proxy, ExitCode.PROXY_FAILED),
            Step("Validating Deployment", self.validate_deployment, ExitCode.VALIDATION_FAILED),
        ]

    def cleanup_steps(self) -> List[Step]:
        return [
            Step("Collecting User Input", self.collect_input, ExitCode.INVALID_INPUT),
            Step("Testing SSH Connection", self.test_ssh_connection, ExitCode.SSH_FAILED),
            Step("Removing Deployed Resources", self.cleanup_deployment, ExitCode.GENERIC_FAILURE),
        ]

    def run_deploy(self) -> PipelineResult:
        result = self._run(self.deploy_steps())
        if result.ok:
            self._log_deploy_summary()
        return result

    def run_cleanup(self) -> PipelineResult:
        logger.info("=== Cleanup Mode: Removing Deployed Resources ===")
        result = self._run(self.cleanup_steps())
        if result.ok:
            log_success(logger, "Cleanup completed successfully!")
        return result

    def _run(self, steps: List[Step]) -> PipelineResult:
        self._state = RunState()
        runner = PipelineRunner(steps, log_file=self.log_file)
        try:
            return runner.run(self._state)
        finally:
            self._state.close()

    def _log_deploy_summary(self) -> None:
        request = self._state.require_request()
        log_success(logger, "==========================================")
        log_success(logger, "  Deployment Completed Successfully!")
        log_success(logger, "==========================================")
        logger.info("Application URL: http://%s", request.server_ip)
        logger.info("Container Port: %d", request.app_port)
        if self.log_file is not None:
            logger.info("Log file: %s", self.log_file)
        logger.info("To cleanup all resources, run: shipwright --cleanup")

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def collect_input(self, state: RunState) -> None:
        state.request = collect_request(
            self.interaction_handler,
            default_branch=self.config.deployment.default_branch,
        )

    def project_dir(self, request: DeploymentRequest) -> Path:
        return self.workspace / request.project_name

    def clone_repository(self, state: RunState) -> None:
        request = state.require_request()
        target = self.project_dir(request)
        if (target / ".git").exists():
            logger.warning("Directory %s already exists. Pulling latest changes...", target)
        else:
            logger.info("Cloning repository...")
        result = self.git_manager.clone_or_update(
            request.repo_url,
            target,
            branch=request.branch,
            token=request.token,
        )
        log_success(logger, "Repository cloned/updated successfully (%s)", result.commit_sha[:12])

    def verify_project_structure(self, state: RunState) -> None:
        request = state.require_request()
        source = self.project_dir(request)
        has_dockerfile = (source / "Dockerfile").is_file()
        compose_file = next((name for name in COMPOSE_FILES if (source / name).is_file()), None)

        if has_dockerfile:
            log_success(logger, "Dockerfile found")
        if compose_file:
            log_success(logger, "%s found", compose_file)
        if not has_dockerfile and not compose_file:
            raise StepFailed("Neither Dockerfile nor docker-compose.yml found in project")
        state.use_compose = compose_file is not None

    def test_ssh_connection(self, state: RunState) -> None:
        request = state.require_request()
        credentials = SSHCredentials(
            host=request.server_ip,
            username=request.ssh_user,
            key_path=request.key_path,
            port=self.config.deployment.ssh_port,
            connect_timeout=self.config.deployment.connect_timeout,
        )
        try:
            credentials.validate()
        except ValueError as exc:
            raise StepFailed(f"Invalid SSH credentials: {exc}") from exc

        logger.info("Testing SSH connectivity to %s...", credentials.target)
        session = self.session_factory(credentials)
        session.connect()
        try:
            result = self.remote_probe.check_reachable(session)
        except SSHConnectionError:
            session.close()
            raise
        record_transcript(result.command, result.exit_status, result.stdout, result.stderr)
        if not result.ok:
            session.close()
            raise StepFailed(f"Failed to establish SSH connection to {credentials.target}")

        state.executor = RemoteExecutor(session, timeout=self.config.deployment.command_timeout)
        log_success(logger, "SSH connection established")

    def prepare_remote_environment(self, state: RunState) -> None:
        executor = state.require_executor()
        executor.run_all(provision_commands())

        versions = self.remote_probe.collect_versions(executor.session)
        logger.info("Docker version: %s", versions.docker)
        logger.info("Docker Compose version: %s", versions.docker_compose)
        logger.info("Nginx version: %s", versions.nginx)
        log_success(logger, "Remote environment prepared successfully")

    def deploy_application(self, state: RunState) -> None:
        request = state.require_request()
        executor = state.require_executor()
        if state.use_compose is None:
            state.use_compose = any((self.project_dir(request) / name).is_file() for name in COMPOSE_FILES)

        self._transfer_project(request)

        logger.info("Building and running Docker containers...")
        project = request.project_name
        if state.use_compose:
            executor.run(compose_down_command(project))
        executor.run_all(stop_containers_commands(project))
        executor.run_all(build_and_run_commands(project, request.app_port, state.use_compose))

        logger.info("Waiting for container to be ready...")
        self.sleep(self.config.deployment.container_grace_period)

        running = executor.run(running_containers_command(project))
        names = running.result.stdout.split() if running.result else []
        if not any(project in name for name in names):
            executor.run(container_logs_command(project))
            raise StepFailed("Container failed to start")
        log_success(logger, "Container is running: %s", ", ".join(names))
        log_success(logger, "Application deployed successfully")

    def _transfer_project(self, request: DeploymentRequest) -> None:
        logger.info("Transferring project files to remote server...")
        args = rsync_args(
            str(self.project_dir(request)),
            request.target,
            request.project_name,
            key_path=request.key_path,
            port=self.config.deployment.ssh_port,
            connect_timeout=self.config.deployment.connect_timeout,
        )
        result = self.local_session.run(args, timeout=self.config.deployment.command_timeout)
        record_transcript(result.command, result.exit_status, result.stdout, result.stderr)
        if not result.ok:
            raise LocalCommandError(args, result.exit_status, result.stderr)
        log_success(logger, "Files transferred successfully")

    def nginx_site(self, request: DeploymentRequest) -> NginxSite:
        return NginxSite(
            project_name=request.project_name,
            sites_available=self.config.proxy.sites_available,
            sites_enabled=self.config.proxy.sites_enabled,
        )

    def configure_reverse_proxy(self, state: RunState) -> None:
        request = state.require_request()
        executor = state.require_executor()
        site = self.nginx_site(request)
        config_text = render_site_config(request.server_ip, request.app_port)
        executor.run_all(site.install_commands(config_text))
        log_success(logger, "Nginx reverse proxy configured")

    def validate_deployment(self, state: RunState) -> None:
        request = state.require_request()
        executor = state.require_executor()
        for outcome in executor.run_all(validation_commands(request.project_name)):
            log_success(logger, "%s: OK", outcome.command.description)

        self.sleep(self.config.deployment.local_probe_delay)
        probe = executor.run(local_endpoint_probe(request.app_port))
        if probe.ok:
            log_success(logger, "Application is responding")
        else:
            logger.warning("Application may not be responding on expected ports")

        logger.info("Testing remote endpoint from local machine...")
        self.sleep(self.config.deployment.remote_probe_delay)
        if self._probe_public_endpoint(request.server_ip):
            log_success(logger, "Remote endpoint is accessible")
        else:
            logger.warning("Remote endpoint test failed - check firewall rules")
        log_success(logger, "Deployment validation completed")

    def _probe_public_endpoint(self, server_ip: str) -> bool:
        url = f"http://{server_ip}"
        try:
            response = self.http_get(url, timeout=self.config.deployment.http_probe_timeout)
        except requests.RequestException as exc:
            logger.debug("HTTP probe of %s failed: %s", url, exc)
            return False
        return response.status_code < 400

    def cleanup_deployment(self, state: RunState) -> None:
        request = state.require_request()
        executor = state.require_executor()
        project = request.project_name
        logger.info("Stopping and removing containers and images for %s...", project)
        executor.run_all(cleanup_commands(project))
        executor.run_all(self.nginx_site(request).removal_commands())
        executor.run(remove_project_dir_command(project))
        log_success(logger, "All resources cleaned up successfully")
