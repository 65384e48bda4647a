"""Configuration loading utilities for shipwright."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .paths import DEFAULT_CONFIG_PATH, LOGS_DIR, WORKSPACE_DIR

# Load .env file if it exists
load_dotenv()


@dataclass
class DeploymentConfig:
    """Settings related to deployment execution."""

    workspace_root: str = str(WORKSPACE_DIR)  # where local clones live
    default_branch: str = "main"
    ssh_port: int = 22
    connect_timeout: int = 10
    command_timeout: int = 900
    container_grace_period: int = 10   # seconds before checking the container
    local_probe_delay: int = 5         # settle time before the on-host curl
    remote_probe_delay: int = 3        # settle time before probing from here
    http_probe_timeout: int = 10


@dataclass
class ProxyConfig:
    """Where the reverse proxy keeps its site definitions."""

    sites_available: str = "/etc/nginx/sites-available"
    sites_enabled: str = "/etc/nginx/sites-enabled"


@dataclass
class LoggingConfig:
    log_dir: str = str(LOGS_DIR)
    log_prefix: str = "deploy"


@dataclass
class AppConfig:
    """Top-level configuration."""

    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AppConfig":
        deployment_payload = payload.get("deployment", {}) or {}
        proxy_payload = payload.get("proxy", {}) or {}
        logging_payload = payload.get("logging", {}) or {}

        # Comment keys ("_note": ...) are allowed in the JSON file
        deployment_payload = {k: v for k, v in deployment_payload.items() if not k.startswith("_")}
        proxy_payload = {k: v for k, v in proxy_payload.items() if not k.startswith("_")}
        logging_payload = {k: v for k, v in logging_payload.items() if not k.startswith("_")}

        return cls(
            deployment=DeploymentConfig(
                **{**DeploymentConfig().__dict__, **deployment_payload}
            ),
            proxy=ProxyConfig(**{**ProxyConfig().__dict__, **proxy_payload}),
            logging=LoggingConfig(**{**LoggingConfig().__dict__, **logging_payload}),
        )


def _apply_env_overrides(config: AppConfig) -> AppConfig:
    env_workspace = os.getenv("SHIPWRIGHT_WORKSPACE")
    if env_workspace:
        config.deployment.workspace_root = env_workspace

    env_log_dir = os.getenv("SHIPWRIGHT_LOG_DIR")
    if env_log_dir:
        config.logging.log_dir = env_log_dir

    env_port = os.getenv("SHIPWRIGHT_SSH_PORT")
    if env_port:
        config.deployment.ssh_port = int(env_port)

    env_timeout = os.getenv("SHIPWRIGHT_CONNECT_TIMEOUT")
    if env_timeout:
        config.deployment.connect_timeout = int(env_timeout)

    env_branch = os.getenv("SHIPWRIGHT_DEFAULT_BRANCH")
    if env_branch:
        config.deployment.default_branch = env_branch

    return config


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load configuration from `path` or the default location.

    An explicit `path` must exist. When no path is given and the default file
    is absent, built-in defaults are used.

    Environment variables (higher priority than config file):
    - SHIPWRIGHT_WORKSPACE: directory holding local clones
    - SHIPWRIGHT_LOG_DIR: directory for run log files
    - SHIPWRIGHT_SSH_PORT: SSH port of the target host
    - SHIPWRIGHT_CONNECT_TIMEOUT: SSH connect timeout in seconds
    - SHIPWRIGHT_DEFAULT_BRANCH: branch offered at the branch prompt
    """
    if path:
        candidate = Path(path)
        if not candidate.is_file():
            raise FileNotFoundError(f"Could not find configuration file: {candidate}")
    else:
        candidate = DEFAULT_CONFIG_PATH

    if candidate.is_file():
        with candidate.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        config = AppConfig.from_dict(data)
    else:
        config = AppConfig()

    return _apply_env_overrides(config)
