"""Default path constants for shipwright.

Paths are relative to the current working directory:
- ./<project>/                      # local clone of the repository
- ./deploy_YYYYmmdd_HHMMSS.log      # one log file per run
- ./config/default_config.json      # optional configuration file
"""

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config/default_config.json")

WORKSPACE_DIR = Path(".")   # local clones
LOGS_DIR = Path(".")        # run logs

# Remote side: the project is synced into the SSH user's home directory
REMOTE_BASE_DIR = "~"


def remote_project_dir(project_name: str) -> str:
    return f"{REMOTE_BASE_DIR}/{project_name}"
