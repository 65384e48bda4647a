"""Builders for the remote command sequences of each pipeline step."""

from __future__ import annotations

import shlex
from typing import List

from .executor import RemoteCommand
from .paths import remote_project_dir

COMPOSE_FILES = ("docker-compose.yml", "docker-compose.yaml")

DOCKER_INSTALL = " && ".join(
    [
        "sudo apt-get install -y apt-transport-https ca-certificates curl software-properties-common",
        "curl -fsSL https://download.docker.com/linux/ubuntu/gpg"
        " | sudo gpg --batch --yes --dearmor -o /usr/share/keyrings/docker-archive-keyring.gpg",
        'echo "deb [arch=$(dpkg --print-architecture)'
        ' signed-by=/usr/share/keyrings/docker-archive-keyring.gpg]'
        ' https://download.docker.com/linux/ubuntu $(lsb_release -cs) stable"'
        " | sudo tee /etc/apt/sources.list.d/docker.list > /dev/null",
        "sudo apt-get update -qq",
        "sudo apt-get install -y docker-ce docker-ce-cli containerd.io",
    ]
)

COMPOSE_INSTALL = " && ".join(
    [
        'sudo curl -L "https://github.com/docker/compose/releases/latest/download/'
        'docker-compose-$(uname -s)-$(uname -m)" -o /usr/local/bin/docker-compose',
        "sudo chmod +x /usr/local/bin/docker-compose",
    ]
)


def _remote_dir(project_name: str) -> str:
    # Leave "~/" unquoted so the remote shell expands it
    return f"~/{shlex.quote(project_name)}"


def provision_commands() -> List[RemoteCommand]:
    return [
        RemoteCommand("Updating system packages", "sudo apt-get update -qq"),
        RemoteCommand(
            "Installing Docker",
            DOCKER_INSTALL,
            unless="command -v docker >/dev/null 2>&1",
        ),
        RemoteCommand(
            "Installing Docker Compose",
            COMPOSE_INSTALL,
            unless="command -v docker-compose >/dev/null 2>&1",
        ),
        RemoteCommand(
            "Installing Nginx",
            "sudo apt-get install -y nginx",
            unless="command -v nginx >/dev/null 2>&1",
        ),
        RemoteCommand(
            "Adding user to the docker group",
            'sudo usermod -aG docker "$USER"',
            allow_failure=True,
        ),
        RemoteCommand("Enabling Docker", "sudo systemctl enable docker"),
        RemoteCommand("Starting Docker", "sudo systemctl start docker"),
        RemoteCommand("Enabling Nginx", "sudo systemctl enable nginx"),
        RemoteCommand("Starting Nginx", "sudo systemctl start nginx"),
    ]


def container_filter(project_name: str) -> str:
    return shlex.quote(f"name={project_name}")


def stop_containers_commands(project_name: str) -> List[RemoteCommand]:
    """Stop and remove containers named like the project.

    Finding no containers is not an error.
    """
    name_filter = container_filter(project_name)
    return [
        RemoteCommand(
            "Stopping existing containers",
            f"docker ps -q --filter {name_filter} | xargs -r docker stop",
            allow_failure=True,
        ),
        RemoteCommand(
            "Removing existing containers",
            f"docker ps -aq --filter {name_filter} | xargs -r docker rm",
            allow_failure=True,
        ),
    ]


def compose_down_command(project_name: str) -> RemoteCommand:
    return RemoteCommand(
        "Stopping Compose services",
        f"cd {_remote_dir(project_name)} && docker-compose down",
        allow_failure=True,
    )


def build_and_run_commands(project_name: str, app_port: int, use_compose: bool) -> List[RemoteCommand]:
    directory = _remote_dir(project_name)
    if use_compose:
        return [
            RemoteCommand(
                "Building and starting with Docker Compose",
                f"cd {directory} && docker-compose up -d --build",
            )
        ]
    image = shlex.quote(f"{project_name}:latest")
    name = shlex.quote(project_name)
    return [
        RemoteCommand(
            "Building Docker image",
            f"cd {directory} && docker build -t {image} .",
        ),
        RemoteCommand(
            "Starting container",
            f"docker run -d --name {name} -p {app_port}:{app_port} {image}",
        ),
    ]


def running_containers_command(project_name: str) -> RemoteCommand:
    return RemoteCommand(
        "Listing running containers",
        f"docker ps --filter {container_filter(project_name)} --format '{{{{.Names}}}}'",
    )


def container_logs_command(project_name: str) -> RemoteCommand:
    return RemoteCommand(
        "Collecting container logs",
        f"docker ps -aq --filter {container_filter(project_name)} | head -1 | xargs -r docker logs",
        allow_failure=True,
    )


def validation_commands(project_name: str) -> List[RemoteCommand]:
    return [
        RemoteCommand("Checking Docker service", "sudo systemctl is-active --quiet docker"),
        RemoteCommand(
            "Checking application container",
            f"docker ps --filter {container_filter(project_name)} --format '{{{{.Names}}}}' | grep -q .",
        ),
        RemoteCommand("Checking Nginx service", "sudo systemctl is-active --quiet nginx"),
    ]


def local_endpoint_probe(app_port: int) -> RemoteCommand:
    return RemoteCommand(
        "Testing local endpoint",
        f"curl -sf http://localhost:{app_port} > /dev/null 2>&1"
        " || curl -sf http://localhost:80 > /dev/null 2>&1",
        allow_failure=True,
    )


def cleanup_commands(project_name: str) -> List[RemoteCommand]:
    """Remove containers and images named like the project.

    Everything here tolerates absence. The proxy site and the project
    directory are handled by the caller.
    """
    directory = _remote_dir(project_name)
    image_ref = shlex.quote(project_name)
    return [
        RemoteCommand(
            "Stopping Compose services",
            f"docker-compose -f {directory}/docker-compose.yml down",
            allow_failure=True,
        ),
        *stop_containers_commands(project_name),
        RemoteCommand(
            "Removing project images",
            f"docker images -q {image_ref} | xargs -r docker rmi",
            allow_failure=True,
        ),
    ]


def remove_project_dir_command(project_name: str) -> RemoteCommand:
    return RemoteCommand("Removing project directory", f"rm -rf {_remote_dir(project_name)}")


def rsync_args(
    source_dir: str,
    target: str,
    project_name: str,
    *,
    key_path: str,
    port: int = 22,
    connect_timeout: int = 10,
) -> List[str]:
    """rsync invocation mirroring ``source_dir`` into the remote project dir.

    Files removed locally are left in place on the remote side.
    """
    ssh_opts = " ".join(
        [
            "ssh",
            "-i",
            shlex.quote(key_path),
            "-p",
            str(port),
            "-o StrictHostKeyChecking=no",
            "-o UserKnownHostsFile=/dev/null",
            f"-o ConnectTimeout={connect_timeout}",
            "-o LogLevel=ERROR",
        ]
    )
    return [
        "rsync",
        "-avz",
        "-e",
        ssh_opts,
        source_dir.rstrip("/") + "/",
        f"{target}:{remote_project_dir(project_name)}/",
    ]
