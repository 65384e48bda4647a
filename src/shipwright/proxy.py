"""Nginx reverse-proxy site rendering."""

from __future__ import annotations

import posixpath
import shlex
from dataclasses import dataclass
from textwrap import dedent
from typing import List

from .executor import RemoteCommand

DEFAULT_SITE = "default"


def render_site_config(server_name: str, app_port: int) -> str:
    """Render a port-80 server block that proxies ``/`` to the application.

    ``_`` is always appended to ``server_name`` so the site answers requests
    for any host name.
    """
    return dedent(f"""\
        server {{
            listen 80;
            server_name {server_name} _;

            location / {{
                proxy_pass http://localhost:{app_port};
                proxy_set_header Host $host;
                proxy_set_header X-Real-IP $remote_addr;
                proxy_set_header X-Forwarded-For $proxy_add_x_forwarded_for;
                proxy_set_header X-Forwarded-Proto $scheme;

                # WebSocket support
                proxy_http_version 1.1;
                proxy_set_header Upgrade $http_upgrade;
                proxy_set_header Connection "upgrade";
            }}
        }}
    """)


@dataclass(frozen=True)
class NginxSite:
    project_name: str
    sites_available: str = "/etc/nginx/sites-available"
    sites_enabled: str = "/etc/nginx/sites-enabled"

    @property
    def available_path(self) -> str:
        return posixpath.join(self.sites_available, self.project_name)

    @property
    def enabled_path(self) -> str:
        return posixpath.join(self.sites_enabled, self.project_name)

    @property
    def default_enabled_path(self) -> str:
        return posixpath.join(self.sites_enabled, DEFAULT_SITE)

    def install_commands(self, config_text: str) -> List[RemoteCommand]:
        available = shlex.quote(self.available_path)
        enabled = shlex.quote(self.enabled_path)
        return [
            RemoteCommand(
                "Writing Nginx site configuration",
                f"sudo tee {available} > /dev/null",
                stdin_data=config_text,
            ),
            RemoteCommand("Enabling site", f"sudo ln -sf {available} {enabled}"),
            RemoteCommand(
                "Removing default site",
                f"sudo rm -f {shlex.quote(self.default_enabled_path)}",
            ),
            RemoteCommand("Testing Nginx configuration", "sudo nginx -t"),
            RemoteCommand("Reloading Nginx", "sudo systemctl reload nginx"),
        ]

    def removal_commands(self) -> List[RemoteCommand]:
        return [
            RemoteCommand(
                "Removing Nginx configuration",
                f"sudo rm -f {shlex.quote(self.enabled_path)} {shlex.quote(self.available_path)}",
            ),
            RemoteCommand("Reloading Nginx", "sudo systemctl reload nginx"),
        ]
