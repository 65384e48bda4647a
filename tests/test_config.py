import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from shipwright.config import AppConfig, load_config


class ConfigTests(unittest.TestCase):
    def test_defaults_without_config_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch(
            "shipwright.config.DEFAULT_CONFIG_PATH", Path(tmp) / "missing.json"
        ), mock.patch.dict(os.environ, {}, clear=True):
            config = load_config()
        self.assertIsInstance(config, AppConfig)
        self.assertEqual(config.deployment.default_branch, "main")
        self.assertEqual(config.deployment.connect_timeout, 10)
        self.assertEqual(config.deployment.container_grace_period, 10)
        self.assertEqual(config.proxy.sites_available, "/etc/nginx/sites-available")
        self.assertEqual(config.logging.log_prefix, "deploy")

    def test_loads_custom_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp, mock.patch.dict(os.environ, {}, clear=True):
            temp_file = Path(tmp) / "config.json"
            temp_file.write_text(
                """
{
  "deployment": {"_note": "comment", "default_branch": "develop", "ssh_port": 2222},
  "proxy": {"sites_available": "/opt/nginx/available"}
}
""".strip()
            )
            config = load_config(str(temp_file))
        self.assertEqual(config.deployment.default_branch, "develop")
        self.assertEqual(config.deployment.ssh_port, 2222)
        self.assertEqual(config.deployment.connect_timeout, 10)
        self.assertEqual(config.proxy.sites_available, "/opt/nginx/available")
        self.assertEqual(config.proxy.sites_enabled, "/etc/nginx/sites-enabled")

    def test_explicit_missing_path_raises(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_config("/nonexistent/shipwright.json")

    def test_env_vars_override_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            temp_file = Path(tmp) / "config.json"
            temp_file.write_text('{"deployment": {"ssh_port": 2222}}')
            env = {
                "SHIPWRIGHT_SSH_PORT": "2200",
                "SHIPWRIGHT_CONNECT_TIMEOUT": "5",
                "SHIPWRIGHT_WORKSPACE": "/srv/clones",
                "SHIPWRIGHT_LOG_DIR": "/var/log/shipwright",
                "SHIPWRIGHT_DEFAULT_BRANCH": "release",
            }
            with mock.patch.dict(os.environ, env, clear=True):
                config = load_config(str(temp_file))
        self.assertEqual(config.deployment.ssh_port, 2200)
        self.assertEqual(config.deployment.connect_timeout, 5)
        self.assertEqual(config.deployment.workspace_root, "/srv/clones")
        self.assertEqual(config.logging.log_dir, "/var/log/shipwright")
        self.assertEqual(config.deployment.default_branch, "release")


if __name__ == "__main__":
    unittest.main()
