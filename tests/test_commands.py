import unittest

from shipwright.commands import (
    build_and_run_commands,
    cleanup_commands,
    provision_commands,
    remove_project_dir_command,
    rsync_args,
    stop_containers_commands,
    validation_commands,
)


class ProvisionCommandTests(unittest.TestCase):
    def test_installs_are_guarded(self) -> None:
        guarded = {c.description: c.unless for c in provision_commands() if c.unless}
        self.assertEqual(
            guarded,
            {
                "Installing Docker": "command -v docker >/dev/null 2>&1",
                "Installing Docker Compose": "command -v docker-compose >/dev/null 2>&1",
                "Installing Nginx": "command -v nginx >/dev/null 2>&1",
            },
        )

    def test_services_enabled_and_started(self) -> None:
        shell = [c.command for c in provision_commands()]
        for command in (
            "sudo systemctl enable docker",
            "sudo systemctl start docker",
            "sudo systemctl enable nginx",
            "sudo systemctl start nginx",
        ):
            self.assertIn(command, shell)


class DeployCommandTests(unittest.TestCase):
    def test_stop_is_tolerant_of_absence(self) -> None:
        commands = stop_containers_commands("webapp")
        self.assertTrue(all(c.allow_failure for c in commands))
        self.assertTrue(all("xargs -r" in c.command for c in commands))
        self.assertIn("--filter name=webapp", commands[0].command)

    def test_dockerfile_build_binds_port(self) -> None:
        shell = [c.command for c in build_and_run_commands("webapp", 3000, use_compose=False)]
        self.assertEqual(
            shell,
            [
                "cd ~/webapp && docker build -t webapp:latest .",
                "docker run -d --name webapp -p 3000:3000 webapp:latest",
            ],
        )

    def test_compose_build(self) -> None:
        shell = [c.command for c in build_and_run_commands("webapp", 3000, use_compose=True)]
        self.assertEqual(shell, ["cd ~/webapp && docker-compose up -d --build"])

    def test_validation_checks_are_mandatory(self) -> None:
        commands = validation_commands("webapp")
        self.assertEqual(len(commands), 3)
        self.assertFalse(any(c.allow_failure for c in commands))


class CleanupCommandTests(unittest.TestCase):
    def test_everything_tolerates_absence(self) -> None:
        commands = cleanup_commands("webapp")
        self.assertTrue(all(c.allow_failure for c in commands))
        self.assertIn("docker images -q webapp | xargs -r docker rmi", [c.command for c in commands])

    def test_remove_project_dir(self) -> None:
        self.assertEqual(remove_project_dir_command("webapp").command, "rm -rf ~/webapp")


class RsyncArgsTests(unittest.TestCase):
    def test_rsync_invocation(self) -> None:
        args = rsync_args(
            "/work/webapp",
            "deploy@203.0.113.10",
            "webapp",
            key_path="/home/me/.ssh/id_ed25519",
            connect_timeout=10,
        )
        self.assertEqual(args[:2], ["rsync", "-avz"])
        self.assertNotIn("--delete", args)
        self.assertEqual(args[-2:], ["/work/webapp/", "deploy@203.0.113.10:~/webapp/"])
        ssh_opts = args[args.index("-e") + 1]
        self.assertIn("-i /home/me/.ssh/id_ed25519", ssh_opts)
        self.assertIn("StrictHostKeyChecking=no", ssh_opts)
        self.assertIn("ConnectTimeout=10", ssh_opts)


if __name__ == "__main__":
    unittest.main()
