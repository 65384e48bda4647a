import unittest

from shipwright.exceptions import RemoteCommandError
from shipwright.executor import RemoteCommand, RemoteExecutor
from shipwright.ssh import SSHCommandResult


class ScriptedSession:
    """Answers commands by substring; anything unmatched succeeds."""

    def __init__(self, responses=None) -> None:
        self.responses = responses or {}
        self.commands: list[str] = []
        self.stdin: list[str] = []
        self.closed = False

    def run(self, command: str, *, stdin_data=None, timeout=None) -> SSHCommandResult:
        self.commands.append(command)
        if stdin_data is not None:
            self.stdin.append(stdin_data)
        for needle, (status, stdout) in self.responses.items():
            if needle in command:
                return SSHCommandResult(command, stdout, "boom" if status else "", status)
        return SSHCommandResult(command, "", "", 0)

    def close(self) -> None:
        self.closed = True


class RemoteExecutorTests(unittest.TestCase):
    def test_runs_commands_in_order(self) -> None:
        session = ScriptedSession()
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        outcomes = executor.run_all(
            [RemoteCommand("first", "echo 1"), RemoteCommand("second", "echo 2")]
        )
        self.assertEqual(session.commands, ["echo 1", "echo 2"])
        self.assertTrue(all(outcome.ok for outcome in outcomes))

    def test_stops_at_first_failure(self) -> None:
        session = ScriptedSession({"nginx -t": (1, "")})
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        with self.assertRaises(RemoteCommandError) as ctx:
            executor.run_all(
                [
                    RemoteCommand("write", "sudo tee /etc/nginx/sites-available/webapp"),
                    RemoteCommand("test", "sudo nginx -t"),
                    RemoteCommand("reload", "sudo systemctl reload nginx"),
                ]
            )
        self.assertEqual(ctx.exception.exit_status, 1)
        self.assertEqual(ctx.exception.description, "test")
        self.assertIn("boom", str(ctx.exception))
        self.assertNotIn("sudo systemctl reload nginx", session.commands)

    def test_tolerated_failure_continues(self) -> None:
        session = ScriptedSession({"docker stop": (1, "")})
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        outcomes = executor.run_all(
            [
                RemoteCommand("stop", "docker ps -q | xargs -r docker stop", allow_failure=True),
                RemoteCommand("next", "echo next"),
            ]
        )
        self.assertFalse(outcomes[0].ok)
        self.assertTrue(outcomes[1].ok)

    def test_unless_guard_skips_when_present(self) -> None:
        session = ScriptedSession()
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        outcome = executor.run(
            RemoteCommand("Installing Nginx", "sudo apt-get install -y nginx", unless="command -v nginx")
        )
        self.assertTrue(outcome.skipped)
        self.assertEqual(session.commands, ["command -v nginx"])

    def test_unless_guard_runs_when_missing(self) -> None:
        session = ScriptedSession({"command -v nginx": (1, "")})
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        outcome = executor.run(
            RemoteCommand("Installing Nginx", "sudo apt-get install -y nginx", unless="command -v nginx")
        )
        self.assertFalse(outcome.skipped)
        self.assertEqual(session.commands, ["command -v nginx", "sudo apt-get install -y nginx"])

    def test_stdin_data_is_forwarded(self) -> None:
        session = ScriptedSession()
        executor = RemoteExecutor(session)  # type: ignore[arg-type]
        executor.run(RemoteCommand("write", "sudo tee /tmp/x", stdin_data="payload"))
        self.assertEqual(session.stdin, ["payload"])

    def test_close_closes_session(self) -> None:
        session = ScriptedSession()
        RemoteExecutor(session).close()  # type: ignore[arg-type]
        self.assertTrue(session.closed)


if __name__ == "__main__":
    unittest.main()
