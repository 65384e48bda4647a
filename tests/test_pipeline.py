import logging

from shipwright.exceptions import InvalidInputError, RemoteCommandError
from shipwright.pipeline import ExitCode, PipelineRunner, RunState, Step


def _recording(calls, name, error=None):
    def action(state):
        calls.append(name)
        if error is not None:
            raise error

    return action


class TestPipelineRunner:
    def test_runs_all_steps_in_order(self):
        calls = []
        steps = [Step(name, _recording(calls, name), ExitCode.GENERIC_FAILURE) for name in ("a", "b", "c")]

        result = PipelineRunner(steps).run(RunState())

        assert result.ok
        assert result.failed_step is None
        assert calls == ["a", "b", "c"]

    def test_stops_at_first_failure_with_step_code(self):
        calls = []
        steps = [
            Step("ssh", _recording(calls, "ssh"), ExitCode.SSH_FAILED),
            Step("proxy", _recording(calls, "proxy", RemoteCommandError("nginx", "nginx -t", 1)), ExitCode.PROXY_FAILED),
            Step("validate", _recording(calls, "validate"), ExitCode.VALIDATION_FAILED),
        ]

        result = PipelineRunner(steps).run(RunState())

        assert result.exit_code == ExitCode.PROXY_FAILED
        assert result.failed_step == "proxy"
        assert calls == ["ssh", "proxy"]

    def test_failure_points_at_log_file(self, tmp_path, caplog):
        log_file = tmp_path / "deploy_20260101_000000.log"
        steps = [Step("input", _recording([], "input", InvalidInputError("PAT cannot be empty")), ExitCode.INVALID_INPUT)]

        with caplog.at_level(logging.INFO, logger="shipwright"):
            result = PipelineRunner(steps, log_file=log_file).run(RunState())

        assert result.exit_code == 1
        assert "PAT cannot be empty" in caplog.text
        assert f"Check log file: {log_file}" in caplog.text
        assert "=== Step 1: input ===" in caplog.text

    def test_unexpected_errors_propagate(self):
        steps = [Step("boom", _recording([], "boom", ValueError("bug")), ExitCode.GENERIC_FAILURE)]
        try:
            PipelineRunner(steps).run(RunState())
        except ValueError as exc:
            assert str(exc) == "bug"
        else:
            raise AssertionError("ValueError was swallowed")


class TestRunState:
    def test_missing_request_fails_the_step(self):
        steps = [Step("clone", lambda state: state.require_request(), ExitCode.CLONE_FAILED)]
        assert PipelineRunner(steps).run(RunState()).exit_code == ExitCode.CLONE_FAILED

    def test_close_without_executor_is_noop(self):
        state = RunState()
        state.close()
        assert state.executor is None


def test_exit_code_values():
    assert [int(code) for code in (
        ExitCode.SUCCESS,
        ExitCode.INVALID_INPUT,
        ExitCode.CLONE_FAILED,
        ExitCode.SSH_FAILED,
        ExitCode.DEPLOY_FAILED,
        ExitCode.PROXY_FAILED,
        ExitCode.VALIDATION_FAILED,
    )] == list(range(7))
    assert ExitCode.GENERIC_FAILURE == 1
