import logging
from typing import List, Tuple

import pytest

from drone_gcf import executor
from drone_gcf.config import PluginConfig
from drone_gcf.executor import CommandRunner, execute_plan, run_config
from drone_gcf.models import Function
from drone_gcf.plan import Plan, PlanError
from drone_gcf.subprocess_utils import RunResult


class _FakeRunner:
    def __init__(self, fail_on: str = "") -> None:
        self.calls: List[Tuple[str, ...]] = []
        self._fail_on = fail_on

    def run(self, name: str, *args: str) -> RunResult:
        self.calls.append((name, *args))
        if self._fail_on and self._fail_on in args:
            raise RuntimeError(f"명령 실행 실패: {name} {' '.join(args)} (exit=1)")
        return RunResult(returncode=0)


def _cfg() -> PluginConfig:
    return PluginConfig(
        action="delete",
        project="p",
        token="{}",
        functions=(Function(name="First"), Function(name="Second")),
    )


def test_run_config_runs_preconditions_then_plan() -> None:
    runner = _FakeRunner()

    plan = run_config(_cfg(), runner, key_file="/tmp/key.json")  # type: ignore[arg-type]

    assert runner.calls[0] == ("gcloud", "version")
    assert runner.calls[1] == ("gcloud", "auth", "activate-service-account", "--key-file", "/tmp/key.json")
    assert runner.calls[2:] == [("gcloud", *step) for step in plan.steps]
    assert [c[-1] for c in runner.calls[2:]] == ["First", "Second"]


def test_failing_precondition_skips_plan() -> None:
    runner = _FakeRunner(fail_on="activate-service-account")

    with pytest.raises(RuntimeError):
        run_config(_cfg(), runner)  # type: ignore[arg-type]

    assert len(runner.calls) == 2


def test_failing_step_stops_remaining_steps() -> None:
    runner = _FakeRunner(fail_on="First")

    with pytest.raises(RuntimeError) as excinfo:
        run_config(_cfg(), runner)  # type: ignore[arg-type]

    assert "First" in str(excinfo.value)
    assert runner.calls[-1][-1] == "First"
    assert len(runner.calls) == 3


def test_plan_error_runs_nothing() -> None:
    runner = _FakeRunner()
    cfg = PluginConfig(action="deploy", project="p", token="{}", functions=(Function(name="Bad"),))

    with pytest.raises(PlanError):
        run_config(cfg, runner)  # type: ignore[arg-type]

    assert runner.calls == []


def test_execute_plan_in_order() -> None:
    runner = _FakeRunner()

    execute_plan(runner, Plan(steps=(("a",), ("b", "c"))))  # type: ignore[arg-type]

    assert runner.calls == [("gcloud", "a"), ("gcloud", "b", "c")]


def test_dry_run_spawns_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    def no_spawn(*args, **kwargs):  # noqa: ANN002, ANN003
        raise AssertionError("dry-run 에서 프로세스를 실행하면 안 됩니다")

    monkeypatch.setattr("drone_gcf.subprocess_utils.subprocess.Popen", no_spawn)

    runner = CommandRunner(dry_run=True)
    run_config(_cfg(), runner)


def test_runner_for_config_uses_config(monkeypatch: pytest.MonkeyPatch) -> None:
    seen = {}

    def fake_run_command(cmd, **kwargs):  # noqa: ANN001, ANN003
        seen["cmd"] = cmd
        seen.update(kwargs)
        return RunResult(returncode=0)

    monkeypatch.setattr(executor, "run_command", fake_run_command)
    monkeypatch.setenv("SOME_VAR", "1")

    cfg = PluginConfig(action="list", project="p", token="{}", working_dir="/drone/src", dry_run=True)
    CommandRunner.for_config(cfg).run("gcloud", "version")

    assert seen["cmd"] == ["gcloud", "version"]
    assert seen["cwd"] == "/drone/src"
    assert seen["dry_run"] is True
    assert seen["env"]["SOME_VAR"] == "1"


def test_env_secret_values_stay_out_of_logs(caplog: pytest.LogCaptureFixture, valid_key: str) -> None:
    cfg = PluginConfig.from_env(
        {
            "PLUGIN_ACTION": "deploy",
            "PLUGIN_TOKEN": valid_key,
            "PLUGIN_FUNCTIONS": '[{"F":[{"trigger":"http","environment":[{"API_TOKEN":"s3cr3t"}]}]}]',
            "PLUGIN_ENV_SECRET_DB_PASS": "hunter2",
        }
    )

    with caplog.at_level(logging.DEBUG):
        plan = run_config(cfg, CommandRunner(dry_run=True))

    assert "hunter2" in plan.steps[0][-1]
    assert "hunter2" not in caplog.text
    assert "s3cr3t" not in caplog.text
    assert "DB_PASS=***" in caplog.text
    assert "API_TOKEN=***" in caplog.text
