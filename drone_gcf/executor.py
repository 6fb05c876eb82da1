"""
executor
--------

실행 계획을 gcloud 호출로 순서대로 실행한다.
첫 실패에서 멈추고, 재시도하지 않는다.
"""

from __future__ import annotations

import os
from typing import IO, Mapping, Optional

from .config import PluginConfig
from .credentials import TOKEN_FILE_LOCATION
from .logging_utils import get_logger
from .plan import Plan, create_execution_plan
from .subprocess_utils import RunResult, run_command


logger = get_logger(__name__)


GCLOUD = "gcloud"


class CommandRunner:
    """
    고정된 작업 디렉토리/환경변수/출력 sink 로 명령을 실행한다.
    """

    def __init__(
        self,
        working_dir: str = "",
        env: Optional[Mapping[str, str]] = None,
        stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None,
        dry_run: bool = False,
    ) -> None:
        self.working_dir = working_dir
        self.env = env
        self.stdout = stdout
        self.stderr = stderr
        self.dry_run = dry_run

    @classmethod
    def for_config(cls, cfg: PluginConfig) -> "CommandRunner":
        return cls(
            working_dir=cfg.working_dir,
            env=dict(os.environ),
            dry_run=cfg.dry_run,
        )

    def run(self, name: str, *args: str) -> RunResult:
        return run_command(
            [name, *args],
            cwd=self.working_dir,
            env=self.env,
            stdout=self.stdout,
            stderr=self.stderr,
            dry_run=self.dry_run,
        )


def execute_plan(runner: CommandRunner, plan: Plan) -> None:
    for i, args in enumerate(plan.steps, start=1):
        logger.info("단계 %d/%d 실행", i, len(plan.steps))
        runner.run(GCLOUD, *args)


def run_config(
    cfg: PluginConfig,
    runner: Optional[CommandRunner] = None,
    key_file: str = TOKEN_FILE_LOCATION,
) -> Plan:
    """
    계획을 만든 뒤, gcloud 버전 확인과 서비스 계정 인증을 먼저 수행하고 계획을 실행한다.

    key_file 은 호출 전에 이미 기록되어 있어야 한다. (credentials.staged_token_file)
    """
    plan = create_execution_plan(cfg)

    if runner is None:
        runner = CommandRunner.for_config(cfg)

    runner.run(GCLOUD, "version")
    runner.run(GCLOUD, "auth", "activate-service-account", "--key-file", key_file)

    execute_plan(runner, plan)
    return plan
