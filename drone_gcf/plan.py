"""
plan
----

설정(PluginConfig)으로부터 gcloud 호출 인자 목록(실행 계획)을 만든다.
같은 설정이면 항상 같은 계획이 나온다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .config import ACTION_CALL, ACTION_DELETE, ACTION_DEPLOY, ACTION_LIST, PluginConfig
from .logging_utils import get_logger
from .models import TRIGGER_BUCKET, TRIGGER_EVENT, TRIGGER_HTTP, TRIGGER_TOPIC, Function
from .subprocess_utils import format_command
from .validation import is_deployable


logger = get_logger(__name__)


class PlanError(ValueError):
    """실행 계획을 만들 수 없는 설정."""


@dataclass(frozen=True)
class Plan:
    steps: Tuple[Tuple[str, ...], ...] = field(default_factory=tuple)


def _base_args(cfg: PluginConfig) -> List[str]:
    return [
        "--quiet",
        "functions",
        cfg.action,
        "--project",
        cfg.project,
        "--verbosity",
        cfg.verbosity,
    ]


def _env_vars_arg(f: Function, env_secrets: Tuple[str, ...]) -> str:
    pairs = list(env_secrets)
    for key, value in f.env_overlay().items():
        pairs.append(f"{key}={value}")

    # ^<구분자>^ 접두어로 gcloud 의 기본 구분자(,) 대신 함수의 구분자를 쓰게 한다.
    delimiter = f.environment_delimiter
    return f"^{delimiter}^" + delimiter.join(pairs)


def _call_args(cfg: PluginConfig, f: Function) -> List[str]:
    args = _base_args(cfg) + [f.name]
    if f.region:
        args += ["--region", f.region]
    if f.data:
        args += ["--data", f.data]
    return args


def _deploy_args(cfg: PluginConfig, f: Function) -> List[str]:
    if not is_deployable(f):
        raise PlanError(f"함수 설정이 올바르지 않습니다: {f.name}")

    args = _base_args(cfg) + [f.name, "--runtime", f.runtime]

    if f.trigger == TRIGGER_BUCKET:
        args += ["--trigger-bucket", f.trigger_resource]
    elif f.trigger == TRIGGER_HTTP:
        args += ["--trigger-http"]
    elif f.trigger == TRIGGER_TOPIC:
        args += ["--trigger-topic", f.trigger_resource]
    elif f.trigger == TRIGGER_EVENT:
        args += ["--trigger-event", f.trigger_event, "--trigger-resource=" + f.trigger_resource]

    if f.allow_unauthenticated:
        args.append("--allow-unauthenticated")

    for flag, value in (
        ("--source", f.source),
        ("--memory", f.memory),
        ("--entry-point", f.entry_point),
        ("--region", f.region),
        ("--retry", f.retry),
        ("--timeout", f.timeout),
        ("--service-account", f.service_account),
    ):
        if value:
            args += [flag, value]

    if cfg.env_secrets or f.environment:
        args += ["--set-env-vars", _env_vars_arg(f, cfg.env_secrets)]

    return args


def _delete_args(cfg: PluginConfig, f: Function) -> List[str]:
    args = _base_args(cfg) + [f.name]
    if f.region:
        args += ["--region", f.region]
    return args


_PER_FUNCTION_BUILDERS = {
    ACTION_CALL: _call_args,
    ACTION_DEPLOY: _deploy_args,
    ACTION_DELETE: _delete_args,
}


def create_execution_plan(cfg: PluginConfig) -> Plan:
    """
    action 별로 gcloud 인자 목록을 만든다.

    Raises:
        PlanError: 지원하지 않는 action, 함수가 없는 call/deploy/delete,
            deploy 재검증에 실패한 함수가 있을 때
    """
    if cfg.action == ACTION_LIST:
        return Plan(steps=(tuple(_base_args(cfg)),))

    builder = _PER_FUNCTION_BUILDERS.get(cfg.action)
    if builder is None:
        raise PlanError(f"action: {cfg.action} not implemented yet")

    if not cfg.functions:
        raise PlanError(f"{cfg.action} 할 함수가 없습니다.")

    steps = tuple(tuple(builder(cfg, f)) for f in cfg.functions)
    for step in steps:
        logger.debug("계획 단계: %s", format_command(step))
    return Plan(steps=steps)
