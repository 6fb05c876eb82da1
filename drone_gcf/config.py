from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence, Tuple

from dotenv import load_dotenv

from .credentials import extract_project_id
from .functions import parse_functions
from .logging_utils import get_logger
from .models import Function
from .validation import is_deployable


logger = get_logger(__name__)


ENV_SECRET_PREFIX = "PLUGIN_ENV_SECRET_"

DEFAULT_VERBOSITY = "warning"
DEFAULT_RUNTIME = "go111"

ACTION_CALL = "call"
ACTION_DEPLOY = "deploy"
ACTION_DELETE = "delete"
ACTION_LIST = "list"


def load_env_files(files: Sequence[str]) -> None:
    """
    주어진 .env 계열 파일을 순서대로 로드한다.
    후순위 파일이 같은 키를 덮어쓴다. 없는 파일은 건너뛴다.
    """
    for path in files:
        if os.path.exists(path):
            load_dotenv(path, override=True)
        else:
            logger.warning("env 파일이 없어 건너뜁니다: %s", path)


def _get_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y"}


def _workspace_dir(workspace: str, plugin_dir: str) -> str:
    """
    PLUGIN_DIR 를 DRONE_WORKSPACE 아래 경로로 붙인다. PLUGIN_DIR 이 / 로 시작해도 workspace 아래에 둔다.
    """
    parts = [p for p in (workspace, plugin_dir) if p]
    if not parts:
        return ""
    return os.path.normpath("/".join(parts))


def _env_secrets(environ: Mapping[str, str]) -> Tuple[str, ...]:
    secrets: List[str] = []
    for key, value in environ.items():
        if key.startswith(ENV_SECRET_PREFIX):
            secrets.append(f"{key[len(ENV_SECRET_PREFIX):]}={value}")
    return tuple(secrets)


@dataclass(frozen=True)
class PluginConfig:
    action: str
    project: str
    token: str = field(repr=False)
    dry_run: bool = False
    verbosity: str = DEFAULT_VERBOSITY
    working_dir: str = ""
    runtime: str = DEFAULT_RUNTIME
    env_secrets: Tuple[str, ...] = field(default_factory=tuple)
    functions: Tuple[Function, ...] = field(default_factory=tuple)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PluginConfig":
        """
        Drone 이 주입한 PLUGIN_* 환경변수로부터 설정을 만든다.

        설정이 올바르지 않으면 ValueError 를 던진다.
        deploy 의 경우 배포할 수 없는 함수는 사유를 로그로 남기고 제외한다.
        """
        env = os.environ if environ is None else environ

        action = env.get("PLUGIN_ACTION", "")
        if not action:
            raise ValueError("PLUGIN_ACTION 이 설정되지 않았습니다.")

        token = env.get("PLUGIN_TOKEN") or env.get("TOKEN") or ""
        if not token:
            raise ValueError("PLUGIN_TOKEN (또는 TOKEN) 이 설정되지 않았습니다.")

        runtime = env.get("PLUGIN_RUNTIME") or DEFAULT_RUNTIME
        raw_functions = env.get("PLUGIN_FUNCTIONS", "")

        functions: List[Function] = []
        if action in (ACTION_CALL, ACTION_DELETE):
            functions = parse_functions(raw_functions, runtime)
        elif action == ACTION_DEPLOY:
            functions = [f for f in parse_functions(raw_functions, runtime) if is_deployable(f)]

        if not functions and action != ACTION_LIST:
            raise ValueError("배포/호출할 함수를 찾지 못했습니다. (PLUGIN_FUNCTIONS)")

        project = env.get("PLUGIN_PROJECT") or extract_project_id(token)
        if not project:
            raise ValueError("PLUGIN_PROJECT 또는 키의 project_id 에서 프로젝트를 찾지 못했습니다.")

        logger.info("사용할 프로젝트: %s", project)

        return cls(
            action=action,
            project=project,
            token=token,
            dry_run=_get_bool(env, "PLUGIN_DRY_RUN", False),
            verbosity=env.get("PLUGIN_VERBOSITY") or DEFAULT_VERBOSITY,
            working_dir=_workspace_dir(env.get("DRONE_WORKSPACE", ""), env.get("PLUGIN_DIR", "")),
            runtime=runtime,
            env_secrets=_env_secrets(env),
            functions=tuple(functions),
        )
