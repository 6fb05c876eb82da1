"""
models
------

배포 대상 Cloud Function 한 개를 표현하는 데이터 모델.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping, Tuple, Union


# environment 값에 구분자가 포함되어도 gcloud 가 잘못 자르지 않도록
# 기본으로 쓰는 다중 문자 구분자
DEFAULT_ENV_VAR_DELIMITER = ":|:"

TRIGGER_HTTP = "http"
TRIGGER_BUCKET = "bucket"
TRIGGER_TOPIC = "topic"
TRIGGER_EVENT = "event"

# 구조화된 함수 목록(JSON)의 키 -> Function 필드 이름
STRING_FIELDS: Dict[str, str] = {
    "trigger": "trigger",
    "trigger_event": "trigger_event",
    "trigger_resource": "trigger_resource",
    "entrypoint": "entry_point",
    "memory": "memory",
    "region": "region",
    "retry": "retry",
    "runtime": "runtime",
    "source": "source",
    "timeout": "timeout",
    "serviceaccount": "service_account",
    "environment_delimiter": "environment_delimiter",
    "data": "data",
}
BOOL_FIELDS: Dict[str, str] = {
    "allow_unauthenticated": "allow_unauthenticated",
}
ENVIRONMENT_FIELD = "environment"

EnvPairs = Tuple[Tuple[str, str], ...]


def _as_pairs(env: Union[Mapping[str, str], EnvPairs]) -> EnvPairs:
    if isinstance(env, Mapping):
        return tuple(env.items())
    return tuple((k, v) for k, v in env)


@dataclass(frozen=True)
class Function:
    name: str
    trigger: str = ""
    trigger_event: str = ""
    trigger_resource: str = ""

    allow_unauthenticated: bool = False
    entry_point: str = ""
    memory: str = ""
    region: str = ""
    retry: str = ""
    runtime: str = ""
    source: str = ""
    timeout: str = ""
    service_account: str = ""

    environment_delimiter: str = ""
    # 매핑마다 (key, value) 쌍의 tuple 로 보관한다.
    environment: Tuple[EnvPairs, ...] = field(default_factory=tuple)

    # action=call 에서만 사용
    data: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "environment", tuple(_as_pairs(env) for env in self.environment))

    def env_overlay(self) -> Dict[str, str]:
        """
        함수에 지정된 environment 중 첫 번째 매핑만 사용한다.
        """
        if not self.environment:
            return {}
        return dict(self.environment[0])
