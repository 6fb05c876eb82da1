"""
validation
----------

deploy 전에 함수 설정이 배포 가능한지 판단한다.
거절 사유는 로그로만 남기고 예외는 던지지 않는다.
"""

from __future__ import annotations

from .logging_utils import get_logger
from .models import (
    TRIGGER_BUCKET,
    TRIGGER_EVENT,
    TRIGGER_HTTP,
    TRIGGER_TOPIC,
    Function,
)


logger = get_logger(__name__)


VALID_RUNTIMES = frozenset(
    [
        "nodejs6",
        "nodejs8",
        "nodejs10",
        "nodejs12",
        "python37",
        "python38",
        "go111",
        "go113",
        "java11",
    ]
)

VALID_TRIGGERS = frozenset([TRIGGER_HTTP, TRIGGER_BUCKET, TRIGGER_TOPIC, TRIGGER_EVENT])


def is_valid_runtime(runtime: str) -> bool:
    return runtime in VALID_RUNTIMES


def is_valid_trigger(trigger: str) -> bool:
    return trigger in VALID_TRIGGERS


def is_deployable(f: Function) -> bool:
    if not is_valid_runtime(f.runtime):
        logger.warning("runtime 이 없거나 올바르지 않습니다 [%s]: %s", f.runtime, f.name)
        return False

    if f.trigger == TRIGGER_HTTP:
        return True

    no_trigger = not (f.trigger or f.trigger_event or f.trigger_resource)
    if no_trigger or not is_valid_trigger(f.trigger):
        logger.warning("trigger 가 없거나 올바르지 않습니다: %s", f.name)
        return False

    if not f.trigger_resource:
        logger.warning("trigger_resource 가 없거나 올바르지 않습니다: %s", f.name)
        return False

    if f.trigger == TRIGGER_EVENT and not f.trigger_event:
        logger.warning("trigger_event 가 없습니다: %s", f.name)
        return False

    return True
