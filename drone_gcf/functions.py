"""
functions
---------

PLUGIN_FUNCTIONS 문자열을 Function 목록으로 변환한다.

두 가지 입력 형태를 지원한다.

- 구조화된 목록(JSON)::

    [{"TransferFile": [{"trigger": "http", "memory": "2048MB"}]}]

- 쉼표로 구분된 함수 이름::

    TransferFile, ProcessEvents, ThirdFunc

구조화된 형태로 해석할 수 없으면 예외를 던지지 않고 쉼표 구분 형태로 처리한다.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from typing import Any, List, Optional, Tuple

from .logging_utils import get_logger
from .models import (
    BOOL_FIELDS,
    DEFAULT_ENV_VAR_DELIMITER,
    ENVIRONMENT_FIELD,
    STRING_FIELDS,
    EnvPairs,
    Function,
)


logger = get_logger(__name__)


class MalformedListing(ValueError):
    """구조화된 함수 목록으로 해석할 수 없는 입력."""


class _Pairs(list):
    """
    JSON object 를 (key, value) 쌍의 리스트로 보존한다.
    같은 키가 여러 번 나와도 순서대로 모두 남는다.
    """


@dataclass(frozen=True)
class FunctionListing:
    functions: Tuple[Function, ...]
    structured: bool


def _decode(raw: str) -> Any:
    try:
        return json.loads(raw, object_pairs_hook=_Pairs)
    except ValueError as e:
        raise MalformedListing(f"JSON 으로 해석할 수 없습니다: {e}") from e


def _optional_str(key: str, value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise MalformedListing(f"{key} 는 문자열이어야 합니다: {value!r}")
    return value


def _environment(value: Any) -> Tuple[EnvPairs, ...]:
    if value is None:
        return ()
    if not isinstance(value, list) or isinstance(value, _Pairs):
        raise MalformedListing(f"environment 는 배열이어야 합니다: {value!r}")

    envs = []
    for item in value:
        if item is None:
            envs.append(())
            continue
        if not isinstance(item, _Pairs):
            raise MalformedListing(f"environment 항목은 object 여야 합니다: {item!r}")
        env = {}
        for k, v in item:
            env[k] = _optional_str(k, v)
        envs.append(tuple(env.items()))
    return tuple(envs)


def _build_function(name: str, attrs: Any) -> Function:
    if attrs is None:
        attrs = _Pairs()
    if not isinstance(attrs, _Pairs):
        raise MalformedListing(f"함수 {name} 의 속성은 object 여야 합니다: {attrs!r}")

    kwargs: dict = {}
    for key, value in attrs:
        if key in STRING_FIELDS:
            kwargs[STRING_FIELDS[key]] = _optional_str(key, value)
        elif key in BOOL_FIELDS:
            if value is None:
                continue
            if not isinstance(value, bool):
                raise MalformedListing(f"{key} 는 true/false 여야 합니다: {value!r}")
            kwargs[BOOL_FIELDS[key]] = value
        elif key == ENVIRONMENT_FIELD:
            kwargs["environment"] = _environment(value)
        # 알 수 없는 키는 무시한다.

    return Function(name=name.strip(), **kwargs)


def _parse_structured(raw: str) -> List[Function]:
    decoded = _decode(raw)
    if decoded is None:
        return []
    if not isinstance(decoded, list) or isinstance(decoded, _Pairs):
        raise MalformedListing("최상위 값은 배열이어야 합니다.")

    res: List[Function] = []
    for entry in decoded:
        if entry is None:
            continue
        if not isinstance(entry, _Pairs):
            raise MalformedListing(f"배열 항목은 object 여야 합니다: {entry!r}")
        for name, attr_list in entry:
            if attr_list is None:
                continue
            if not isinstance(attr_list, list) or isinstance(attr_list, _Pairs):
                raise MalformedListing(f"함수 {name} 의 값은 배열이어야 합니다.")
            if not name.strip():
                logger.warning("함수 이름이 비어 있어 건너뜁니다: %r", name)
                continue
            for attrs in attr_list:
                res.append(_build_function(name, attrs))
    return res


def _parse_names(raw: str) -> List[Function]:
    res: List[Function] = []
    for token in raw.split(","):
        name = token.strip()
        if name:
            res.append(Function(name=name))
    return res


def _with_defaults(f: Function, default_runtime: str) -> Function:
    changes: dict = {}
    if not f.runtime:
        changes["runtime"] = default_runtime
    if not f.environment_delimiter:
        changes["environment_delimiter"] = DEFAULT_ENV_VAR_DELIMITER
    return replace(f, **changes) if changes else f


def parse_listing(raw: Optional[str], default_runtime: str) -> FunctionListing:
    """
    raw 를 구조화된 목록으로 먼저 해석하고, 실패하면 쉼표 구분 이름 목록으로 해석한다.

    구조화된 목록에서 온 함수에만 기본 runtime / environment 구분자를 채운다.
    """
    raw = raw or ""
    try:
        parsed = _parse_structured(raw)
    except MalformedListing as e:
        if raw.strip():
            logger.debug("구조화된 함수 목록이 아니므로 쉼표 구분 목록으로 처리합니다: %s", e)
        return FunctionListing(functions=tuple(_parse_names(raw)), structured=False)

    functions = tuple(_with_defaults(f, default_runtime) for f in parsed)
    return FunctionListing(functions=functions, structured=True)


def parse_functions(raw: Optional[str], default_runtime: str) -> List[Function]:
    return list(parse_listing(raw, default_runtime).functions)
