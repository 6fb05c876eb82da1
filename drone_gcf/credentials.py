"""
credentials
-----------

서비스 계정 키(JSON) 에서 project_id 를 꺼내고,
gcloud auth 에 넘길 임시 키 파일을 관리한다.
"""

from __future__ import annotations

import json
import os
from contextlib import contextmanager
from typing import Iterator

from .logging_utils import get_logger


logger = get_logger(__name__)


# 플러그인을 실행하는 일회성 컨테이너 안에서의 임시 키 파일 위치
TOKEN_FILE_LOCATION = "/tmp/token.json"


def extract_project_id(token: str) -> str:
    """
    키 문서의 project_id 값을 리턴한다. 해석할 수 없으면 빈 문자열.
    """
    try:
        data = json.loads(token)
    except (TypeError, ValueError):
        return ""
    if not isinstance(data, dict):
        return ""
    project_id = data.get("project_id")
    if not isinstance(project_id, str):
        return ""
    return project_id


def write_token_file(token: str, path: str = TOKEN_FILE_LOCATION) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        f.write(token)


def remove_token_file(path: str = TOKEN_FILE_LOCATION) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.debug("임시 키 파일을 삭제했습니다: %s", path)


@contextmanager
def staged_token_file(token: str, path: str = TOKEN_FILE_LOCATION) -> Iterator[str]:
    """
    키 파일을 path 에 기록하고, 블록을 벗어날 때(예외 포함) 항상 삭제한다.
    """
    write_token_file(token, path)
    logger.debug("임시 키 파일을 기록했습니다: %s", path)
    try:
        yield path
    finally:
        remove_token_file(path)
