from __future__ import annotations

import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import IO, List, Mapping, Optional, Sequence

from .logging_utils import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class RunResult:
    returncode: int
    dry_run: bool = False


# 값에 비밀이 들어가는 플래그. 로그/에러 메시지에는 키만 남긴다.
SECRET_VALUE_FLAGS = ("--set-env-vars",)
REDACTED = "***"


def _mask_env_vars(value: str) -> str:
    """
    "^<구분자>^K=V<구분자>K2=V2" (또는 "K=V,K2=V2") 에서 값만 가린다.
    """
    prefix = ""
    delimiter = ","
    if value.startswith("^"):
        end = value.find("^", 1)
        if end > 0:
            prefix, delimiter, value = value[: end + 1], value[1:end], value[end + 1:]
    if not delimiter:
        return prefix + REDACTED

    masked = []
    for pair in value.split(delimiter):
        key, sep, _ = pair.partition("=")
        masked.append(f"{key}={REDACTED}" if sep else REDACTED)
    return prefix + delimiter.join(masked)


def redact_command(cmd: Sequence[str]) -> List[str]:
    res: List[str] = []
    mask_next = False
    for arg in cmd:
        if mask_next:
            res.append(_mask_env_vars(arg))
            mask_next = False
            continue
        flag, sep, value = arg.partition("=")
        if flag in SECRET_VALUE_FLAGS and sep:
            res.append(f"{flag}={_mask_env_vars(value)}")
            continue
        mask_next = arg in SECRET_VALUE_FLAGS
        res.append(arg)
    return res


def format_command(cmd: Sequence[str]) -> str:
    return " ".join(redact_command(cmd))


def _pump(pipe: IO[str], sink: IO[str]) -> None:
    try:
        for line in pipe:
            sink.write(line)
            sink.flush()
    finally:
        pipe.close()


def run_command(
    cmd: Sequence[str],
    *,
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    stdout: Optional[IO[str]] = None,
    stderr: Optional[IO[str]] = None,
    dry_run: bool = False,
) -> RunResult:
    """
    subprocess 실행 공통 유틸.

    - 자식 프로세스의 stdout/stderr 를 호출이 끝날 때까지 줄 단위로 각 sink 에 흘린다.
      (sink 기본값은 호출 시점의 sys.stdout / sys.stderr)
    - 타임아웃은 두지 않는다. 명령이 끝날 때까지 기다린다.
    - dry_run=True 이면 로그만 남기고 실행하지 않는다.
    - 실행 실패(명령 없음, exit != 0)는 RuntimeError 로 올린다.
    """
    shown = format_command(cmd)
    logger.info("명령 실행: %s", shown)
    if dry_run:
        logger.info("dry-run: 실제로 실행하지 않습니다.")
        return RunResult(returncode=0, dry_run=True)

    out_sink = stdout if stdout is not None else sys.stdout
    err_sink = stderr if stderr is not None else sys.stderr

    try:
        proc = subprocess.Popen(  # noqa: S603
            list(cmd),
            cwd=cwd or None,
            env=dict(env) if env is not None else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            errors="replace",
            bufsize=1,
        )
    except FileNotFoundError as e:
        raise RuntimeError(
            f"필요한 명령을 찾을 수 없습니다: {cmd[0]} (gcloud 가 설치되어 있는지 확인하세요)"
        ) from e
    except OSError as e:
        raise RuntimeError(f"명령을 시작할 수 없습니다: {shown} ({e})") from e

    readers = [
        threading.Thread(target=_pump, args=(proc.stdout, out_sink), daemon=True),
        threading.Thread(target=_pump, args=(proc.stderr, err_sink), daemon=True),
    ]
    for t in readers:
        t.start()

    returncode = proc.wait()
    for t in readers:
        t.join()

    if returncode != 0:
        raise RuntimeError(f"명령 실행 실패: {shown} (exit={returncode})")

    return RunResult(returncode=returncode)
