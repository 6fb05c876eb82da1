import sys
from typing import Tuple

import click

from . import __version__
from .config import load_env_files, PluginConfig
from .credentials import staged_token_file
from .executor import run_config
from .logging_utils import setup_logging, get_logger


logger = get_logger(__name__)


@click.command()
@click.option(
    "-v",
    "--version",
    "show_version",
    is_flag=True,
    help="버전을 출력하고 종료합니다.",
)
@click.option(
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다.",
)
@click.option(
    "-e",
    "--env-file",
    "env_files",
    multiple=True,
    type=click.Path(dir_okay=False),
    help="설정을 읽기 전에 로드할 .env 파일 (여러 번 지정 가능, 뒤의 파일이 우선)",
)
def main(show_version: bool, verbose: int, env_files: Tuple[str, ...]) -> None:
    """Drone CI 용 Google Cloud Functions 배포 플러그인"""
    setup_logging(verbose)
    logger.info("Drone-GCF Plugin version: %s", __version__)

    if show_version:
        click.echo(__version__)
        return

    if env_files:
        load_env_files(env_files)

    try:
        cfg = PluginConfig.from_env()
    except ValueError as e:
        logger.error("설정 로드 실패: %s", e)
        click.echo(f"[ERROR] 설정 로드 실패: {e}", err=True)
        sys.exit(1)

    logger.debug("Config loaded: action=%s functions=%s", cfg.action, [f.name for f in cfg.functions])

    try:
        with staged_token_file(cfg.token) as key_file:
            run_config(cfg, key_file=key_file)
    except Exception as e:  # noqa: BLE001
        logger.exception("실행 중 오류 발생")
        click.echo(f"[ERROR] 실행 실패: {e}", err=True)
        sys.exit(1)
