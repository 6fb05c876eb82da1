"""
pytest 설정:

로컬에 다른 버전의 drone_gcf 패키지가 설치되어 있으면
site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.

테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.
"""

from __future__ import annotations

import os
import sys

import pytest


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


VALID_GCP_KEY = """
{
  "type": "service_account",
  "project_id": "my-project-id",
  "private_key_id": "",
  "private_key": "",
  "client_email": "my-project@appspot.gserviceaccount.com",
  "client_id": "123",
  "auth_uri": "https://accounts.google.com/o/oauth2/auth",
  "token_uri": "https://oauth2.googleapis.com/token"
}
"""

INVALID_GCP_KEY = """
{
  "type": "service_account",
  234: "invalid Json    ,

}
"""


@pytest.fixture
def valid_key() -> str:
    return VALID_GCP_KEY


@pytest.fixture
def invalid_key() -> str:
    return INVALID_GCP_KEY
