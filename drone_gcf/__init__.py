"""
drone_gcf
---------

Drone CI 용 Google Cloud Functions 배포 플러그인.
환경변수로 전달된 함수 목록/설정을 검증하고, gcloud functions
(deploy / delete / call / list) 호출 계획을 만들어 순서대로 실행한다.
"""

__version__ = "0.1.0"

__all__ = [
    "config",
    "executor",
    "plan",
]
