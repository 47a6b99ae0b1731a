"""
services/access.py

문제 관리 화면 진입용 클라이언트 측 접근 허가.
비밀번호 비교는 보안 경계가 아니다. 실제 권한 검사는 백엔드 몫.
허가는 만료 시각을 가진 AccessGrant로 발급되어 화면에 명시적으로 전달된다.
"""

import hmac
import time
from dataclasses import dataclass
from typing import Callable, Optional

import config


class AccessDenied(Exception):
    """비밀번호 불일치."""


@dataclass(frozen=True)
class AccessGrant:
    expires_at: float  # Unix timestamp

    def is_valid(self, now: Optional[float] = None) -> bool:
        return (time.time() if now is None else now) < self.expires_at


def grant_access(
    password: str,
    now: Optional[float] = None,
    ttl: int = config.ACCESS_GRANT_TTL,
    expected: str = config.QUESTION_MANAGER_PASSWORD,
) -> AccessGrant:
    if not hmac.compare_digest(password.encode(), expected.encode()):
        raise AccessDenied("Incorrect password. Please try again.")
    issued = time.time() if now is None else now
    return AccessGrant(expires_at=issued + ttl)


def check_grant(grant: Optional[AccessGrant], clock: Callable[[], float] = time.time) -> bool:
    return grant is not None and grant.is_valid(clock())
