"""
services/timer.py

서버가 발급한 만료 시각(expires_at)까지 남은 시간을 계산하는 카운트다운.
UI 코드 없음. 화면은 1초마다 tick()을 호출해 다시 그린다.
"""

from __future__ import annotations

import math
import time
from datetime import datetime
from typing import Callable, Optional

_WARNING_SECONDS = 1800  # 30분 이하: 주의
_DANGER_SECONDS = 600    # 10분 이하: 경고


class Countdown:
    """
    남은 시간 = expires_at - clock() (초 단위 올림, 0 하한).
    올림이므로 마감 시각 이전에는 0이 되지 않는다.

    남은 시간이 0이 되는 첫 tick()에서 on_expire를 정확히 한 번 호출하고,
    이후로는 다시 계산하지 않는다.

    Args:
        expires_at: 서버 기준 만료 시각 (timezone 포함 datetime)
        on_expire:  만료 시 호출할 콜백
        clock:      현재 Unix timestamp를 반환하는 함수 (기본 time.time)
    """

    def __init__(
        self,
        expires_at: datetime,
        on_expire: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.expires_at = expires_at
        self.on_expire = on_expire
        self.clock = clock
        self._deadline = expires_at.timestamp()
        self._remaining = self._compute()
        self._expired = False

    def _compute(self) -> int:
        return max(0, math.ceil(self._deadline - self.clock()))

    @property
    def expired(self) -> bool:
        return self._expired

    def remaining_seconds(self) -> int:
        return self._remaining

    def tick(self) -> int:
        """남은 시간을 다시 계산하고, 0에 도달하면 만료 콜백을 한 번 호출한다."""
        if self._expired:
            return 0
        self._remaining = self._compute()
        if self._remaining == 0:
            self._expired = True
            if self.on_expire:
                self.on_expire()
        return self._remaining

    def format_remaining(self) -> str:
        minutes, seconds = divmod(self._remaining, 60)
        return f"{minutes}:{seconds:02d}"

    def urgency(self) -> str:
        if self._remaining <= _DANGER_SECONDS:
            return "danger"
        if self._remaining <= _WARNING_SECONDS:
            return "warning"
        return "normal"
