from __future__ import annotations

from datetime import time

from ...core.enums import AttendanceStatus
from .base import CheckinStrategy, StatusDecision


class LateStrategy(CheckinStrategy):
    """Scan after the late cutoff."""

    def decide_checkin(self, *, scan_time: time, late_time: time) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.LATE)
