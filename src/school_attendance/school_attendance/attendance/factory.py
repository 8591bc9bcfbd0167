from __future__ import annotations

from dataclasses import dataclass
from datetime import time

from .strategies.base import CheckinStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class CheckinStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_checkin(self, *, scan_time: time, late_time: time) -> CheckinStrategy:
        # Strictly after the cutoff; a scan exactly at late_time is still on time.
        if scan_time > late_time:
            return LateStrategy()
        return PresentStrategy()
