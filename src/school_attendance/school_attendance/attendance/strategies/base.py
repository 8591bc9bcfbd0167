from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import time
from typing import Optional

from ...core.enums import AttendanceStatus


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class CheckinStrategy(ABC):
    """Strategy Pattern: decide the status a scan is stored with."""

    @abstractmethod
    def decide_checkin(self, *, scan_time: time, late_time: time) -> StatusDecision:
        raise NotImplementedError
