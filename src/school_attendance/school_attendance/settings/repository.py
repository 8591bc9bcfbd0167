from __future__ import annotations

from datetime import time
from typing import Optional, Protocol

from .model import AppSettings


class SettingsRepository(Protocol):
    def get(self) -> Optional[AppSettings]:
        raise NotImplementedError

    def save_times(self, *, entry_time: time, late_time: time, exit_time: time) -> None:
        """Create the singleton row if missing, otherwise update its thresholds."""

        raise NotImplementedError

    def save_identity(
        self,
        *,
        school_name: Optional[str],
        app_name: Optional[str],
        headmaster_name: Optional[str],
        school_address: Optional[str],
        school_phone: Optional[str],
        school_email: Optional[str],
        school_city: Optional[str],
    ) -> None:
        raise NotImplementedError

    def save_logo_url(self, logo_url: Optional[str]) -> None:
        raise NotImplementedError
