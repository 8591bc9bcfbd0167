from __future__ import annotations

from datetime import time
from typing import Optional

from ..common.datetime_utils import parse_time_of_day
from ..common.validators import optional_text
from ..core.constants import DEFAULT_APP_NAME, DEFAULT_ENTRY_TIME, DEFAULT_EXIT_TIME, DEFAULT_LATE_TIME
from ..core.exceptions import ValidationError
from .model import AppSettings
from .repository import SettingsRepository


def default_settings() -> AppSettings:
    return AppSettings(
        entry_time=parse_time_of_day(DEFAULT_ENTRY_TIME),
        late_time=parse_time_of_day(DEFAULT_LATE_TIME),
        exit_time=parse_time_of_day(DEFAULT_EXIT_TIME),
        school_name=None,
        app_name=DEFAULT_APP_NAME,
    )


class SettingsService:
    """Use case: read/update the attendance thresholds and school identity."""

    def __init__(self, settings: SettingsRepository):
        self._settings = settings

    def get_settings(self) -> AppSettings:
        return self._settings.get() or default_settings()

    def late_time(self) -> time:
        return self.get_settings().late_time

    def update_times(self, *, entry_time: str | time, late_time: str | time, exit_time: str | time) -> AppSettings:
        entry = parse_time_of_day(entry_time)
        late = parse_time_of_day(late_time)
        exit_ = parse_time_of_day(exit_time)

        if not (entry <= late <= exit_):
            raise ValidationError("Urutan jam harus: jam masuk <= batas terlambat <= jam pulang")

        self._settings.save_times(entry_time=entry, late_time=late, exit_time=exit_)
        return self.get_settings()

    def update_identity(
        self,
        *,
        school_name: Optional[str],
        app_name: Optional[str],
        headmaster_name: Optional[str] = None,
        school_address: Optional[str] = None,
        school_phone: Optional[str] = None,
        school_email: Optional[str] = None,
        school_city: Optional[str] = None,
    ) -> AppSettings:
        """Save the school identity printed on ID cards."""

        email = optional_text(school_email)
        if email and "@" not in email:
            raise ValidationError("Format email sekolah tidak valid")

        self._settings.save_identity(
            school_name=optional_text(school_name),
            app_name=optional_text(app_name),
            headmaster_name=optional_text(headmaster_name),
            school_address=optional_text(school_address),
            school_phone=optional_text(school_phone),
            school_email=email,
            school_city=optional_text(school_city),
        )
        return self.get_settings()

    def set_logo(self, logo_url: Optional[str]) -> AppSettings:
        self._settings.save_logo_url(logo_url)
        return self.get_settings()
