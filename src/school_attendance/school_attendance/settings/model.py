from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Optional


@dataclass(frozen=True)
class AppSettings:
    """Entitas domain: Pengaturan aplikasi (singleton, id = 1).

    late_time is the cutoff: a scan strictly after it is LATE.
    """

    entry_time: time
    late_time: time
    exit_time: time
    school_name: Optional[str] = None
    app_name: Optional[str] = None
    headmaster_name: Optional[str] = None
    school_address: Optional[str] = None
    school_phone: Optional[str] = None
    school_email: Optional[str] = None
    school_city: Optional[str] = None
    logo_url: Optional[str] = None
