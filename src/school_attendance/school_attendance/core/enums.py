from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Peran akun staf untuk hak akses."""

    ADMIN = "admin"
    STAFF = "staff"


class AttendanceStatus(str, Enum):
    """Status kehadiran yang disimpan di basis data."""

    PRESENT = "PRESENT"
    LATE = "LATE"
    SICK = "SICK"
    EXCUSED = "EXCUSED"
    ABSENT = "ABSENT"


class ScanResult(str, Enum):
    """Outcome kinds produced by the scan resolver."""

    ACCEPTED = "ACCEPTED"
    ALREADY_CHECKED_IN = "ALREADY_CHECKED_IN"
    UNKNOWN_STUDENT = "UNKNOWN_STUDENT"


class Semester(str, Enum):
    GANJIL = "Ganjil"
    GENAP = "Genap"
