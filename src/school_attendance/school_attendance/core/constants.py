"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_ENTRY_TIME = "07:00"
DEFAULT_LATE_TIME = "07:15"
DEFAULT_EXIT_TIME = "15:00"

DEFAULT_APP_NAME = "Absensi Siswa"

# Scanner screen returns to idle after showing a result for this long.
SCAN_DISPLAY_SECONDS = 5

DEFAULT_ABSENT_NOTE = "Tanpa Keterangan"

DEFAULT_SESSION_IDLE_MINUTES = 30
STUDENT_CSV_REQUIRED_HEADERS = ("id", "name", "class_id")
STUDENT_CSV_HEADERS = ("id", "name", "class_id", "nisn", "pob", "dob", "address", "photo_url")

# Display labels for AttendanceStatus values (presentation boundary only).
STATUS_LABELS = {
    "PRESENT": "Hadir",
    "LATE": "Terlambat",
    "SICK": "Sakit",
    "EXCUSED": "Ijin",
    "ABSENT": "Alpa",
}

DAILY_REPORT_CSV_HEADERS = ("NIS", "Nama Siswa", "Kelas", "Status", "Jam Masuk", "Jam Pulang", "Keterangan")
MONTHLY_REPORT_CSV_HEADERS = ("NIS", "Nama Siswa", "Kelas", "Hadir", "Terlambat", "Sakit", "Ijin")
