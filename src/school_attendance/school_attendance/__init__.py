"""School Attendance package.

Feature modules (attendance, students, reports, settings, ...) each pair a
thin Flask controller with service/repository layers over MySQL.
"""
