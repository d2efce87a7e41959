"""Constants and defaults.

Attendance rules fall back to these when a tenant has no settings row.
"""

from datetime import time

DEFAULT_WORK_START = time(9, 0)
DEFAULT_LATE_THRESHOLD_MINUTES = 30
MAX_LATE_THRESHOLD_MINUTES = 12 * 60
DEFAULT_ABSENT_CUTOFF = time(12, 0)

RECENT_HIRE_DAYS = 30
RECENT_HIRES_LIMIT = 5

REMINDER_WINDOW_DAYS = 7

UNASSIGNED_DEPARTMENT = "Unassigned"
