"""Settings shared by every environment module.

Each value can be overridden through the environment (or a ``.env`` file,
loaded by python-dotenv in ``create_app``).
"""

import os


def _int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": _int("DB_PORT", 3306),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "hr_portal"),
}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# Used to build QR check-in links; falls back to the request host when empty
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "")
ATTENDANCE_SESSION_HOURS = _int("ATTENDANCE_SESSION_HOURS", 4)

# Interview conflict checking
INTERVIEW_SLOT_STEP_MINUTES = _int("INTERVIEW_SLOT_STEP_MINUTES", 30)
INTERVIEW_SEARCH_HORIZON_DAYS = _int("INTERVIEW_SEARCH_HORIZON_DAYS", 14)
INTERVIEW_MAX_SUGGESTIONS = _int("INTERVIEW_MAX_SUGGESTIONS", 5)
# 0 disables the proximity warning between back-to-back interviews
INTERVIEW_BUFFER_MINUTES = _int("INTERVIEW_BUFFER_MINUTES", 0)

# PTO
PTO_DEPARTMENT_OVERLAP_THRESHOLD = _int("PTO_DEPARTMENT_OVERLAP_THRESHOLD", 2)
PTO_DEFAULT_BASE_DAYS = _int("PTO_DEFAULT_BASE_DAYS", 10)
