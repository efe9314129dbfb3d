"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Everything that is business policy can be overridden from settings.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_LIST_LIMIT = 200

MIN_INTERVIEW_MINUTES = 15
MAX_INTERVIEW_MINUTES = 480

DEFAULT_SLOT_STEP_MINUTES = 30
DEFAULT_SEARCH_HORIZON_DAYS = 14
DEFAULT_MAX_SUGGESTIONS = 5
DEFAULT_BUFFER_MINUTES = 0
DEFAULT_DEPARTMENT_PTO_THRESHOLD = 2

DEFAULT_PTO_BASE_DAYS = 10
DEFAULT_ATTENDANCE_SESSION_HOURS = 4
