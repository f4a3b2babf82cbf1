"""Default query bounds for API requests.

The recent-workouts endpoint looks back one week unless the client asks for a
different window.
"""

DEFAULT_RECENT_DAYS = 7
MAX_RECENT_DAYS = 365
