"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_SESSION_DAYS = 7
DEFAULT_HISTORY_LIMIT = 30
DEFAULT_LATE_GRACE_MINUTES = 10
DEFAULT_LIST_LIMIT = 200

MIN_GRADE = 0
MAX_GRADE = 10

MAX_UPLOAD_BYTES = 10 * 1024 * 1024

# Firestore rejects `in` filters with more than 10 values.
FIRESTORE_IN_LIMIT = 10

ACTION_STATS_LIMIT = 1000
LOW_ATTENDANCE_RATE = 80.0

# Yearly family fee by number of enrolled children; four or more pay the top rate.
FAMILY_FEES = {1: 120.0, 2: 220.0, 3: 300.0, 4: 360.0}
