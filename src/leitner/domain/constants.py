"""Centralized constants for the Leitner application.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Leitner boxes ----------
MIN_BOX = 1
MAX_BOX = 5

# Review interval in days for each box
BOX_INTERVAL_DAYS = {
    1: 1,
    2: 2,
    3: 4,
    4: 8,
    5: 16,
}

# ---------- Cards ----------
DEFAULT_CATEGORY = "General"

# ---------- Statistics ----------
DEFAULT_ACTIVITY_WINDOW_DAYS = 30
FULL_PROGRESS = 100

# ---------- Quiz ----------
DEFAULT_QUIZ_SIZE = 10
MAX_QUIZ_OPTIONS = 4

# ---------- HTTP ----------
REQUEST_TIMEOUT = 10.0
OWNER_HEADER = "X-User-Id"
