"""Centralized constants for the vocadrill application.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- SM-2 Scheduling ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
EASE_FACTOR_PRECISION = 2  # decimal places kept after each update
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
LAPSE_INTERVAL_DAYS = 1
MAX_INTERVAL_DAYS = 36500  # keeps last_reviewed + interval inside datetime range
PASSING_QUALITY = 3
MIN_QUALITY = 0
MAX_QUALITY = 5

# ---------- Mastery ----------
MASTERY_EASE_THRESHOLD = 2.5
MASTERY_MIN_REPETITIONS = 3
MASTERY_LEVEL_THRESHOLDS = {"master": 10, "advanced": 5, "intermediate": 2}

# ---------- Due Selection ----------
OVERDUE_GRACE_DAYS = 1
DEFAULT_SESSION_LIMIT = 20
DAILY_REVIEW_BASE = {"beginner": 15, "intermediate": 25, "advanced": 35}

# ---------- Statistics ----------
SECONDS_PER_ITEM = 20

# ---------- Storage ----------
REVIEW_ITEMS_FILE = "review_items.json"
STUDY_HISTORY_FILE = "study_history.json"
STORAGE_FORMAT_VERSION = 1
