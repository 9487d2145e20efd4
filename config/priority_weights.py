"""
Priority Weights Configuration

Centralized configuration for the weekly review score and contact cadence.

The weekly review score is:
    score = importance * IMPORTANCE_WEIGHT
            + min(days_since_last, RECENCY_CAP_DAYS) * RECENCY_WEIGHT
            + open_loops * OPEN_LOOP_WEIGHT

People with no recorded interaction are scored as RECENCY_CAP_DAYS stale.
"""

# =============================================================================
# WEEKLY REVIEW SCORE
# =============================================================================
# One importance point counts as much as 10 days of silence.
IMPORTANCE_WEIGHT = 10

# Each day since last contact adds one point, up to the cap.
RECENCY_WEIGHT = 1
RECENCY_CAP_DAYS = 60

# One open loop counts as much as 15 days of silence.
OPEN_LOOP_WEIGHT = 15


# =============================================================================
# DEFAULTS FOR MISSING DATA
# =============================================================================
DEFAULT_IMPORTANCE = 3
DEFAULT_OPEN_LOOPS = 0

MIN_IMPORTANCE = 1
MAX_IMPORTANCE = 5


# =============================================================================
# REVIEW WINDOW
# =============================================================================
DEFAULT_REVIEW_LIMIT = 5
MAX_REVIEW_LIMIT = 50

# Open commitments due within this window (or with no due date) are open loops
OPEN_LOOP_LOOKAHEAD_DAYS = 7


# =============================================================================
# CONTACT CADENCE
# =============================================================================
# Upper bound accepted for an ideal contact frequency (ten years)
MAX_CONTACT_FREQUENCY_DAYS = 3650
