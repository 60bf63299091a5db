"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_METERS = 6_371_000

DEFAULT_CORRIDOR_RADIUS_METERS = 300
NEAR_PROJECT_MARGIN_METERS = 50

DEFAULT_FACE_MATCH_MIN_SCORE = 90

VISIT_RECENCY_HOURS = 24
NO_RECENT_VISIT_DAYS = 30
BEHIND_PLAN_TOLERANCE_PERCENT = 10

MAX_PACKAGE_STAGE_WEIGHT = 100
PREVIOUS_STAGES_FOR_AUDIT = 3

DEFAULT_HTTP_TIMEOUT_SECONDS = 10.0

# Review dashboard calls out overspend once financial leads physical by more than this.
FINANCIAL_AHEAD_REASON_PERCENT = -5
