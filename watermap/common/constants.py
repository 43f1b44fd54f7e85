"""Application constants."""

USER_AGENT = "watermap/0.3 (+dispatch-geo; contact: configured-email)"
STAGES = (
    "fetch",
    "derive",
)
EXIT_SUCCESS = 0
EXIT_PARTIAL = 10
EXIT_HARD_FAIL = 20

EARTH_RADIUS_M = 6_371_000.0
LENGTH_DECIMALS = 2

STATUS_NEW = "new"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

CATEGORY_WATER = "water"
CATEGORY_SEWER = "sewer"
# Team names as stored by the dispatch database.
DEFAULT_TEAM_CATEGORIES = {
    "водосеть": CATEGORY_WATER,
    "канализация": CATEGORY_SEWER,
}

ASSOCIATION_UNITS = ("degrees", "meters")

MARKER_KINDS = (
    "new_unassigned",
    "water",
    "water_in_progress",
    "sewer",
    "sewer_in_progress",
)

JSON_LOG_FIELDS = (
    "timestamp",
    "run_id",
    "stage",
    "event",
    "status",
    "duration_ms",
    "rows_in",
    "rows_out",
    "error_code",
    "message",
)
