"""Error types carried to the run log as ``error_code``."""


class WatermapError(Exception):
    """Base class for watermap failures."""

    error_code = "WATERMAP_ERROR"


class ConfigError(WatermapError):
    """Settings files are missing, malformed or fail the schema."""

    error_code = "CONFIG_ERROR"


class StageError(WatermapError):
    """A fetch or derive stage could not complete."""

    error_code = "STAGE_ERROR"


class SnapshotError(StageError):
    """The snapshot file or an API listing does not have the expected shape."""

    error_code = "SNAPSHOT_ERROR"
