"""Per-instance outcome enumeration."""

from enum import Enum


class RowStatus(Enum):
    """Outcome of processing one inventory instance."""

    REPORTED = "reported"
    SKIPPED = "skipped"
