"""Data structures shared by the inventory, metrics and report stages."""

from dataclasses import dataclass
from datetime import datetime, timezone
import math
from typing import Optional

from .status import RowStatus


CSV_HEADER = "Name,Type,State,ID,IP,NetworkIn,NetworkOut"


@dataclass(frozen=True)
class TimeWindow:
    """Closed interval covering one calendar day in the reference zone."""

    start: datetime
    end: datetime

    @property
    def period_seconds(self) -> int:
        """
        Aggregation period covering the whole window in a single bucket.

        CloudWatch periods must be multiples of 60, so the window length is
        rounded up: 86400 on ordinary days, 82800 or 90000 across a DST change.
        """
        # Same-tzinfo subtraction ignores offsets, so measure in UTC
        elapsed = self.end.astimezone(timezone.utc) - self.start.astimezone(timezone.utc)
        seconds = elapsed.total_seconds()
        return int(math.ceil(seconds / 60.0)) * 60


@dataclass(frozen=True)
class Instance:
    """Identity and state snapshot of one EC2 instance."""

    instance_id: str
    instance_type: str
    state: str
    private_ip: str
    name: str = ""


@dataclass(frozen=True)
class NetworkTraffic:
    """Summed network bytes for one instance over a time window.

    A series with no datapoints is recorded as 0.0; the ``has_*_data`` flags
    are only used for logging and never reach the report.
    """

    network_in: float = 0.0
    network_out: float = 0.0
    has_in_data: bool = False
    has_out_data: bool = False


@dataclass
class ReportRow:
    """One line of the report: an instance joined with its traffic."""

    instance: Instance
    traffic: Optional[NetworkTraffic] = None
    status: RowStatus = RowStatus.REPORTED
    error: Optional[str] = None

    def to_csv_line(self) -> str:
        """Render the row without quoting, matching CSV_HEADER column order."""
        traffic = self.traffic or NetworkTraffic()
        return ",".join([
            self.instance.name,
            self.instance.instance_type,
            self.instance.state,
            self.instance.instance_id,
            self.instance.private_ip,
            format_bytes(traffic.network_in),
            format_bytes(traffic.network_out),
        ])


def format_bytes(value: float) -> str:
    """Format a byte sum, dropping the trailing '.0' of integral values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
