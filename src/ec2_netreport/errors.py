"""Exception hierarchy for the network report."""

from typing import Optional


class ReportError(Exception):
    """Base class for all report failures."""


class ConfigurationError(ReportError):
    """Raised when the run cannot be configured (bad time zone, bad config file)."""


class RemoteCallError(ReportError):
    """
    Raised when an AWS API call fails.

    Covers authentication, throttling, network faults and malformed
    responses alike. The underlying botocore exception, if any, is
    chained as ``__cause__``.
    """

    def __init__(self, operation: str, message: str, instance_id: Optional[str] = None):
        self.operation = operation
        self.instance_id = instance_id
        target = f" for {instance_id}" if instance_id else ""
        super().__init__(f"{operation} failed{target}: {message}")
