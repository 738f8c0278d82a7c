"""Report workflow: window -> inventory -> per-instance metrics -> rows."""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime
import logging
import time
from typing import Iterator, List, Optional, Tuple, Union

from .collectors.ec2_inventory import InstanceInventoryFetcher
from .collectors.network_metrics import NetworkMetricsCollector
from .config.models import NetworkReportConfig
from .errors import RemoteCallError
from .services.report_writer import ReportWriter
from .services.time_window import resolve_time_window
from .utils.logger import setup_logger
from .utils.metrics import Instance, NetworkTraffic, ReportRow, TimeWindow
from .utils.status import RowStatus


@dataclass
class RunSummary:
    """Counts and timing for one completed run."""

    window: TimeWindow
    instances: int = 0
    reported: int = 0
    skipped: List[ReportRow] = field(default_factory=list)
    duration: float = 0.0

    @property
    def complete(self) -> bool:
        return not self.skipped


class ReportWorkflow:
    """
    Orchestrates one report run.

    Steps run strictly in sequence. Rows are written as soon as each
    instance's traffic is known, always in inventory order, even when metric
    queries run on a worker pool.
    """

    def __init__(
        self,
        config: NetworkReportConfig,
        writer: ReportWriter,
        logger: Optional[logging.Logger] = None,
        inventory: Optional[InstanceInventoryFetcher] = None,
        metrics: Optional[NetworkMetricsCollector] = None
    ):
        """
        Initialize report workflow.

        Args:
            config: Run configuration
            writer: Destination for report lines
            logger: Optional logger instance
            inventory: Optional inventory fetcher (built from config when omitted)
            metrics: Optional metrics collector (built from config when omitted)
        """
        self.config = config
        self.writer = writer
        self.logger = logger or setup_logger("workflow")
        self.inventory = inventory or InstanceInventoryFetcher(config.aws, self.logger)
        self.metrics = metrics or NetworkMetricsCollector(
            config.aws,
            self.logger,
            namespace=config.report.namespace
        )

    def run(self, now: Optional[datetime] = None) -> RunSummary:
        """
        Execute the full report.

        Args:
            now: Reference instant for the window (defaults to current time)

        Returns:
            RunSummary: Counts of reported and skipped instances

        Raises:
            ConfigurationError: If the time zone cannot be resolved
            RemoteCallError: If inventory fails, or a metric query fails while
                continue_on_error is disabled
        """
        start_time = time.time()

        window = resolve_time_window(self.config.report.timezone, now)
        self.logger.info(
            "Resolved report window",
            extra={
                "window_start": window.start.isoformat(),
                "window_end": window.end.isoformat(),
                "period_seconds": window.period_seconds
            }
        )

        instances = self.inventory.fetch()
        summary = RunSummary(window=window, instances=len(instances))
        self.writer.write_header()

        try:
            for instance, outcome in self._iter_traffic(instances, window):
                if isinstance(outcome, RemoteCallError):
                    self.logger.warning(
                        f"Skipping {instance.instance_id}: {outcome}",
                        extra={"instance_id": instance.instance_id}
                    )
                    summary.skipped.append(ReportRow(
                        instance=instance,
                        status=RowStatus.SKIPPED,
                        error=str(outcome)
                    ))
                    continue

                self.writer.write_row(ReportRow(instance=instance, traffic=outcome))
                summary.reported += 1
        except RemoteCallError:
            self.logger.error(
                f"Report aborted after {summary.reported} of {summary.instances} row(s)"
            )
            raise

        summary.duration = time.time() - start_time
        self.logger.info(
            "Report completed",
            extra={
                "instances": summary.instances,
                "reported": summary.reported,
                "skipped": len(summary.skipped),
                "duration_s": round(summary.duration, 2)
            }
        )
        return summary

    def _iter_traffic(
        self,
        instances: List[Instance],
        window: TimeWindow
    ) -> Iterator[Tuple[Instance, Union[NetworkTraffic, RemoteCallError]]]:
        """Yield each instance with its traffic (or isolated error) in inventory order."""
        max_workers = self.config.report.max_workers

        if max_workers <= 1 or len(instances) <= 1:
            for instance in instances:
                yield instance, self._fetch_outcome(instance, window)
            return

        self.logger.info(f"Querying metrics with {max_workers} workers")
        # Build the client before fan-out: boto3 client creation is not
        # thread-safe, calls on a built client are
        _ = self.metrics.client
        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="netreport")
        try:
            # Futures are indexed by inventory position, not completion order
            futures = [
                executor.submit(self._fetch_outcome, instance, window)
                for instance in instances
            ]
            for instance, future in zip(instances, futures):
                yield instance, future.result()
        finally:
            executor.shutdown(wait=True, cancel_futures=True)

    def _fetch_outcome(
        self,
        instance: Instance,
        window: TimeWindow
    ) -> Union[NetworkTraffic, RemoteCallError]:
        """Fetch traffic; with continue_on_error, return the error instead of raising."""
        try:
            return self.metrics.fetch(instance, window)
        except RemoteCallError as e:
            if self.config.report.continue_on_error:
                return e
            raise
