"""Command-line entry point for the EC2 network traffic report."""

import argparse
import io
import logging
import sys
from typing import List, Optional, TextIO

from .config.loader import ConfigLoader
from .config.models import NetworkReportConfig
from .config.settings import Settings
from .errors import ConfigurationError, RemoteCallError
from .services.report_writer import ReportWriter
from .utils.logger import LOG_LEVELS, setup_logger
from .workflow import ReportWorkflow, RunSummary


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_PARTIAL = 2


class NetworkReportApp:
    """
    Report application.

    Builds the configuration once, wires the workflow to the output stream,
    and maps failures to exit codes.
    """

    def __init__(
        self,
        config: NetworkReportConfig,
        output: TextIO,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize report application.

        Args:
            config: Validated run configuration
            output: Stream receiving the CSV report
            logger: Optional logger instance
        """
        self.config = config
        self.output = output
        self.logger = logger or setup_logger("main")
        self.workflow = ReportWorkflow(config, ReportWriter(output), self.logger)

    def run(self) -> int:
        """
        Run the report and return the process exit code.

        Returns:
            int: EXIT_OK, EXIT_PARTIAL (instances skipped) or EXIT_FAILED
        """
        self.logger.info(
            "Starting EC2 network report",
            extra={
                "region": self.config.aws.region,
                "timezone": self.config.report.timezone,
                "max_workers": self.config.report.max_workers,
                "continue_on_error": self.config.report.continue_on_error
            }
        )

        try:
            summary: RunSummary = self.workflow.run()
        except (ConfigurationError, RemoteCallError) as e:
            self.logger.error(
                f"Report failed: {e}",
                extra={
                    "error_type": type(e).__name__,
                    "error_message": str(e)
                }
            )
            return EXIT_FAILED

        if not summary.complete:
            self.logger.warning(
                f"{len(summary.skipped)} instance(s) skipped",
                extra={"skipped": [row.instance.instance_id for row in summary.skipped]}
            )
            return EXIT_PARTIAL

        return EXIT_OK


def utf8_stdout() -> TextIO:
    """Return sys.stdout, switched to UTF-8 when the locale chose another encoding."""
    stream = sys.stdout
    if isinstance(stream, io.TextIOWrapper) and stream.encoding.lower().replace('-', '') != 'utf8':
        stream.reconfigure(encoding='utf-8')
    return stream


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='ec2-netreport',
        description='Report EC2 instances with their network traffic for the previous day',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Report every instance in the default region
  ec2-netreport list

  # Use a config file and keep going past failing instances
  ec2-netreport list --config config/config.yaml --continue-on-error

  # Query metrics with 8 workers, write to a file
  ec2-netreport list --max-workers 8 --output report.csv
        """
    )

    parser.add_argument(
        '--log-level',
        default=Settings().LOG_LEVEL,
        choices=LOG_LEVELS,
        help='Logging level (default: INFO or LOG_LEVEL env var)'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    list_parser = subparsers.add_parser(
        'list',
        help='List EC2 instances with NetworkIn/NetworkOut sums',
        description=(
            'Lists EC2 instances, then pulls yesterday\'s network data '
            'so you can spot instances that could be downsized.'
        )
    )
    list_parser.add_argument(
        '--config',
        default=None,
        help='Path to YAML configuration file (optional)'
    )
    list_parser.add_argument('--region', help='AWS region (default: us-east-1 or AWS_REGION)')
    list_parser.add_argument(
        '--timezone',
        help='IANA time zone defining "yesterday" (default: America/New_York)'
    )
    list_parser.add_argument(
        '--max-workers',
        type=int,
        help='Concurrent metric queries (default: 1)'
    )
    list_parser.add_argument(
        '--continue-on-error',
        action='store_true',
        default=None,
        help='Skip instances whose metric query fails instead of aborting'
    )
    list_parser.add_argument(
        '--output',
        default=None,
        help='Write the report to this file instead of stdout'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """
    CLI entry point.

    Parses command-line arguments, runs the report and exits with its status.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    # Defaults from LOG_LEVEL bypass argparse choices
    if args.log_level.upper() not in LOG_LEVELS:
        parser.error(f"invalid log level {args.log_level!r} (choose from {', '.join(LOG_LEVELS)})")
    logger = setup_logger("ec2_netreport", args.log_level)

    try:
        config = ConfigLoader.load(
            args.config,
            overrides={
                "aws": {"region": args.region},
                "report": {
                    "timezone": args.timezone,
                    "max_workers": args.max_workers,
                    "continue_on_error": args.continue_on_error
                }
            }
        )
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(EXIT_FAILED)

    try:
        if args.output:
            with open(args.output, 'w', encoding='utf-8') as output:
                exit_code = NetworkReportApp(config, output, logger).run()
        else:
            exit_code = NetworkReportApp(config, utf8_stdout(), logger).run()
    except OSError as e:
        logger.error(f"Cannot write report to {args.output or 'stdout'}: {e}")
        exit_code = EXIT_FAILED
    except KeyboardInterrupt:
        logger.error("Interrupted")
        exit_code = 130

    sys.exit(exit_code)


if __name__ == '__main__':
    main()
