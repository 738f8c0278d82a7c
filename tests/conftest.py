"""Shared pytest configuration and fixtures."""

import pytest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from ec2_netreport.config.models import NetworkReportConfig
from ec2_netreport.services.time_window import resolve_time_window
from ec2_netreport.utils.logger import setup_logger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the caller's environment out of configuration."""
    for key in ("AWS_REGION", "REPORT_TIMEZONE", "REPORT_MAX_WORKERS", "LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def config():
    """Default run configuration."""
    return NetworkReportConfig()


@pytest.fixture
def fixed_now():
    """A winter instant: 2024-01-15 15:00 UTC is 10:00 in New York."""
    return datetime(2024, 1, 15, 15, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def window(fixed_now):
    """Window for 2024-01-14 in America/New_York."""
    return resolve_time_window("America/New_York", fixed_now)


def make_raw_instance(instance_id, instance_type="t2.micro", state="running",
                      ip="10.0.0.5", name=None, tags=None):
    """Build one DescribeInstances instance record."""
    raw = {
        'InstanceId': instance_id,
        'InstanceType': instance_type,
        'State': {'Code': 16, 'Name': state},
    }
    if ip is not None:
        raw['PrivateIpAddress'] = ip
    if tags is None and name is not None:
        tags = [{'Key': 'Name', 'Value': name}]
    if tags is not None:
        raw['Tags'] = tags
    return raw


def describe_response(*reservations):
    """Build a DescribeInstances response; each argument is one reservation's instance list."""
    return {
        'Reservations': [
            {'ReservationId': f'r-{i}', 'Instances': list(instances)}
            for i, instances in enumerate(reservations)
        ]
    }


def metric_response(network_in=None, network_out=None):
    """Build a GetMetricData response; None means an empty series."""
    def series(query_id, value):
        return {
            'Id': query_id,
            'Label': query_id,
            'Timestamps': [] if value is None else [datetime(2024, 1, 14, 5, 0, tzinfo=timezone.utc)],
            'Values': [] if value is None else [value],
            'StatusCode': 'Complete'
        }
    return {
        'MetricDataResults': [
            series('networkin', network_in),
            series('networkout', network_out)
        ]
    }


def instance_id_of(kwargs):
    """Extract the InstanceId dimension from get_metric_data kwargs."""
    return kwargs['MetricDataQueries'][0]['MetricStat']['Metric']['Dimensions'][0]['Value']


@pytest.fixture
def ec2_client():
    return MagicMock()


@pytest.fixture
def cloudwatch_client():
    return MagicMock()
