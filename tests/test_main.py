"""End-to-end tests for the command-line entry point."""

import io
import sys

import pytest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from ec2_netreport.main import (
    EXIT_FAILED, EXIT_OK, EXIT_PARTIAL, build_parser, main, utf8_stdout
)

from conftest import describe_response, make_raw_instance, metric_response


@pytest.fixture
def aws_clients():
    """Patch boto3 in both collectors and return (ec2, cloudwatch, boto3 mock)."""
    ec2_client = MagicMock()
    cloudwatch_client = MagicMock()

    with patch('ec2_netreport.collectors.ec2_inventory.boto3') as ec2_boto3, \
            patch('ec2_netreport.collectors.network_metrics.boto3') as cw_boto3:
        ec2_boto3.client.return_value = ec2_client
        cw_boto3.client.return_value = cloudwatch_client
        yield ec2_client, cloudwatch_client, ec2_boto3


def run_cli(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


def test_list_prints_report(aws_clients, capsys):
    """The documented single-instance scenario prints exactly two lines."""
    ec2_client, cloudwatch_client, _ = aws_clients
    ec2_client.describe_instances.return_value = describe_response([
        make_raw_instance("i-1", "t2.micro", "running", "10.0.0.5", name="web1")
    ])
    cloudwatch_client.get_metric_data.return_value = metric_response(1000.0, 500.0)

    assert run_cli(["list"]) == EXIT_OK

    captured = capsys.readouterr()
    assert captured.out == (
        "Name,Type,State,ID,IP,NetworkIn,NetworkOut\n"
        "web1,t2.micro,running,i-1,10.0.0.5,1000,500\n"
    )
    assert "Report completed" in captured.err


def test_list_uses_default_region(aws_clients, capsys):
    ec2_client, _, ec2_boto3 = aws_clients
    ec2_client.describe_instances.return_value = {'Reservations': []}

    assert run_cli(["list"]) == EXIT_OK

    assert ec2_boto3.client.call_args.kwargs['region_name'] == 'us-east-1'


def test_region_flag_and_env(aws_clients, monkeypatch, capsys):
    """--region wins over AWS_REGION."""
    ec2_client, _, ec2_boto3 = aws_clients
    ec2_client.describe_instances.return_value = {'Reservations': []}
    monkeypatch.setenv("AWS_REGION", "eu-west-1")

    run_cli(["list"])
    assert ec2_boto3.client.call_args.kwargs['region_name'] == 'eu-west-1'

    run_cli(["list", "--region", "ap-south-1"])
    assert ec2_boto3.client.call_args.kwargs['region_name'] == 'ap-south-1'


def test_metric_failure_exits_non_zero(aws_clients, capsys):
    """Second instance fails: first row stays on stdout, error goes to stderr."""
    ec2_client, cloudwatch_client, _ = aws_clients
    ec2_client.describe_instances.return_value = describe_response([
        make_raw_instance("i-1", name="web1"),
        make_raw_instance("i-2", name="web2")
    ])
    cloudwatch_client.get_metric_data.side_effect = [
        metric_response(1000.0, 500.0),
        ClientError({'Error': {'Code': 'Throttling', 'Message': 'slow down'}}, 'GetMetricData')
    ]

    assert run_cli(["list"]) == EXIT_FAILED

    captured = capsys.readouterr()
    assert captured.out.splitlines() == [
        "Name,Type,State,ID,IP,NetworkIn,NetworkOut",
        "web1,t2.micro,running,i-1,10.0.0.5,1000,500"
    ]
    assert "Report failed" in captured.err
    assert "i-2" not in captured.out


def test_continue_on_error_exits_partial(aws_clients, capsys):
    ec2_client, cloudwatch_client, _ = aws_clients
    ec2_client.describe_instances.return_value = describe_response([
        make_raw_instance("i-1", name="web1"),
        make_raw_instance("i-2", name="web2")
    ])
    cloudwatch_client.get_metric_data.side_effect = [
        ClientError({'Error': {'Code': 'Throttling', 'Message': 'slow down'}}, 'GetMetricData'),
        metric_response(3.0, 4.0)
    ]

    assert run_cli(["list", "--continue-on-error"]) == EXIT_PARTIAL

    captured = capsys.readouterr()
    assert captured.out.splitlines()[1:] == ["web2,t2.micro,running,i-2,10.0.0.5,3,4"]
    assert "skipped" in captured.err


def test_inventory_failure_exits_non_zero(aws_clients, capsys):
    ec2_client, _, _ = aws_clients
    ec2_client.describe_instances.side_effect = ClientError(
        {'Error': {'Code': 'AuthFailure', 'Message': 'no'}}, 'DescribeInstances'
    )

    assert run_cli(["list"]) == EXIT_FAILED

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "AuthFailure" in captured.err


def test_bad_timezone_exits_non_zero(aws_clients, capsys):
    assert run_cli(["list", "--timezone", "Atlantis/Capital"]) == EXIT_FAILED

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Unknown time zone" in captured.err


def test_invalid_config_exits_non_zero(capsys):
    assert run_cli(["list", "--config", "/nonexistent/config.yaml"]) == EXIT_FAILED
    assert "Configuration error" in capsys.readouterr().err


def test_output_file(aws_clients, tmp_path, capsys):
    """--output writes the report to a file and leaves stdout empty."""
    ec2_client, cloudwatch_client, _ = aws_clients
    ec2_client.describe_instances.return_value = describe_response([
        make_raw_instance("i-1", name="web1")
    ])
    cloudwatch_client.get_metric_data.return_value = metric_response(None, 12.5)
    report = tmp_path / "report.csv"

    assert run_cli(["list", "--output", str(report)]) == EXIT_OK

    assert report.read_text(encoding="utf-8").splitlines()[1] == "web1,t2.micro,running,i-1,10.0.0.5,0,12.5"
    assert capsys.readouterr().out == ""


def test_subcommand_required(capsys):
    with pytest.raises(SystemExit) as exc_info:
        build_parser().parse_args([])
    assert exc_info.value.code == 2


def test_parser_defaults():
    args = build_parser().parse_args(["list"])

    assert args.command == "list"
    assert args.config is None
    assert args.max_workers is None
    assert args.continue_on_error is None
    assert args.log_level == "INFO"


def test_non_ascii_name_written_as_utf8(aws_clients, monkeypatch):
    """Stdout is switched to UTF-8 even under a latin-1 locale."""
    ec2_client, cloudwatch_client, _ = aws_clients
    ec2_client.describe_instances.return_value = describe_response([
        make_raw_instance("i-1", name="café-☃")
    ])
    cloudwatch_client.get_metric_data.return_value = metric_response(1.0, 2.0)
    raw = io.BytesIO()
    latin1_stdout = io.TextIOWrapper(raw, encoding="latin-1")
    monkeypatch.setattr(sys, "stdout", latin1_stdout)

    assert run_cli(["list"]) == EXIT_OK

    latin1_stdout.flush()
    lines = raw.getvalue().decode("utf-8").splitlines()
    assert lines[1] == "café-☃,t2.micro,running,i-1,10.0.0.5,1,2"


def test_utf8_stdout_leaves_utf8_and_text_buffers_alone(monkeypatch):
    buffer = io.StringIO()
    monkeypatch.setattr(sys, "stdout", buffer)
    assert utf8_stdout() is buffer

    utf8 = io.TextIOWrapper(io.BytesIO(), encoding="utf-8")
    monkeypatch.setattr(sys, "stdout", utf8)
    assert utf8_stdout() is utf8
    assert utf8.encoding == "utf-8"


def test_unknown_log_level_from_env_is_rejected(monkeypatch, capsys):
    """LOG_LEVEL is a default, so it is checked after parsing."""
    monkeypatch.setenv("LOG_LEVEL", "TRACE")

    assert run_cli(["list"]) == 2
    assert "invalid log level 'TRACE'" in capsys.readouterr().err


def test_lowercase_log_level_from_env_is_accepted(aws_clients, monkeypatch, capsys):
    ec2_client, _, _ = aws_clients
    ec2_client.describe_instances.return_value = {'Reservations': []}
    monkeypatch.setenv("LOG_LEVEL", "warning")

    assert run_cli(["list"]) == EXIT_OK
    assert "Report completed" not in capsys.readouterr().err
