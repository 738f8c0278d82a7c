"""Per-instance network traffic sums via CloudWatch GetMetricData."""

import logging
from typing import Dict, List

import boto3

from ..config.models import AWSConfig
from ..utils.metrics import Instance, NetworkTraffic, TimeWindow
from .base import BaseCollector, remote_call


# Query Id -> CloudWatch metric name
NETWORK_QUERIES = {
    'networkin': 'NetworkIn',
    'networkout': 'NetworkOut',
}


class NetworkMetricsCollector(BaseCollector):
    """Collector for summed NetworkIn/NetworkOut bytes per instance."""

    def __init__(
        self,
        config: AWSConfig,
        logger: logging.Logger,
        namespace: str = "AWS/EC2",
        client=None
    ):
        """
        Initialize network metrics collector.

        Args:
            config: AWS client configuration
            logger: Logger instance
            namespace: CloudWatch namespace holding the network metrics
            client: Optional boto3 CloudWatch client
        """
        super().__init__(config, logger, client)
        self.namespace = namespace

    def _create_client(self):
        return boto3.client(
            'cloudwatch',
            region_name=self.config.region,
            config=self._client_config()
        )

    def build_queries(self, instance_id: str, period: int) -> List[dict]:
        """
        Build the two Sum queries for one instance.

        Args:
            instance_id: EC2 instance ID used as the InstanceId dimension
            period: Aggregation period in seconds (whole window)

        Returns:
            List[dict]: MetricDataQueries entries
        """
        return [
            {
                'Id': query_id,
                'MetricStat': {
                    'Metric': {
                        'Namespace': self.namespace,
                        'MetricName': metric_name,
                        'Dimensions': [
                            {
                                'Name': 'InstanceId',
                                'Value': instance_id
                            }
                        ]
                    },
                    'Period': period,
                    'Stat': 'Sum'
                },
                'ReturnData': True
            }
            for query_id, metric_name in NETWORK_QUERIES.items()
        ]

    @remote_call('GetMetricData')
    def fetch(self, instance: Instance, window: TimeWindow) -> NetworkTraffic:
        """
        Sum network bytes for one instance over the window.

        Args:
            instance: Instance to query
            window: Aggregation window

        Returns:
            NetworkTraffic: First value of each labeled series, 0.0 when empty

        Raises:
            RemoteCallError: On any API failure or malformed response
        """
        response = self.client.get_metric_data(
            MetricDataQueries=self.build_queries(instance.instance_id, window.period_seconds),
            StartTime=window.start,
            EndTime=window.end
        )

        values = self._first_values(response['MetricDataResults'])
        network_in = values.get('networkin')
        network_out = values.get('networkout')

        if network_in is None or network_out is None:
            # Reported as 0 all the same; only the log tells them apart
            self.logger.warning(
                f"No network datapoints for {instance.instance_id}",
                extra={
                    "instance_id": instance.instance_id,
                    "network_in_missing": network_in is None,
                    "network_out_missing": network_out is None
                }
            )

        return NetworkTraffic(
            network_in=network_in if network_in is not None else 0.0,
            network_out=network_out if network_out is not None else 0.0,
            has_in_data=network_in is not None,
            has_out_data=network_out is not None
        )

    @staticmethod
    def _first_values(results: List[dict]) -> Dict[str, float]:
        """Map each query Id to its first value, skipping empty series."""
        values = {}
        for result in results:
            query_id = result['Id']
            series = result.get('Values') or []
            if query_id in NETWORK_QUERIES and series and query_id not in values:
                values[query_id] = float(series[0])
        return values
