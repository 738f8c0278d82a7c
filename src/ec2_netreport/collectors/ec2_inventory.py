"""EC2 instance inventory via DescribeInstances."""

import logging
from typing import Dict, List, Optional

import boto3

from ..config.models import AWSConfig
from ..utils.metrics import Instance
from .base import BaseCollector, remote_call


def name_from_tags(tags: Optional[List[Dict[str, str]]]) -> str:
    """
    Return the value of the first tag whose key is exactly "Name".

    Args:
        tags: EC2 tag list (``[{'Key': ..., 'Value': ...}]``), may be None

    Returns:
        str: Tag value, or "" when no Name tag exists
    """
    for tag in tags or []:
        if tag.get('Key') == 'Name':
            return tag.get('Value', '')
    return ''


class InstanceInventoryFetcher(BaseCollector):
    """Fetch every EC2 instance in the configured region."""

    def __init__(self, config: AWSConfig, logger: logging.Logger, client=None):
        """
        Initialize inventory fetcher.

        Args:
            config: AWS client configuration (region, retry attempts)
            logger: Logger instance
            client: Optional boto3 EC2 client
        """
        super().__init__(config, logger, client)

    def _create_client(self):
        return boto3.client('ec2', region_name=self.config.region, config=self._client_config())

    @remote_call('DescribeInstances')
    def fetch(self) -> List[Instance]:
        """
        Issue a single DescribeInstances call and flatten its reservations.

        Returns:
            List[Instance]: Instances in reservation order, then instance order

        Raises:
            RemoteCallError: On any API failure or a response without Reservations
        """
        self.logger.info(f"Describing EC2 instances in {self.config.region}")
        response = self.client.describe_instances()

        instances = []
        for reservation in response['Reservations']:
            for raw in reservation.get('Instances', []):
                instances.append(self._to_instance(raw))

        self.logger.info(f"Found {len(instances)} instance(s)")
        return instances

    @staticmethod
    def _to_instance(raw: dict) -> Instance:
        return Instance(
            instance_id=raw['InstanceId'],
            instance_type=raw['InstanceType'],
            state=raw['State']['Name'],
            # Terminated instances have no private address
            private_ip=raw.get('PrivateIpAddress', ''),
            name=name_from_tags(raw.get('Tags')),
        )
