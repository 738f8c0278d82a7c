"""Base collector class for AWS-backed collectors."""

from abc import ABC, abstractmethod
from functools import wraps
import logging
from typing import Optional

from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..config.models import AWSConfig
from ..errors import RemoteCallError


class BaseCollector(ABC):
    """Shared client configuration and logging for collectors."""

    def __init__(self, config: AWSConfig, logger: logging.Logger, client=None):
        """
        Initialize base collector.

        Args:
            config: AWS client configuration
            logger: Logger instance
            client: Pre-built boto3 client; created lazily when omitted
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)
        self._client = client

    @property
    def client(self):
        """boto3 client for the configured region, built on first use."""
        if self._client is None:
            self._client = self._create_client()
        return self._client

    @abstractmethod
    def _create_client(self):
        """Build the boto3 client for this collector's service."""
        pass

    def _client_config(self) -> Optional[BotoConfig]:
        """botocore client config, or None to keep the SDK defaults."""
        if self.config.client_max_attempts is None:
            return None
        return BotoConfig(retries={'max_attempts': self.config.client_max_attempts})


def remote_call(operation: str):
    """
    Decorator translating botocore failures into RemoteCallError.

    The wrapped method's first positional argument after ``self``, when it
    has an ``instance_id`` attribute, is named in the error.

    Args:
        operation: AWS operation name used in error messages
    """
    def decorator(func):
        @wraps(func)
        def wrapper(self, *args, **kwargs):
            instance_id = getattr(args[0], 'instance_id', None) if args else None
            try:
                return func(self, *args, **kwargs)
            except ClientError as e:
                code = e.response.get('Error', {}).get('Code', 'Unknown')
                raise RemoteCallError(operation, f"{code}: {e}", instance_id) from e
            except BotoCoreError as e:
                raise RemoteCallError(operation, str(e), instance_id) from e
            except (KeyError, TypeError) as e:
                raise RemoteCallError(
                    operation, f"malformed response: {e!r}", instance_id
                ) from e
        return wrapper
    return decorator
