"""Environment settings."""

import os
from typing import Dict, Optional


class Settings:
    """Application settings from environment variables."""

    # env var -> (section, field)
    OVERRIDES = {
        "AWS_REGION": ("aws", "region"),
        "REPORT_TIMEZONE": ("report", "timezone"),
        "REPORT_MAX_WORKERS": ("report", "max_workers"),
    }

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value
        """
        value = os.getenv(key, default)
        return value or ""

    @classmethod
    def overrides(cls) -> Dict[str, Dict[str, str]]:
        """
        Collect configuration overrides from the environment.

        Returns:
            Dict[str, Dict[str, str]]: Section name -> {field: raw value}
        """
        result: Dict[str, Dict[str, str]] = {}
        for key, (section, field) in cls.OVERRIDES.items():
            value = cls.get(key)
            if value:
                result.setdefault(section, {})[field] = value
        return result

    LOG_LEVEL = property(lambda self: Settings.get("LOG_LEVEL", "INFO"))
