"""Pydantic configuration models for the network report."""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class AWSConfig(BaseModel):
    """AWS client configuration."""
    region: str = "us-east-1"
    # Passed to botocore's own retry handler; None keeps the SDK default
    client_max_attempts: Optional[int] = Field(default=None, ge=1, le=20)

    @field_validator('region')
    @classmethod
    def validate_region(cls, v: str) -> str:
        """Reject blank region names."""
        if not v.strip():
            raise ValueError('region must not be empty')
        return v.strip()


class ReportConfig(BaseModel):
    """Report window and execution configuration."""
    timezone: str = "America/New_York"  # IANA zone used to define "yesterday"
    namespace: str = "AWS/EC2"
    max_workers: int = Field(default=1, ge=1, le=64)
    continue_on_error: bool = False


class NetworkReportConfig(BaseModel):
    """Root configuration model, built once at startup."""
    aws: AWSConfig = Field(default_factory=AWSConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
