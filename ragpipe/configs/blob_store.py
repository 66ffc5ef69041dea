"""
Blob store configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Raw document storage (S3) configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BlobStoreSettings(BaseSettings):
    """S3 bucket settings for raw document downloads."""

    model_config = SettingsConfigDict(
        env_prefix="BLOB_STORE_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    region: str = Field(default="ap-southeast-2", description="AWS region for S3")
