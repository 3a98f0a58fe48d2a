"""
S3 books bucket configuration.

Settings for the bucket holding uploaded PDF files.

Dependencies: pydantic_settings
System role: Blob storage configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class S3BooksSettings(BaseSettings):
    """Settings for S3 books bucket operations."""

    model_config = SettingsConfigDict(
        env_prefix="S3_BOOKS_",
        case_sensitive=False,
        extra="ignore",
    )

    bucket: str = Field(
        default="bookshelf-dev-books",
        description="S3 bucket for uploaded PDF books",
    )
    region: str = Field(
        default="ap-southeast-1",
        description="AWS region for S3 bucket",
    )
