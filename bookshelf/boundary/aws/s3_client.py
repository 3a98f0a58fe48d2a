"""
S3 client for the book bucket.

Uploads, downloads and removes raw PDF objects. Calls are blocking boto3
calls; async callers run them through asyncio.to_thread.

Dependencies: boto3
System role: Blob storage for uploaded books
"""

import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from bookshelf.core.exceptions import StorageError, StorageObjectNotFoundError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


def book_storage_key(user_id: str, book_id: str) -> str:
    """Object key of a book PDF: ``{user_id}/books/{book_id}.pdf``."""
    return f"{user_id}/books/{book_id}.pdf"


class S3BookStorage:
    """S3 client for book PDF objects."""

    def __init__(self, bucket: str, region: str = "ap-southeast-1", client=None) -> None:
        """
        Initialize S3 client for the book bucket.

        Args:
            bucket: S3 bucket name for book storage
            region: AWS region for S3 bucket
            client: Preconfigured boto3 S3 client (created if None)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client("s3", region_name=region)

    @property
    def bucket(self) -> str:
        return self._bucket

    def download(self, key: str) -> bytes:
        """
        Download an object's bytes.

        Args:
            key: S3 object key

        Returns:
            bytes: Object content

        Raises:
            StorageObjectNotFoundError: When the object does not exist
            StorageError: When the download fails for any other reason
        """
        if not key:
            raise StorageError("Storage key is required")

        try:
            response = self._s3_client.get_object(Bucket=self._bucket, Key=key)
            return response["Body"].read()

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code in _NOT_FOUND_CODES:
                raise StorageObjectNotFoundError(
                    f"File not found in storage: {key}", key
                ) from e
            raise StorageError(f"Failed to download from storage: {e}", key) from e
        except BotoCoreError as e:
            raise StorageError(f"Failed to download from storage: {e}", key) from e

    def upload(self, key: str, data: bytes, content_type: str = "application/pdf") -> None:
        """
        Store bytes under a key.

        Raises:
            StorageError: When the upload fails
        """
        try:
            self._s3_client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
            logger.info(
                f"{__name__}:upload - Object stored",
                extra={"key": key, "byte_count": len(data)},
            )
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to upload to storage: {e}", key) from e

    def remove(self, key: str) -> None:
        """
        Delete an object. Deleting a missing key is not an error.

        Raises:
            StorageError: When the delete call fails
        """
        try:
            self._s3_client.delete_object(Bucket=self._bucket, Key=key)
        except (ClientError, BotoCoreError) as e:
            raise StorageError(f"Failed to remove from storage: {e}", key) from e
