"""AWS boundary: S3 blob storage for book PDFs."""

from bookshelf.boundary.aws.s3_client import S3BookStorage

__all__ = ["S3BookStorage"]
