"""
S3 document download task.

Downloads documents from the blob store to a local temp directory for
processing, rejecting oversized objects before any bytes are fetched.

Dependencies: boto3
System role: Source stage of document ingestion pipeline
"""

import os
import shutil
import tempfile
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

from ragpipe.core.exceptions import BlobDownloadError, OversizedInputError


class S3DownloadTask:
    """Download documents from S3 to local temp directory."""

    def __init__(
        self,
        region: str = "ap-southeast-2",
        max_bytes: int | None = None,
        s3_client=None,
    ) -> None:
        """
        Initialize S3 download task.

        Args:
            region: AWS region for S3
            max_bytes: Reject objects larger than this (None disables the check)
            s3_client: Optional preconfigured boto3 S3 client
        """
        self._region = region
        self._max_bytes = max_bytes
        self._s3_client = s3_client or boto3.client("s3", region_name=region)

    def object_size(self, bucket: str, key: str) -> int:
        """
        Size of an S3 object in bytes.

        Raises:
            BlobDownloadError: When the object is missing or unreadable
        """
        try:
            head = self._s3_client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            raise self._download_error(e, bucket, key) from e
        return int(head.get("ContentLength", 0))

    def download(self, bucket: str, key: str) -> str:
        """
        Download document from S3 to temp directory.

        Args:
            bucket: Source bucket
            key: S3 object key (e.g., "uploads/report.pdf")

        Returns:
            str: Local file path to downloaded document

        Raises:
            OversizedInputError: When the object exceeds max_bytes
            BlobDownloadError: When download fails
        """
        document = f"{bucket}/{key}"
        if not bucket or not key:
            raise BlobDownloadError("bucket and key are required", document)

        filename = Path(key).name
        if not filename:
            raise BlobDownloadError(f"Invalid S3 key: {key}", document)

        if self._max_bytes is not None:
            size = self.object_size(bucket, key)
            if size > self._max_bytes:
                raise OversizedInputError(document, size, self._max_bytes)

        temp_dir = tempfile.mkdtemp(prefix="ragpipe_")
        local_path = os.path.join(temp_dir, filename)

        try:
            self._s3_client.download_file(
                Bucket=bucket,
                Key=key,
                Filename=local_path,
            )
            return local_path

        except ClientError as e:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise self._download_error(e, bucket, key) from e
        except Exception as e:
            shutil.rmtree(temp_dir, ignore_errors=True)
            raise BlobDownloadError(
                f"Unexpected error downloading from S3: {e}", document
            ) from e

    @staticmethod
    def _download_error(error: ClientError, bucket: str, key: str) -> BlobDownloadError:
        document = f"{bucket}/{key}"
        error_code = error.response.get("Error", {}).get("Code", "Unknown")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return BlobDownloadError(f"File not found in S3: {document}", document)
        return BlobDownloadError(f"Failed to download from S3: {error}", document)

    @staticmethod
    def cleanup(local_path: str) -> None:
        """Remove the temp directory created by download()."""
        shutil.rmtree(os.path.dirname(local_path), ignore_errors=True)
