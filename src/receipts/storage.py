"""Receipt file storage: S3 when configured, local folder otherwise."""

import os
import time
import uuid
from datetime import datetime
from typing import Optional
import logging

from shared.config import Settings
from shared.exceptions import StorageError
from shared.s3 import S3Client
from receipts.models import StoredReceipt

logger = logging.getLogger(__name__)

# All receipts live under this folder in the bucket
RECEIPTS_PREFIX = 'receipts'


def generate_receipt_name() -> str:
    """
    Build a unique logical name for a receipt.

    Millisecond timestamp plus a random suffix, so concurrent uploads never
    collide without coordination.
    """
    return f"receipt_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


class S3ReceiptStore:
    """Stores receipts in the S3 bucket."""

    def __init__(self, s3_client: S3Client):
        self.s3_client = s3_client

    def store(self, file_bytes: bytes, logical_name: str, content_type: str, extension: str) -> StoredReceipt:
        """
        Upload a receipt.

        Args:
            file_bytes: Raw file content
            logical_name: Unique receipt name without extension
            content_type: MIME type
            extension: File extension (receipt_type)

        Returns:
            Stored receipt pointing at the object URL

        Raises:
            StorageError: If the upload fails
        """
        key = f"{RECEIPTS_PREFIX}/{logical_name}.{extension}"

        self.s3_client.upload_file(
            file_content=file_bytes,
            key=key,
            content_type=content_type,
            metadata={
                'logical_name': logical_name,
                'uploaded_at': datetime.utcnow().isoformat()
            }
        )

        return StoredReceipt(
            path=self.s3_client.get_object_url(key),
            storage_id=key,
            is_remote=True
        )

    def delete(self, storage_id: str) -> None:
        """Delete an uploaded receipt by its S3 key."""
        self.s3_client.delete_file(storage_id)

    def get_view_url(self, storage_id: str, content_type: Optional[str] = None) -> str:
        """Short-lived URL for viewing a receipt inline."""
        return self.s3_client.get_presigned_url(storage_id, expiration=900, content_type=content_type)


class LocalReceiptStore:
    """Stores receipts on the local filesystem when no bucket is configured."""

    def __init__(self, folder: str):
        self.folder = folder

    def store(self, file_bytes: bytes, logical_name: str, content_type: str, extension: str) -> StoredReceipt:
        """
        Write a receipt to the receipts folder.

        Raises:
            StorageError: If the file cannot be written
        """
        path = os.path.join(self.folder, f"{logical_name}.{extension}")

        try:
            os.makedirs(self.folder, exist_ok=True)
            with open(path, 'wb') as f:
                f.write(file_bytes)
        except OSError as e:
            logger.error(f"Error writing receipt to {path}: {e}")
            raise StorageError(f"Failed to write receipt file: {str(e)}")

        logger.info(f"Receipt written to {path}")
        return StoredReceipt(path=path, storage_id=path, is_remote=False)

    def delete(self, storage_id: str) -> None:
        """Delete a locally stored receipt."""
        try:
            os.remove(storage_id)
        except FileNotFoundError:
            logger.warning(f"Receipt file already gone: {storage_id}")
        except OSError as e:
            logger.error(f"Error deleting receipt {storage_id}: {e}")
            raise StorageError(f"Failed to delete receipt file: {str(e)}")


def build_receipt_store(settings: Settings):
    """
    Pick the receipt store for this process.

    S3 is used whenever a bucket is configured; otherwise receipts are kept
    in the local receipts folder.
    """
    if settings.use_remote_storage:
        logger.info(f"Receipts will be stored in s3://{settings.receipts_bucket}/{RECEIPTS_PREFIX}")
        return S3ReceiptStore(S3Client(settings.receipts_bucket, region_name=settings.aws_region))

    logger.warning(f"RECEIPTS_BUCKET not set, storing receipts locally in {settings.receipts_folder}")
    return LocalReceiptStore(settings.receipts_folder)
