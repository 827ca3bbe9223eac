"""S3 bucket wrapper for receipt files."""

from typing import Dict, Optional
from botocore.exceptions import BotoCoreError, ClientError
import logging

from .aws import client
from .exceptions import StorageError

logger = logging.getLogger(__name__)

DEFAULT_URL_EXPIRATION = 3600


class S3Client:
    """Uploads, deletes and addresses objects in one bucket."""

    def __init__(self, bucket_name: str, region_name: Optional[str] = None):
        """
        Bind to a bucket.

        Args:
            bucket_name: Name of the S3 bucket
            region_name: Optional AWS region
        """
        self.bucket_name = bucket_name
        self.s3 = client('s3', region_name)

    def upload_file(
        self,
        file_content: bytes,
        key: str,
        content_type: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None
    ) -> str:
        """
        Write an object, encrypted at rest.

        Args:
            file_content: Raw bytes
            key: Object key
            content_type: Optional MIME type
            metadata: Optional user metadata

        Returns:
            The object key

        Raises:
            StorageError: If the upload fails
        """
        params = {
            'Bucket': self.bucket_name,
            'Key': key,
            'Body': file_content,
            'ServerSideEncryption': 'AES256'
        }
        if content_type:
            params['ContentType'] = content_type
        if metadata:
            params['Metadata'] = metadata

        try:
            self.s3.put_object(**params)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to upload file: {str(e)}")

        logger.info(f"Uploaded {len(file_content)} bytes to s3://{self.bucket_name}/{key}")
        return key

    def delete_file(self, key: str) -> None:
        """
        Remove an object.

        Raises:
            StorageError: If the deletion fails
        """
        try:
            self.s3.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to delete file: {str(e)}")

        logger.info(f"Deleted s3://{self.bucket_name}/{key}")

    def get_object_url(self, key: str) -> str:
        """
        Stable https URL of an object.

        The URL does not expire; reading through it still needs the bucket
        policy or a presigned URL.
        """
        region = self.s3.meta.region_name
        if not region or region == 'us-east-1':
            return f"https://{self.bucket_name}.s3.amazonaws.com/{key}"
        return f"https://{self.bucket_name}.s3.{region}.amazonaws.com/{key}"

    def get_presigned_url(
        self,
        key: str,
        expiration: int = DEFAULT_URL_EXPIRATION,
        content_type: Optional[str] = None
    ) -> str:
        """
        Presigned GET URL for an object.

        Args:
            key: Object key
            expiration: Lifetime in seconds
            content_type: When given, the object is served inline with this type

        Returns:
            Presigned URL

        Raises:
            StorageError: If signing fails
        """
        params = {'Bucket': self.bucket_name, 'Key': key}
        if content_type:
            params['ResponseContentType'] = content_type
            params['ResponseContentDisposition'] = 'inline'

        try:
            return self.s3.generate_presigned_url('get_object', Params=params, ExpiresIn=expiration)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error presigning s3://{self.bucket_name}/{key}: {e}")
            raise StorageError(f"Failed to generate presigned URL: {str(e)}")
