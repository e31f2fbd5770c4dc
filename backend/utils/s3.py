import os
import uuid
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from api.errors import Forbidden, InternalError, InvalidInput, UpstreamUnavailable
from config.env import StorageConfig

logger = logging.getLogger(__name__)

IMAGE_CONTENT_TYPES = {
    'image/jpeg',
    'image/png',
    'image/gif',
    'image/webp',
}

DOCUMENT_CONTENT_TYPES = {
    'application/pdf',
    'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'text/plain',
}

IMAGE_PREFIX = "flashcard-images"
DOCUMENT_PREFIX = "documents"

class S3BlobStore:
    """Blob store for flashcard images and uploaded source documents."""

    def __init__(self, config: StorageConfig, client=None):
        self.config = config
        self.bucket_name = config.bucket_name
        self.max_upload_size = config.max_upload_size_mb * 1024 * 1024  # Convert MB to bytes
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client(
                's3',
                aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
                aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY'),
                region_name=self.config.region
            )
        return self._client

    def generate_key(self, prefix: str, user_id: str, filename: str) -> str:
        """Generate a unique key namespaced by upload kind and user."""
        extension = os.path.splitext(filename or "")[1].lower()
        return f"{prefix}/{user_id}/{uuid.uuid4()}{extension}"

    def public_url(self, key: str) -> str:
        return f"https://{self.bucket_name}.s3.{self.config.region}.amazonaws.com/{key}"

    def validate(self, data: bytes, content_type: str, allowed_types: set):
        if content_type not in allowed_types:
            raise InvalidInput("Invalid file type")
        if not data:
            raise InvalidInput("Uploaded file is empty")
        if len(data) > self.max_upload_size:
            raise InvalidInput(f"File exceeds the {self.config.max_upload_size_mb}MB limit")

    def put(self, data: bytes, content_type: str, key: str) -> str:
        """Store bytes under key and return their public URL."""
        if not self.bucket_name:
            raise UpstreamUnavailable("File storage is not configured")
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error uploading {key} to S3: {str(e)}")
            raise InternalError("Failed to upload file")
        return self.public_url(key)

    def delete(self, key: str, user_id: Optional[str] = None) -> None:
        """Delete a stored object; when user_id is given the key must sit under that user's folder."""
        if not self.bucket_name:
            raise UpstreamUnavailable("File storage is not configured")
        if user_id is not None:
            owner_segment = key.split('/')[1] if key.count('/') >= 2 else None
            if owner_segment != user_id:
                raise Forbidden("Cannot delete another user's file")
        try:
            self.client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error deleting {key} from S3: {str(e)}")
            raise InternalError("Failed to delete file")
