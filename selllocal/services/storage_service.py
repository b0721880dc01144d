"""
Object storage for product media, logos and banners.

Works against any S3-compatible endpoint (MinIO locally, AWS S3 or
DigitalOcean Spaces in production) through boto3. Objects are public-read and
referenced by their public URL.
"""
import json
import logging
import mimetypes
import os
import uuid
from typing import Optional

import boto3
from botocore.client import Config as BotoConfig
from botocore.exceptions import ClientError
from flask import current_app
from werkzeug.utils import secure_filename

logger = logging.getLogger(__name__)


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = get_storage_service()
        url = storage.upload_file(file_obj, 'products/12/photo.jpg', 'image/jpeg')
        storage.delete_url(url)
    """

    def __init__(self):
        self.endpoint = current_app.config['S3_ENDPOINT']
        self.bucket = current_app.config['S3_BUCKET']
        self.public_url = current_app.config['S3_PUBLIC_URL'].rstrip('/')

        self.client = boto3.client(
            's3',
            endpoint_url=self.endpoint,
            aws_access_key_id=current_app.config['S3_ACCESS_KEY'],
            aws_secret_access_key=current_app.config['S3_SECRET_KEY'],
            region_name=current_app.config['S3_REGION'],
            config=BotoConfig(signature_version='s3v4')
        )

        self._ensure_bucket_exists()

    def _ensure_bucket_exists(self):
        """Create the bucket with a public-read policy if it is missing."""
        try:
            self.client.head_bucket(Bucket=self.bucket)
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code')
            if error_code != '404':
                logger.error(f"[STORAGE] Failed to check bucket: {e}")
                raise
            self.client.create_bucket(Bucket=self.bucket)
            policy = {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": {"AWS": "*"},
                        "Action": "s3:GetObject",
                        "Resource": f"arn:aws:s3:::{self.bucket}/*"
                    }
                ]
            }
            self.client.put_bucket_policy(Bucket=self.bucket, Policy=json.dumps(policy))
            logger.info(f"[STORAGE] Bucket '{self.bucket}' created with public-read policy")

    def upload_file(self, file_obj, object_name: str, content_type: Optional[str] = None) -> str:
        """
        Upload a binary file object and return its public URL.

        Raises:
            ClientError: If upload fails
        """
        if not content_type:
            content_type = mimetypes.guess_type(object_name)[0] or 'application/octet-stream'

        try:
            file_obj.seek(0)
            logger.info(f"[STORAGE] Uploading '{object_name}' to bucket '{self.bucket}'")
            self.client.upload_fileobj(
                file_obj,
                self.bucket,
                object_name,
                ExtraArgs={'ContentType': content_type, 'ACL': 'public-read'}
            )
        except ClientError as e:
            logger.exception(f"[STORAGE] Upload failed: {e}")
            raise
        return self.get_public_url(object_name)

    def upload_path(self, path: str, object_name: str, content_type: Optional[str] = None) -> str:
        """Upload a file from disk."""
        with open(path, 'rb') as handle:
            return self.upload_file(handle, object_name, content_type)

    def delete_file(self, object_name: str) -> bool:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=object_name)
            logger.info(f"[STORAGE] File deleted: {object_name}")
            return True
        except ClientError as e:
            logger.exception(f"[STORAGE] Delete failed: {e}")
            return False

    def object_name_from_url(self, url: str) -> Optional[str]:
        """Object key for one of our public URLs, or None for foreign links."""
        marker = f"/{self.bucket}/"
        if not url or marker not in url:
            return None
        return url.split(marker, 1)[1]

    def delete_url(self, url: str) -> bool:
        object_name = self.object_name_from_url(url)
        if not object_name:
            return False
        return self.delete_file(object_name)

    def get_public_url(self, object_name: str) -> str:
        return f"{self.public_url}/{self.bucket}/{object_name}"

    def file_exists(self, object_name: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket, Key=object_name)
            return True
        except ClientError:
            return False


def build_object_name(folder: str, owner_id, filename: str) -> str:
    """e.g. 'products/12/5f0c..._photo.jpg'."""
    safe_name = secure_filename(filename or '') or 'file'
    return f"{folder}/{owner_id}/{uuid.uuid4().hex}_{safe_name}"


def file_extension(filename: str) -> str:
    return os.path.splitext(filename or '')[1].lower().lstrip('.')


_storage_service = None


def get_storage_service() -> StorageService:
    """Get or create StorageService singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
