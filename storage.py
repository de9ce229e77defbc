# storage.py
"""
Object storage for assignment thumbnails.

Talks to an S3-compatible bucket through boto3. Each upload gets a random
download token stored in the object's metadata, and the returned URL embeds
the bucket, the URL-encoded object name and that token.

The token lives under the `firebaseStorageDownloadTokens` metadata key. Over
an S3-compatible endpoint custom metadata names may be lowercased, in which
case Firebase will not serve the object with that token.
"""
import logging
import uuid
from typing import Any, Optional
from urllib.parse import quote

import boto3
import botocore.session
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

CACHE_CONTROL = "public, max-age=31536000"
TOKEN_METADATA_KEY = "firebaseStorageDownloadTokens"


class UploadError(Exception):
    """Raised when the object store rejects or fails an upload."""


class ThumbnailStorage:
    def __init__(self, bucket: str, client: Any, public_base_url: str):
        self.bucket = bucket
        self._client = client
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings) -> Optional["ThumbnailStorage"]:
        if not settings.storage_bucket:
            logger.warning("STORAGE_BUCKET not set, thumbnail uploads are disabled")
            return None
        core = botocore.session.Session()
        if settings.storage_credentials_file:
            core.set_config_variable("credentials_file", settings.storage_credentials_file)
        session = boto3.session.Session(botocore_session=core)
        kw = {}
        if settings.storage_endpoint_url:
            kw["endpoint_url"] = settings.storage_endpoint_url
        if settings.storage_region:
            kw["region_name"] = settings.storage_region
        return cls(settings.storage_bucket, session.client("s3", **kw), settings.storage_public_base_url)

    def public_url(self, name: str, token: str) -> str:
        return (
            f"{self.public_base_url}/v0/b/{self.bucket}/o/{quote(name, safe='')}"
            f"?alt=media&token={token}"
        )

    async def upload(self, data: bytes, filename: str, content_type: Optional[str]) -> str:
        """Write the bytes under their original name and return the public URL.

        Objects with the same name overwrite each other.
        """
        token = str(uuid.uuid4())
        try:
            await run_in_threadpool(
                self._client.put_object,
                Bucket=self.bucket,
                Key=filename,
                Body=data,
                ContentType=content_type or "application/octet-stream",
                CacheControl=CACHE_CONTROL,
                Metadata={TOKEN_METADATA_KEY: token},
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Upload of {filename} to {self.bucket} failed: {str(e)}")
            raise UploadError(str(e)) from e
        logger.info(f"Uploaded {filename} ({len(data)} bytes) to {self.bucket}")
        return self.public_url(filename, token)

    def close(self):
        self._client.close()
