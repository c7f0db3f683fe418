import asyncio
import logging
import os
import re
import uuid
from dataclasses import dataclass
from urllib.parse import urlparse

import cloudinary.uploader
from fastapi import UploadFile

from vidtube.config import Settings

logger = logging.getLogger(__name__)

_VERSION_SEGMENT = re.compile(r"^v\d+$")


class MediaStorageError(Exception):
    """Raised when the media host rejects an upload or delete."""


@dataclass
class MediaAsset:
    url: str
    public_id: str
    resource_type: str
    duration: float | None = None


def public_id_from_url(url: str | None) -> str | None:
    """
    Recover the Cloudinary public id from a delivery URL:
    https://res.cloudinary.com/<cloud>/video/upload/v1712/folder/abc.mp4 -> folder/abc
    """
    if not url:
        return None
    path = urlparse(url).path
    if "/upload/" in path:
        segments = [s for s in path.split("/upload/", 1)[1].split("/") if s]
        if segments and _VERSION_SEGMENT.match(segments[0]):
            segments = segments[1:]
    else:
        segments = [s for s in path.split("/") if s][-1:]
    if not segments:
        return None
    segments[-1] = os.path.splitext(segments[-1])[0]
    return "/".join(segments) or None


class MediaStorage:
    """Uploads and deletes binary assets on Cloudinary."""

    def __init__(self, settings: Settings):
        self.upload_dir = settings.upload_dir
        self._credentials = {
            "cloud_name": settings.cloudinary_cloud_name,
            "api_key": settings.cloudinary_api_key,
            "api_secret": settings.cloudinary_api_secret,
        }

    async def save_upload(self, file: UploadFile) -> str:
        """Write a multipart file to the temp directory and return its path."""
        os.makedirs(self.upload_dir, exist_ok=True)
        suffix = os.path.splitext(file.filename or "")[1]
        path = os.path.join(self.upload_dir, f"{uuid.uuid4().hex}{suffix}")
        contents = await file.read()
        with open(path, "wb") as f:
            f.write(contents)
        return path

    async def upload(self, local_path: str, resource_type: str = "auto") -> MediaAsset:
        """Upload a local file; the local copy is removed whether or not the upload succeeds."""
        loop = asyncio.get_event_loop()

        def _upload():
            return cloudinary.uploader.upload(
                local_path, resource_type=resource_type, **self._credentials
            )

        try:
            result = await loop.run_in_executor(None, _upload)
        except Exception as e:
            logger.error(f"Error uploading {local_path} to Cloudinary: {e}")
            raise MediaStorageError(f"Upload failed: {e}") from e
        finally:
            cleanup_file(local_path)

        url = result.get("secure_url") or result.get("url")
        if not url:
            raise MediaStorageError("Upload response did not contain a URL")
        logger.info(f"Uploaded asset {result.get('public_id')} ({result.get('resource_type')})")
        return MediaAsset(
            url=url,
            public_id=result.get("public_id") or public_id_from_url(url),
            resource_type=result.get("resource_type", resource_type),
            duration=result.get("duration"),
        )

    async def upload_file(self, file: UploadFile, resource_type: str = "auto") -> MediaAsset:
        path = await self.save_upload(file)
        return await self.upload(path, resource_type=resource_type)

    async def destroy(self, public_id: str, resource_type: str = "image") -> None:
        loop = asyncio.get_event_loop()

        def _destroy():
            return cloudinary.uploader.destroy(
                public_id, resource_type=resource_type, **self._credentials
            )

        try:
            result = await loop.run_in_executor(None, _destroy)
        except Exception as e:
            logger.error(f"Error deleting {resource_type} {public_id} from Cloudinary: {e}")
            raise MediaStorageError(f"Delete failed: {e}") from e
        logger.info(f"Destroyed {resource_type} {public_id}: {result.get('result')}")

    async def destroy_url(self, url: str | None, resource_type: str = "image") -> None:
        public_id = public_id_from_url(url)
        if public_id:
            await self.destroy(public_id, resource_type=resource_type)


def cleanup_file(filepath: str):
    try:
        if os.path.exists(filepath):
            os.remove(filepath)
            logger.debug(f"Cleaned up temporary file: {filepath}")
    except OSError as e:
        logger.error(f"Failed to clean up file {filepath}: {e}")
