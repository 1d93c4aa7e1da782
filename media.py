"""
Image uploads to the media store (Cloudinary).

``upload_all`` pushes every file of a request concurrently and returns the
public URLs in the order the files were submitted. The first failed upload
fails the whole batch.
"""

import io
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Protocol, Sequence

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

import config
from errors import UpstreamError

logger = logging.getLogger(__name__)


class MediaStore(Protocol):
    def upload(self, data: bytes, filename: str) -> str:
        """Store one file and return its public URL."""
        ...


class CloudinaryMediaStore:
    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True,
        )

    def upload(self, data: bytes, filename: str) -> str:
        try:
            result = cloudinary.uploader.upload(io.BytesIO(data), resource_type="auto")
        except CloudinaryError as e:
            raise UpstreamError(f"Upload of {filename} failed: {e}") from e
        return result["secure_url"]


def upload_all(store: MediaStore, files: Sequence[tuple], max_workers: int = config.UPLOAD_MAX_WORKERS) -> List[str]:
    """Upload ``(filename, data)`` pairs and return URLs in submission order."""
    if not files:
        return []
    workers = max(1, min(max_workers, len(files)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="upload") as pool:
        urls = list(pool.map(lambda item: store.upload(item[1], item[0]), files))
    logger.info("Uploaded %d image(s) to the media store", len(urls))
    return urls


_media_store = None


def get_media_store() -> MediaStore:
    global _media_store
    if _media_store is None:
        _media_store = CloudinaryMediaStore(
            config.CLOUDINARY_CLOUD_NAME,
            config.CLOUDINARY_API_KEY,
            config.CLOUDINARY_API_SECRET,
        )
    return _media_store
