import logging
import os
import random
import string
import time
from dataclasses import dataclass
from typing import Iterable, List, Optional
from urllib.parse import unquote, urlparse

from django.conf import settings
from django.core.files.storage import storages
from PIL import Image, UnidentifiedImageError


logger = logging.getLogger(__name__)

IMAGES_BUCKET = "product-images"
VIDEOS_BUCKET = "videos"

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif")
ALLOWED_VIDEO_TYPES = ("video/mp4", "video/webm", "video/ogg")


class MediaStorageError(Exception):
    pass


@dataclass
class UploadResult:
    url: str
    path: str


@dataclass
class FileValidation:
    valid: bool
    error: Optional[str] = None


def _random_suffix(length: int = 11) -> str:
    return "".join(random.choices(string.ascii_lowercase + string.digits, k=length))


def validate_image_file(upload) -> FileValidation:
    max_size = getattr(settings, "MAX_IMAGE_UPLOAD_SIZE", 5 * 1024 * 1024)
    if getattr(upload, "content_type", None) not in ALLOWED_IMAGE_TYPES:
        return FileValidation(False, "Invalid file type. Please upload JPEG, PNG, WebP, or GIF images.")
    if upload.size > max_size:
        return FileValidation(False, "File size too large. Please upload images smaller than 5MB.")
    try:
        Image.open(upload).verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        return FileValidation(False, "The uploaded file is not a readable image.")
    finally:
        upload.seek(0)
    return FileValidation(True)


def validate_video_file(upload) -> FileValidation:
    max_size = getattr(settings, "MAX_VIDEO_UPLOAD_SIZE", 50 * 1024 * 1024)
    if getattr(upload, "content_type", None) not in ALLOWED_VIDEO_TYPES:
        return FileValidation(False, "Invalid video type. Please upload MP4, WebM, or OGG videos.")
    if upload.size > max_size:
        return FileValidation(False, "Video file too large. Please upload videos smaller than 50MB.")
    return FileValidation(True)


class MediaStorage:
    """Upload/delete/public-URL access to the product image and video buckets."""

    def __init__(self, images=None, videos=None):
        self.images = images if images is not None else storages[IMAGES_BUCKET]
        self.videos = videos if videos is not None else storages[VIDEOS_BUCKET]

    def upload_image(self, upload, folder: str = "products") -> UploadResult:
        return self._upload(self.images, upload, folder, "image")

    def upload_video(self, upload, folder: str = "products") -> UploadResult:
        return self._upload(self.videos, upload, folder, "video")

    def delete_image(self, path_or_url: str) -> None:
        self._delete(self.images, path_or_url, "image")

    def delete_video(self, path_or_url: str) -> None:
        self._delete(self.videos, path_or_url, "video")

    def get_public_url(self, path: str, bucket: str = IMAGES_BUCKET) -> str:
        return self._bucket(bucket).url(path)

    def list_files(self, folder: str = "products", bucket: str = IMAGES_BUCKET) -> List[str]:
        _, files = self._bucket(bucket).listdir(folder)
        return sorted(files)

    def extract_path_from_url(self, url: str, bucket: str = IMAGES_BUCKET) -> Optional[str]:
        return self._path_in(self._bucket(bucket), url)

    def discard(self, urls: Iterable[str]) -> None:
        """Best-effort removal of stored files; failures are logged and ignored."""
        for url in urls:
            if not url:
                continue
            for storage, kind in ((self.images, "image"), (self.videos, "video")):
                path = self._path_in(storage, url)
                if path is None:
                    continue
                try:
                    storage.delete(path)
                except Exception:
                    logger.warning("Failed to delete %s %s from storage", kind, path, exc_info=True)
                break
            else:
                logger.debug("Skipping media outside our buckets: %s", url)

    def _bucket(self, name: str):
        if name == IMAGES_BUCKET:
            return self.images
        if name == VIDEOS_BUCKET:
            return self.videos
        raise MediaStorageError(f"Unknown bucket: {name}")

    def _upload(self, storage, upload, folder: str, kind: str) -> UploadResult:
        ext = os.path.splitext(upload.name or "")[1].lstrip(".").lower() or "bin"
        name = f"{folder}/{int(time.time() * 1000)}-{_random_suffix()}.{ext}"
        try:
            path = storage.save(name, upload)
        except Exception as exc:
            logger.exception("%s upload failed for %s", kind.capitalize(), name)
            raise MediaStorageError(f"Failed to upload {kind}: {exc}") from exc
        return UploadResult(url=storage.url(path), path=path)

    def _delete(self, storage, path_or_url: str, kind: str) -> None:
        path = self._path_in(storage, path_or_url)
        if path is None:
            path = path_or_url
        try:
            storage.delete(path)
        except Exception as exc:
            logger.error("%s delete failed for %s: %s", kind.capitalize(), path, exc)
            raise MediaStorageError(f"Failed to delete {kind}: {exc}") from exc

    @staticmethod
    def _path_in(storage, url: str) -> Optional[str]:
        if not url:
            return None
        prefix = urlparse(storage.url("")).path
        path = urlparse(url).path
        if not prefix or not path.startswith(prefix):
            return None
        return unquote(path[len(prefix):]) or None
