"""Product media model.

A product's media exists in two shapes: the legacy fixed shape (a few image
URLs plus a list of video URLs) and the enhanced shape (an unlimited list of
explicitly ordered image/video/YouTube items). Everything that renders media
goes through :func:`normalize_media` / :func:`get_all_media_in_order` so the
fallback from enhanced to legacy lives in exactly one place.
"""
from __future__ import annotations

import random
import re
import string
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

IMAGE = "image"
VIDEO = "video"
YOUTUBE = "youtube"
MEDIA_TYPES = (IMAGE, VIDEO, YOUTUBE)

YOUTUBE_THUMBNAIL_URL = "https://img.youtube.com/vi/{id}/maxresdefault.jpg"
YOUTUBE_EMBED_URL = "https://www.youtube.com/embed/{id}"

_YOUTUBE_URL_RE = re.compile(
    r"^(https?://)?(www\.)?(youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})"
)
_YOUTUBE_ID_RE = re.compile(
    r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})"
)
_BASE36 = string.digits + string.ascii_lowercase


@dataclass
class MediaItem:
    id: str
    type: str
    url: str
    order: int
    title: Optional[str] = None
    thumbnail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        # Optional keys are left out rather than stored as null
        for key in ("title", "thumbnail"):
            if data[key] is None:
                data.pop(key)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MediaItem":
        return cls(
            id=data.get("id") or generate_media_id(),
            type=data.get("type", IMAGE),
            url=data.get("url", ""),
            order=int(data.get("order") or 0),
            title=data.get("title"),
            thumbnail=data.get("thumbnail"),
        )


@dataclass
class ProductMedia:
    """Legacy media: flat image and video URL lists."""

    images: List[str] = field(default_factory=list)
    videos: List[str] = field(default_factory=list)


@dataclass
class EnhancedProductMedia:
    """Ordered media items; ``images``/``videos`` are derived views."""

    items: List[MediaItem] = field(default_factory=list)
    images: Optional[List[str]] = None
    videos: Optional[List[str]] = None


@dataclass
class LegacyMedia:
    media: ProductMedia


@dataclass
class EnhancedMedia:
    media: EnhancedProductMedia


MediaShape = Union[LegacyMedia, EnhancedMedia]


def _base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_media_id() -> str:
    """Time plus random component; unique enough for one product's media list."""
    suffix = _base36(random.getrandbits(52))
    return f"media_{int(time.time() * 1000)}_{suffix}"


def sort_items(items: List[MediaItem]) -> List[MediaItem]:
    # sorted() is stable, ties keep their list position
    return sorted(items, key=lambda item: item.order)


def legacy_to_enhanced(media: Optional[ProductMedia]) -> EnhancedProductMedia:
    items: List[MediaItem] = []
    order = 0
    images = list(media.images) if media and media.images else []
    videos = list(media.videos) if media and media.videos else []
    for url in images:
        items.append(MediaItem(id=generate_media_id(), type=IMAGE, url=url, order=order))
        order += 1
    for url in videos:
        items.append(MediaItem(id=generate_media_id(), type=VIDEO, url=url, order=order))
        order += 1
    return EnhancedProductMedia(items=sort_items(items), images=images, videos=videos)


def enhanced_to_legacy(media: Optional[EnhancedProductMedia]) -> ProductMedia:
    if media is None:
        return ProductMedia()
    ordered = sort_items(media.items)
    return ProductMedia(
        images=[item.url for item in ordered if item.type == IMAGE],
        videos=[item.url for item in ordered if item.type == VIDEO],
    )


def normalize_media(shape: Optional[MediaShape]) -> List[MediaItem]:
    """Canonical ordered item list for either media shape."""
    if isinstance(shape, EnhancedMedia) and shape.media.items:
        return sort_items(shape.media.items)
    if isinstance(shape, LegacyMedia):
        return legacy_to_enhanced(shape.media).items
    return []


def media_shape(product) -> Optional[MediaShape]:
    enhanced = getattr(product, "enhanced_media", None)
    if enhanced is not None and enhanced.items:
        return EnhancedMedia(enhanced)
    legacy = getattr(product, "media", None)
    return LegacyMedia(legacy) if legacy is not None else None


def get_all_media_in_order(product) -> List[MediaItem]:
    shape = media_shape(product)
    if shape is None:
        return legacy_to_enhanced(None).items
    return normalize_media(shape)


def primary_image(items: List[MediaItem], legacy: Optional[ProductMedia] = None) -> str:
    """First image-typed item in display order, else the first legacy image."""
    for item in sort_items(items):
        if item.type == IMAGE:
            return item.url
    if legacy is not None and legacy.images:
        return legacy.images[0]
    return ""


def is_valid_youtube_url(url) -> bool:
    if not isinstance(url, str):
        return False
    return _YOUTUBE_URL_RE.search(url) is not None


def get_youtube_video_id(url) -> Optional[str]:
    if not isinstance(url, str):
        return None
    match = _YOUTUBE_ID_RE.search(url)
    return match.group(1) if match else None


def get_youtube_thumbnail(url) -> str:
    video_id = get_youtube_video_id(url)
    return YOUTUBE_THUMBNAIL_URL.format(id=video_id) if video_id else ""


def get_youtube_embed_url(url) -> str:
    video_id = get_youtube_video_id(url)
    return YOUTUBE_EMBED_URL.format(id=video_id) if video_id else ""


def make_youtube_item(url: str, order: int, title: Optional[str] = None) -> MediaItem:
    if not is_valid_youtube_url(url):
        raise ValueError(f"Not a YouTube link: {url}")
    return MediaItem(
        id=generate_media_id(),
        type=YOUTUBE,
        url=url,
        order=order,
        title=title,
        thumbnail=get_youtube_thumbnail(url),
    )
