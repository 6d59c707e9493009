"""Translation between ``products`` rows and the in-app :class:`Product`."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from .media import (
    EnhancedProductMedia,
    MediaItem,
    ProductMedia,
    enhanced_to_legacy,
    get_all_media_in_order,
    legacy_to_enhanced,
    primary_image,
    sort_items,
)

# Product attribute -> storage column, for the plain (non-media) fields
_SIMPLE_FIELDS = {
    "name": "name",
    "price": "price",
    "original_price": "original_price",
    "features": "features",
    "description": "description",
    "whatsapp_link": "whatsapp_link",
    "category": "category",
    "is_new": "is_new",
    "is_featured": "is_featured",
    "is_hidden": "is_hidden",
}
_MEDIA_FIELDS = ("media", "enhanced_media", "image")
_MEDIA_COLUMNS = ("image_url", "image_urls", "video_urls", "media_items")


@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    category: str
    whatsapp_link: str = ""
    features: List[str] = field(default_factory=list)
    original_price: Optional[Decimal] = None
    # First image URL; always derived from the media, never set independently
    image: str = ""
    media: Optional[ProductMedia] = None
    enhanced_media: Optional[EnhancedProductMedia] = None
    description: Optional[str] = None
    is_new: bool = False
    is_featured: bool = False
    is_hidden: bool = False
    # Read-only storage metadata
    uuid: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def media_items(self) -> List[MediaItem]:
        return get_all_media_in_order(self)

    @property
    def discount_percent(self) -> int:
        if not self.original_price or self.original_price <= self.price:
            return 0
        return int(round((self.original_price - self.price) * 100 / self.original_price))


def row_to_product(row: Mapping[str, Any]) -> Product:
    image_urls = row.get("image_urls") or []
    if image_urls:
        images = list(image_urls)
    elif row.get("image_url"):
        images = [row["image_url"]]
    else:
        images = []
    media = ProductMedia(images=images, videos=list(row.get("video_urls") or []))

    stored_items = row.get("media_items") or []
    if stored_items:
        items = sort_items([MediaItem.from_dict(data) for data in stored_items])
        derived = enhanced_to_legacy(EnhancedProductMedia(items=items))
        enhanced = EnhancedProductMedia(items=items, images=derived.images, videos=derived.videos)
    else:
        enhanced = legacy_to_enhanced(media)

    row_id = row.get("id")
    return Product(
        id=row.get("original_id") or str(row_id),
        name=row.get("name", ""),
        price=row.get("price"),
        original_price=row.get("original_price") or None,
        image=primary_image(enhanced.items, media),
        media=media,
        enhanced_media=enhanced,
        features=list(row.get("features") or []),
        description=row.get("description") or None,
        whatsapp_link=row.get("whatsapp_link") or "",
        category=row.get("category", ""),
        is_new=bool(row.get("is_new")),
        is_featured=bool(row.get("is_featured")),
        is_hidden=bool(row.get("is_hidden")),
        uuid=str(row_id) if row_id is not None else None,
        created_at=row.get("created_at"),
    )


def _media_columns(media: Optional[ProductMedia], enhanced: Optional[EnhancedProductMedia], image: str) -> Dict[str, Any]:
    if enhanced is not None and enhanced.items:
        legacy = enhanced_to_legacy(enhanced)
        images, videos = legacy.images, legacy.videos
        # Stored verbatim so ids and order survive a round trip exactly
        media_items = [item.to_dict() for item in enhanced.items]
    else:
        media_items = []
        if media is not None and media.images:
            images = list(media.images)
        else:
            images = [image] if image else []
        videos = list(media.videos) if media is not None else []
    return {
        "image_url": images[0] if images else None,
        "image_urls": images,
        "video_urls": videos,
        "media_items": media_items,
    }


def product_to_row(product: Product) -> Dict[str, Any]:
    row = {
        "original_id": product.id or None,
        "name": product.name,
        "price": product.price,
        "original_price": product.original_price or None,
        "features": list(product.features),
        "description": product.description or None,
        "whatsapp_link": product.whatsapp_link,
        "category": product.category,
        "is_new": bool(product.is_new),
        "is_featured": bool(product.is_featured),
        "is_hidden": bool(product.is_hidden),
    }
    row.update(_media_columns(product.media, product.enhanced_media, product.image))
    return row


def product_to_update_row(product_id: str, updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Map a partial update; fields absent from ``updates`` are left out."""
    row: Dict[str, Any] = {"original_id": product_id}
    for attr, column in _SIMPLE_FIELDS.items():
        if attr in updates:
            row[column] = updates[attr]
    if "features" in row:
        row["features"] = list(row["features"] or [])
    if "original_price" in row:
        row["original_price"] = row["original_price"] or None
    if any(attr in updates for attr in _MEDIA_FIELDS):
        row.update(
            _media_columns(
                updates.get("media"),
                updates.get("enhanced_media"),
                updates.get("image") or "",
            )
        )
    # The business key is never part of an update payload
    del row["original_id"]
    return row
