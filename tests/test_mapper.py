from decimal import Decimal

from catalog.mapper import Product, product_to_row, product_to_update_row, row_to_product
from catalog.media import IMAGE, VIDEO, YOUTUBE, EnhancedProductMedia, MediaItem, ProductMedia


def _row(**overrides):
    row = {
        "id": "2f1c7c9e-0000-4000-8000-000000000001",
        "original_id": "pods-4",
        "name": "Oraimo FreePods 4",
        "price": Decimal("25000.00"),
        "original_price": None,
        "image_url": "https://cdn.example.com/pods.jpg",
        "image_urls": [],
        "video_urls": [],
        "media_items": [],
        "features": ["ANC"],
        "description": None,
        "whatsapp_link": "https://wa.me/2348012345678",
        "category": "Audio",
        "is_new": True,
        "is_featured": False,
        "is_hidden": False,
        "created_at": None,
    }
    row.update(overrides)
    return row


def test_row_with_single_legacy_image():
    product = row_to_product(_row())
    assert product.id == "pods-4"
    assert product.uuid == "2f1c7c9e-0000-4000-8000-000000000001"
    assert product.media.images == ["https://cdn.example.com/pods.jpg"]
    assert product.image == "https://cdn.example.com/pods.jpg"
    assert [i.type for i in product.enhanced_media.items] == [IMAGE]


def test_row_prefers_image_list_over_single_image():
    product = row_to_product(_row(image_urls=["a.jpg", "b.jpg"], video_urls=["v.mp4"]))
    assert product.media.images == ["a.jpg", "b.jpg"]
    assert product.media.videos == ["v.mp4"]
    assert [i.url for i in product.media_items] == ["a.jpg", "b.jpg", "v.mp4"]


def test_row_with_stored_items_keeps_their_order_and_ids():
    stored = [
        {"id": "m2", "type": "image", "url": "b.jpg", "order": 1},
        {"id": "m1", "type": "youtube", "url": "https://youtu.be/dQw4w9WgXcQ", "order": 0},
        {"id": "m3", "type": "video", "url": "v.mp4", "order": 2},
    ]
    product = row_to_product(_row(media_items=stored, image_urls=["b.jpg"], video_urls=["v.mp4"]))
    assert [i.id for i in product.enhanced_media.items] == ["m1", "m2", "m3"]
    assert product.enhanced_media.images == ["b.jpg"]
    assert product.enhanced_media.videos == ["v.mp4"]
    # the YouTube item is first, so the primary image is the first image item
    assert product.image == "b.jpg"


def test_row_without_id_falls_back_to_uuid():
    product = row_to_product(_row(original_id=None))
    assert product.id == "2f1c7c9e-0000-4000-8000-000000000001"


def test_row_without_media():
    product = row_to_product(_row(image_url=None))
    assert product.image == ""
    assert product.media_items == []


def test_product_to_row_with_enhanced_media():
    items = [
        MediaItem(id="m1", type=IMAGE, url="a.jpg", order=0),
        MediaItem(id="m2", type=YOUTUBE, url="https://youtu.be/dQw4w9WgXcQ", order=1, thumbnail="t.jpg"),
        MediaItem(id="m3", type=VIDEO, url="v.mp4", order=2),
    ]
    product = Product(
        id="pods-4",
        name="Pods",
        price=Decimal("10"),
        category="Audio",
        enhanced_media=EnhancedProductMedia(items=items),
    )
    row = product_to_row(product)
    assert row["original_id"] == "pods-4"
    assert row["image_url"] == "a.jpg"
    assert row["image_urls"] == ["a.jpg"]
    assert row["video_urls"] == ["v.mp4"]
    assert row["media_items"][1] == {
        "id": "m2",
        "type": "youtube",
        "url": "https://youtu.be/dQw4w9WgXcQ",
        "order": 1,
        "thumbnail": "t.jpg",
    }


def test_product_to_row_legacy_only():
    product = Product(
        id="x", name="X", price=Decimal("1"), category="C", media=ProductMedia(images=["a.jpg"], videos=["v.mp4"])
    )
    row = product_to_row(product)
    assert row["image_urls"] == ["a.jpg"]
    assert row["video_urls"] == ["v.mp4"]
    assert row["media_items"] == []


def test_product_to_row_falls_back_to_image_field():
    product = Product(id="x", name="X", price=Decimal("1"), category="C", image="only.jpg")
    row = product_to_row(product)
    assert row["image_url"] == "only.jpg"
    assert row["image_urls"] == ["only.jpg"]


def test_update_row_contains_only_given_fields():
    row = product_to_update_row("pods-4", {"price": Decimal("20000"), "is_hidden": True})
    assert row == {"price": Decimal("20000"), "is_hidden": True}


def test_update_row_never_contains_business_key():
    row = product_to_update_row("pods-4", {"name": "New name"})
    assert "original_id" not in row
    assert row == {"name": "New name"}


def test_update_row_recomputes_media_columns():
    media = EnhancedProductMedia(items=[MediaItem(id="m1", type=IMAGE, url="a.jpg", order=0)])
    row = product_to_update_row("pods-4", {"enhanced_media": media})
    assert row["image_url"] == "a.jpg"
    assert row["image_urls"] == ["a.jpg"]
    assert row["video_urls"] == []
    assert row["media_items"] == [{"id": "m1", "type": "image", "url": "a.jpg", "order": 0}]
