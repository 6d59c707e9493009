from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from django.db import DatabaseError
from django.utils import timezone

from catalog.media import IMAGE, VIDEO, YOUTUBE, EnhancedProductMedia, MediaItem, ProductMedia
from catalog.models import ProductRecord
from catalog.services import (
    ProductNotFound,
    ProductService,
    ProductServiceError,
    filter_products,
    matches_search,
    sort_products,
)

pytestmark = pytest.mark.django_db


def _age(product_id, days):
    ProductRecord.objects.filter(original_id=product_id).update(created_at=timezone.now() - timedelta(days=days))


def test_create_generates_id_and_round_trips(product_service, make_product):
    created = product_service.create_product(make_product())
    assert created.id
    assert created.uuid
    fetched = product_service.get_product_by_id(created.id)
    assert fetched.name == "Oraimo FreePods 4"
    assert fetched.price == Decimal("25000.00")
    assert fetched.image == "https://cdn.example.com/pods.jpg"
    assert fetched.features == ["ANC", "35h battery"]


def test_get_product_by_id_missing_is_none(product_service):
    assert product_service.get_product_by_id("nope") is None


def test_listing_is_newest_first_and_respects_visibility(product_service, make_product):
    product_service.create_product(make_product(id="old", name="Old"))
    product_service.create_product(make_product(id="new", name="New"))
    product_service.create_product(make_product(id="hidden", name="Hidden", is_hidden=True))
    _age("old", 3)
    _age("hidden", 1)

    assert [p.id for p in product_service.get_all_products()] == ["new", "hidden", "old"]
    assert [p.id for p in product_service.get_visible_products()] == ["new", "old"]


def test_featured_excludes_hidden(product_service, make_product):
    product_service.create_product(make_product(id="f1", is_featured=True))
    product_service.create_product(make_product(id="f2", is_featured=True, is_hidden=True))
    product_service.create_product(make_product(id="plain"))
    assert [p.id for p in product_service.get_featured_products()] == ["f1"]


def test_category_queries(product_service, make_product):
    product_service.create_product(make_product(id="a", category="Audio"))
    product_service.create_product(make_product(id="b", category="Audio", is_hidden=True))
    product_service.create_product(make_product(id="c", category="Phones"))
    assert {p.id for p in product_service.get_products_by_category("Audio")} == {"a", "b"}
    assert [p.id for p in product_service.get_visible_products_by_category("Audio")] == ["a"]
    assert product_service.get_products_by_category("Laptops") == []


def test_categories_are_distinct_and_sorted(product_service, make_product):
    for pid, category in [("1", "Phones"), ("2", "Audio"), ("3", "Phones"), ("4", "Wearables")]:
        product_service.create_product(make_product(id=pid, category=category))
    assert product_service.get_categories() == ["Audio", "Phones", "Wearables"]


def test_search_matches_name_substring_or_exact_feature(product_service, make_product):
    product_service.create_product(make_product(id="pods", name="Oraimo FreePods 4", features=["ANC"]))
    product_service.create_product(make_product(id="watch", name="Smart Watch", features=["Heart rate", "anc"]))
    product_service.create_product(make_product(id="phone", name="Tecno Spark", features=["ANC-ready mic"]))

    assert {p.id for p in product_service.search_products("freepods")} == {"pods"}
    # exact feature match is case-insensitive; partial feature text does not match
    assert {p.id for p in product_service.search_products("ANC")} == {"pods", "watch"}


def test_search_visible_only(product_service, make_product):
    product_service.create_product(make_product(id="a", name="Speaker"))
    product_service.create_product(make_product(id="b", name="Speaker Mini", is_hidden=True))
    assert {p.id for p in product_service.search_products("speaker")} == {"a", "b"}
    assert {p.id for p in product_service.search_products("speaker", visible_only=True)} == {"a"}


def test_update_only_changes_given_fields(product_service, make_product):
    created = product_service.create_product(make_product(id="pods"))
    updated = product_service.update_product("pods", {"price": Decimal("21000")})
    assert updated.price == Decimal("21000.00")
    assert updated.name == created.name
    assert updated.features == created.features
    assert updated.image == created.image


def test_update_replaces_media(product_service, make_product):
    product_service.create_product(make_product(id="pods"))
    media = EnhancedProductMedia(items=[
        MediaItem(id="m1", type=YOUTUBE, url="https://youtu.be/dQw4w9WgXcQ", order=0),
        MediaItem(id="m2", type=IMAGE, url="new.jpg", order=1),
    ])
    updated = product_service.update_product("pods", {"enhanced_media": media})
    assert [i.id for i in updated.media_items] == ["m1", "m2"]
    assert updated.image == "new.jpg"
    assert updated.media.images == ["new.jpg"]


def test_update_missing_product_raises(product_service):
    with pytest.raises(ProductNotFound) as excinfo:
        product_service.update_product("ghost", {"name": "x"})
    assert str(excinfo.value).startswith("Failed to update product")


def test_toggle_visibility(product_service, make_product):
    product_service.create_product(make_product(id="pods"))
    assert product_service.toggle_product_visibility("pods").is_hidden is True
    assert product_service.toggle_product_visibility("pods").is_hidden is False
    with pytest.raises(ProductNotFound):
        product_service.toggle_product_visibility("ghost")


def test_bulk_toggle_visibility(product_service, make_product):
    for pid in ("a", "b", "c"):
        product_service.create_product(make_product(id=pid))
    assert product_service.bulk_toggle_visibility(["a", "b", "ghost"], True) == 2
    assert [p.id for p in product_service.get_visible_products()] == ["c"]
    assert product_service.bulk_toggle_visibility([], True) == 0


def test_delete_removes_row_and_stored_media(product_service, media_storage, make_product, png_upload):
    uploaded = media_storage.upload_image(png_upload())
    product_service.create_product(make_product(id="pods", media=ProductMedia(images=[uploaded.url])))
    assert media_storage.images.exists(uploaded.path)

    assert product_service.delete_product("pods") is True
    assert product_service.get_product_by_id("pods") is None
    assert not media_storage.images.exists(uploaded.path)
    assert product_service.delete_product("pods") is False


def test_catalogue_stats(product_service, make_product):
    product_service.create_product(make_product(id="a", media=ProductMedia(images=["1.jpg", "2.jpg"], videos=["v.mp4"])))
    product_service.create_product(make_product(id="b", category="Phones", is_hidden=True))
    stats = product_service.get_catalogue_stats()
    assert stats.total_products == 2
    assert stats.visible_products == 1
    assert stats.hidden_products == 1
    assert stats.total_images == 3
    assert stats.total_videos == 1
    assert stats.categories == 2


def test_store_failures_are_wrapped_with_operation_prefix():
    records = MagicMock()
    records.filter.side_effect = DatabaseError("connection refused")
    service = ProductService(records=records)
    with pytest.raises(ProductServiceError) as excinfo:
        service.get_visible_products()
    assert str(excinfo.value) == "Failed to fetch visible products: connection refused"
    assert isinstance(excinfo.value.__cause__, DatabaseError)


def test_create_failure_is_wrapped(make_product):
    records = MagicMock()
    records.create.side_effect = DatabaseError("duplicate key")
    service = ProductService(records=records)
    with pytest.raises(ProductServiceError, match="^Failed to create product: duplicate key$"):
        service.create_product(make_product())


def test_filter_and_sort_helpers(make_product):
    products = [
        make_product(id="1", name="Speaker", category="Audio", price=Decimal("300"), features=["Bass boost"]),
        make_product(id="2", name="Phone", category="Phones", price=Decimal("100"), features=["Dual SIM"]),
        make_product(id="3", name="Earbuds", category="Audio", price=Decimal("200"), features=["bass"]),
    ]
    assert [p.id for p in filter_products(products, "Audio")] == ["1", "3"]
    assert [p.id for p in filter_products(products, "All", "bass")] == ["1", "3"]
    assert [p.id for p in sort_products(products, "price_asc")] == ["2", "3", "1"]
    assert [p.id for p in sort_products(products, "name")] == ["3", "2", "1"]
    assert [p.id for p in sort_products(products, "unknown")] == ["1", "2", "3"]
    assert matches_search(products[1], "dual sim")
    assert not matches_search(products[1], "dual")
