"""Shared fixtures for the storefront tests."""
import io
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest
from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from catalog.mapper import Product
from catalog.media import ProductMedia
from catalog.services import ProductService
from catalog.storage import MediaStorage
from visitors.tracking import ClientInfo, InMemoryVisitorStore, VisitorTracker

IPHONE_UA = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 3, 1, 12, 0, tzinfo=dt_timezone.utc)

    def __call__(self):
        return self.current

    def advance(self, delta):
        self.current = self.current + delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def visitor_store():
    return InMemoryVisitorStore()


@pytest.fixture
def client_info():
    return ClientInfo(
        user_agent=IPHONE_UA,
        language="en-NG",
        url="https://muahib.com/products/?utm_source=instagram&utm_medium=social&utm_campaign=launch",
        path="/products/",
        referrer="https://instagram.com/",
        title="All products",
        query={"utm_source": "instagram", "utm_medium": "social", "utm_campaign": "launch"},
        screen_width=390,
        screen_height=844,
        timezone_offset=-60,
        timezone="Africa/Lagos",
        ip_address="102.89.1.10",
    )


@pytest.fixture
def tracker(visitor_store, client_info, clock):
    return VisitorTracker(visitor_store, client_info, now=clock, cooldown_days=30)


@pytest.fixture
def media_storage(tmp_path):
    images = FileSystemStorage(location=tmp_path / "product-images", base_url="/media/product-images/")
    videos = FileSystemStorage(location=tmp_path / "videos", base_url="/media/videos/")
    return MediaStorage(images=images, videos=videos)


@pytest.fixture
def product_service(media_storage):
    return ProductService(storage=media_storage)


@pytest.fixture
def make_product():
    def _make(**overrides):
        data = {
            "id": "",
            "name": "Oraimo FreePods 4",
            "price": Decimal("25000.00"),
            "original_price": Decimal("32000.00"),
            "category": "Audio",
            "features": ["ANC", "35h battery"],
            "whatsapp_link": "https://wa.me/2348012345678",
            "media": ProductMedia(images=["https://cdn.example.com/pods.jpg"], videos=[]),
        }
        data.update(overrides)
        return Product(**data)

    return _make


@pytest.fixture
def png_upload():
    def _make(name="photo.png", content_type="image/png"):
        buf = io.BytesIO()
        Image.new("RGB", (4, 4), color=(200, 10, 10)).save(buf, format="PNG")
        return SimpleUploadedFile(name, buf.getvalue(), content_type=content_type)

    return _make
