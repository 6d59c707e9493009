import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional

from django.db import DatabaseError
from django.utils import timezone

from .mapper import Product, product_to_row, product_to_update_row, row_to_product
from .models import ProductRecord


logger = logging.getLogger(__name__)


class ProductServiceError(Exception):
    pass


class ProductNotFound(ProductServiceError):
    pass


@dataclass
class CatalogueStats:
    total_products: int
    visible_products: int
    hidden_products: int
    total_images: int
    total_videos: int
    categories: int


def generate_product_id() -> str:
    return uuid.uuid4().hex[:12]


def matches_search(product: Product, query: str) -> bool:
    """Substring match on the name or an exact (case-insensitive) feature match."""
    needle = (query or "").strip().lower()
    if needle in product.name.lower():
        return True
    return any(needle == (feature or "").strip().lower() for feature in product.features)


def filter_products(products: Iterable[Product], category: str = "All", term: str = "") -> List[Product]:
    """In-memory catalogue filter behind the storefront and dashboard listings.

    Unlike :func:`matches_search`, features match on substring here so typing
    part of a feature narrows the list.
    """
    needle = (term or "").strip().lower()
    result = []
    for product in products:
        if category and category != "All" and product.category != category:
            continue
        if needle and needle not in product.name.lower() and not any(
            needle in (feature or "").lower() for feature in product.features
        ):
            continue
        result.append(product)
    return result


SORTS = {
    "newest": None,
    "price_asc": (lambda p: p.price, False),
    "price_desc": (lambda p: p.price, True),
    "name": (lambda p: p.name.lower(), False),
}


def sort_products(products: List[Product], sort: str = "newest") -> List[Product]:
    ordering = SORTS.get(sort)
    if ordering is None:
        return list(products)
    key, reverse = ordering
    return sorted(products, key=key, reverse=reverse)


class ProductService:
    """Read and write operations on the ``products`` table.

    Every store failure is re-raised as :class:`ProductServiceError` with an
    operation prefix. A missing product on read is ``None``, not an error.
    """

    def __init__(self, records=None, storage=None):
        self.records = records if records is not None else ProductRecord.objects
        self.storage = storage

    def _wrap(self, prefix: str, exc: Exception) -> ProductServiceError:
        logger.error("%s: %s", prefix, exc)
        return ProductServiceError(f"{prefix}: {exc}")

    def _fetch(self, prefix: str, **filters) -> List[Product]:
        try:
            rows = list(self.records.filter(**filters).order_by("-created_at").values())
        except DatabaseError as exc:
            raise self._wrap(prefix, exc) from exc
        return [row_to_product(row) for row in rows]

    def get_all_products(self) -> List[Product]:
        return self._fetch("Failed to fetch products")

    def get_visible_products(self) -> List[Product]:
        return self._fetch("Failed to fetch visible products", is_hidden=False)

    def get_featured_products(self) -> List[Product]:
        return self._fetch("Failed to fetch featured products", is_featured=True, is_hidden=False)

    def get_products_by_category(self, category: str) -> List[Product]:
        return self._fetch("Failed to fetch products by category", category=category)

    def get_visible_products_by_category(self, category: str) -> List[Product]:
        return self._fetch("Failed to fetch products by category", category=category, is_hidden=False)

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        try:
            row = self.records.filter(original_id=product_id).values().first()
        except DatabaseError as exc:
            raise self._wrap("Failed to fetch product", exc) from exc
        return row_to_product(row) if row else None

    def get_categories(self) -> List[str]:
        try:
            values = list(self.records.order_by("category").values_list("category", flat=True))
        except DatabaseError as exc:
            raise self._wrap("Failed to fetch categories", exc) from exc
        return list(dict.fromkeys(values))

    def search_products(self, query: str, visible_only: bool = False) -> List[Product]:
        products = (
            self._fetch("Failed to search products", is_hidden=False)
            if visible_only
            else self._fetch("Failed to search products")
        )
        return [product for product in products if matches_search(product, query)]

    def create_product(self, product: Product) -> Product:
        if not product.id:
            product.id = generate_product_id()
        row = product_to_row(product)
        try:
            record = self.records.create(**row)
        except DatabaseError as exc:
            raise self._wrap("Failed to create product", exc) from exc
        logger.info("Created product %s (%s)", record.original_id, record.name)
        return row_to_product(record.as_row())

    def update_product(self, product_id: str, updates: Mapping[str, Any]) -> Product:
        prefix = "Failed to update product"
        row = product_to_update_row(product_id, updates)
        row["updated_at"] = timezone.now()
        try:
            updated = self.records.filter(original_id=product_id).update(**row)
        except DatabaseError as exc:
            raise self._wrap(prefix, exc) from exc
        if not updated:
            raise ProductNotFound(f"{prefix}: no product with id {product_id}")
        product = self.get_product_by_id(product_id)
        if product is None:
            raise ProductNotFound(f"{prefix}: no product with id {product_id}")
        return product

    def delete_product(self, product_id: str) -> bool:
        try:
            row = self.records.filter(original_id=product_id).values("image_urls", "video_urls", "media_items").first()
            if row is None:
                return False
            self.records.filter(original_id=product_id).delete()
        except DatabaseError as exc:
            raise self._wrap("Failed to delete product", exc) from exc
        logger.info("Deleted product %s", product_id)
        if self.storage is not None:
            urls = list(row["image_urls"] or []) + list(row["video_urls"] or [])
            urls += [item.get("url") for item in row["media_items"] or [] if item.get("type") != "youtube"]
            self.storage.discard(dict.fromkeys(urls))
        return True

    def toggle_product_visibility(self, product_id: str) -> Product:
        # Read-then-write without a version check; the last write wins
        prefix = "Failed to toggle product visibility"
        try:
            current = self.records.filter(original_id=product_id).values_list("is_hidden", flat=True).first()
        except DatabaseError as exc:
            raise self._wrap(prefix, exc) from exc
        if current is None:
            raise ProductNotFound(f"{prefix}: no product with id {product_id}")
        try:
            self.records.filter(original_id=product_id).update(is_hidden=not current, updated_at=timezone.now())
        except DatabaseError as exc:
            raise self._wrap(prefix, exc) from exc
        return self.get_product_by_id(product_id)

    def bulk_toggle_visibility(self, product_ids: Iterable[str], is_hidden: bool) -> int:
        ids = [pid for pid in product_ids if pid]
        if not ids:
            return 0
        try:
            return self.records.filter(original_id__in=ids).update(is_hidden=is_hidden, updated_at=timezone.now())
        except DatabaseError as exc:
            raise self._wrap("Failed to update product visibility", exc) from exc

    def get_catalogue_stats(self) -> CatalogueStats:
        try:
            rows = list(self.records.values("image_urls", "video_urls", "media_items", "is_hidden", "category"))
        except DatabaseError as exc:
            raise self._wrap("Failed to fetch catalogue statistics", exc) from exc
        hidden = sum(1 for row in rows if row["is_hidden"])
        return CatalogueStats(
            total_products=len(rows),
            visible_products=len(rows) - hidden,
            hidden_products=hidden,
            total_images=sum(len(row["image_urls"] or []) for row in rows),
            total_videos=sum(len(row["video_urls"] or []) for row in rows),
            categories=len({row["category"] for row in rows}),
        )


def get_product_service() -> ProductService:
    from django.apps import apps

    return apps.get_app_config("catalog").product_service


def get_media_storage():
    from django.apps import apps

    return apps.get_app_config("catalog").media_storage
