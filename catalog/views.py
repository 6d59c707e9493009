import logging

from django.http import Http404
from django.shortcuts import render

from .media import get_youtube_embed_url
from .services import ProductServiceError, filter_products, get_product_service, sort_products
from .whatsapp import product_order_link


logger = logging.getLogger(__name__)


def _error_page(request, exc):
    logger.warning("Catalogue page failed to load: %s", exc)
    return render(request, "catalog/error.html", {"error": str(exc)}, status=503)


def home(request):
    service = get_product_service()
    try:
        featured = service.get_featured_products()[:3]
        latest = service.get_visible_products()[:12]
        categories = service.get_categories()
    except ProductServiceError as exc:
        return _error_page(request, exc)
    return render(
        request,
        "catalog/home.html",
        {"featured": featured, "products": latest, "categories": categories},
    )


def product_list(request):
    service = get_product_service()
    q = request.GET.get("q", "").strip()
    selected_category = request.GET.get("category", "All") or "All"
    selected_sort = request.GET.get("sort", "newest")
    try:
        products = service.get_visible_products()
        categories = ["All"] + service.get_categories()
    except ProductServiceError as exc:
        return _error_page(request, exc)
    filtered = sort_products(filter_products(products, selected_category, q), selected_sort)
    return render(
        request,
        "catalog/product_list.html",
        {
            "products": filtered,
            "total_count": len(products),
            "categories": categories,
            "selected_category": selected_category,
            "selected_sort": selected_sort,
            "q": q,
        },
    )


def category_detail(request, category):
    service = get_product_service()
    try:
        products = service.get_visible_products_by_category(category)
    except ProductServiceError as exc:
        return _error_page(request, exc)
    return render(request, "catalog/category_detail.html", {"category": category, "products": products})


def product_detail(request, product_id):
    service = get_product_service()
    try:
        product = service.get_product_by_id(product_id)
        if product is None or product.is_hidden:
            raise Http404("Product not found")
        related = [
            p for p in service.get_visible_products_by_category(product.category) if p.id != product.id
        ][:4]
    except ProductServiceError as exc:
        return _error_page(request, exc)

    media = []
    for item in product.media_items:
        media.append({"item": item, "embed_url": get_youtube_embed_url(item.url) if item.type == "youtube" else ""})
    return render(
        request,
        "catalog/product_detail.html",
        {
            "product": product,
            "media": media,
            "order_link": product_order_link(product),
            "related_products": related,
        },
    )
