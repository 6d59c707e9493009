import logging

from django.conf import settings


logger = logging.getLogger(__name__)


def store_context(request):
    # categories for the nav menu
    from catalog.services import ProductServiceError, get_product_service  # local import to avoid early app load
    try:
        all_categories = get_product_service().get_categories()
    except ProductServiceError:
        logger.warning("Could not load categories for navigation")
        all_categories = []

    path = getattr(request, "path", "") or ""
    return {
        "STORE_NAME": getattr(settings, "STORE_NAME", "Store"),
        "CURRENCY_SYMBOL": getattr(settings, "CURRENCY_SYMBOL", "₦"),
        "BRAND_TAGLINE": getattr(settings, "BRAND_TAGLINE", ""),
        "BRAND_LOGO": getattr(settings, "BRAND_LOGO", "img/logo.svg"),
        "STORE_WHATSAPP_NUMBER": getattr(settings, "STORE_WHATSAPP_NUMBER", ""),
        "POPUP_DELAY_MS": getattr(settings, "POPUP_DELAY_MS", 2000),
        # the lead popup only runs on storefront pages
        "SHOW_POPUP": not path.startswith(("/dashboard", "/admin")),
        "ALL_CATEGORIES": all_categories,
    }
