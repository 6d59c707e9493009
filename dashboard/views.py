import logging

from django.contrib import messages
from django.contrib.admin.views.decorators import staff_member_required
from django.http import Http404, HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.template.loader import render_to_string
from django.utils import timezone
from django.views.decorators.http import require_POST

from catalog.mapper import Product
from catalog.media import YOUTUBE
from catalog.services import (
    ProductNotFound,
    ProductServiceError,
    filter_products,
    get_media_storage,
    get_product_service,
)
from catalog.storage import MediaStorageError
from visitors.services import DEFAULT_PAGE_SIZE, NumbersFilters, get_whatsapp_numbers_service

from .forms import ProductForm, WhatsAppNumbersFilterForm


logger = logging.getLogger(__name__)

TRUTHY = {"1", "true", "on", "yes"}


def _is_ajax(request):
    return request.headers.get("x-requested-with") == "XMLHttpRequest"


@staff_member_required(login_url="/admin/login/")
def index(request):
    catalogue = None
    try:
        catalogue = get_product_service().get_catalogue_stats()
    except ProductServiceError as exc:
        messages.error(request, str(exc))
    return render(request, "dashboard/index.html", {
        "catalogue": catalogue,
        "whatsapp": get_whatsapp_numbers_service().get_whatsapp_numbers_stats(),
    })


def _dashboard_products(request):
    q = request.GET.get("q", "").strip()
    products = get_product_service().get_all_products()
    return filter_products(products, "All", q), q


@staff_member_required(login_url="/admin/login/")
def products_list(request):
    try:
        products, q = _dashboard_products(request)
    except ProductServiceError as exc:
        messages.error(request, str(exc))
        products, q = [], request.GET.get("q", "").strip()
    return render(request, "dashboard/products_list.html", {"products": products, "q": q})


@staff_member_required(login_url="/admin/login/")
def products_partial(request):
    try:
        products, _ = _dashboard_products(request)
    except ProductServiceError as exc:
        return JsonResponse({"ok": False, "error": str(exc)}, status=503)
    rows_html = render_to_string("dashboard/_products_rows.html", {"products": products}, request=request)
    return JsonResponse({"rows_html": rows_html})


def _upload_files(form):
    """Store the form's uploaded files; returns (image_urls, video_urls)."""
    storage = get_media_storage()
    images, videos = [], []
    try:
        for upload in form.cleaned_data.get("images") or []:
            images.append(storage.upload_image(upload).url)
        for upload in form.cleaned_data.get("videos") or []:
            videos.append(storage.upload_video(upload).url)
    except MediaStorageError:
        storage.discard(images + videos)
        raise
    return images, videos


def _form_context(form, **extra):
    try:
        categories = get_product_service().get_categories()
    except ProductServiceError:
        logger.exception("Could not load categories for product form")
        categories = []
    context = {"form": form, "categories": categories}
    context.update(extra)
    return context


@staff_member_required(login_url="/admin/login/")
def create_product(request):
    if request.method == "POST":
        form = ProductForm(request.POST, request.FILES)
        if form.is_valid():
            try:
                images, videos = _upload_files(form)
            except MediaStorageError as exc:
                form.add_error(None, str(exc))
            else:
                product = Product(id="", enhanced_media=form.build_media(images, videos), **form.product_fields())
                try:
                    product = get_product_service().create_product(product)
                except ProductServiceError as exc:
                    get_media_storage().discard(images + videos)
                    form.add_error(None, str(exc))
                else:
                    messages.success(request, f"Product {product.name} created")
                    return redirect("dashboard_products")
    else:
        form = ProductForm()
    return render(request, "dashboard/product_form.html", _form_context(
        form, form_title="Add Product", submit_label="Create Product",
    ))


def _get_product_or_404(product_id):
    product = get_product_service().get_product_by_id(product_id)
    if product is None:
        raise Http404("Product not found")
    return product


@staff_member_required(login_url="/admin/login/")
def edit_product(request, product_id):
    try:
        product = _get_product_or_404(product_id)
    except ProductServiceError as exc:
        messages.error(request, str(exc))
        return redirect("dashboard_products")

    if request.method == "POST":
        form = ProductForm(request.POST, request.FILES, product=product)
        if form.is_valid():
            try:
                images, videos = _upload_files(form)
            except MediaStorageError as exc:
                form.add_error(None, str(exc))
            else:
                media = form.build_media(images, videos)
                updates = dict(form.product_fields(), enhanced_media=media)
                try:
                    get_product_service().update_product(product_id, updates)
                except ProductServiceError as exc:
                    get_media_storage().discard(images + videos)
                    form.add_error(None, str(exc))
                else:
                    kept = {item.url for item in media.items}
                    get_media_storage().discard(
                        item.url for item in product.media_items
                        if item.type != YOUTUBE and item.url not in kept
                    )
                    messages.success(request, "Product updated")
                    return redirect("dashboard_products")
    else:
        form = ProductForm(product=product)
    return render(request, "dashboard/product_form.html", _form_context(
        form, product=product, form_title="Edit Product", submit_label="Save Changes",
    ))


@staff_member_required(login_url="/admin/login/")
def delete_product(request, product_id):
    try:
        product = _get_product_or_404(product_id)
        if request.method == "POST":
            get_product_service().delete_product(product_id)
            messages.success(request, "Product deleted")
            return redirect("dashboard_products")
    except ProductServiceError as exc:
        messages.error(request, str(exc))
        return redirect("dashboard_products")
    return render(request, "dashboard/confirm_delete.html", {
        "object": product, "object_type": "Product", "cancel_url": "/dashboard/products/",
    })


@staff_member_required(login_url="/admin/login/")
@require_POST
def toggle_product_visibility(request, product_id):
    try:
        product = get_product_service().toggle_product_visibility(product_id)
    except ProductNotFound:
        if _is_ajax(request):
            return JsonResponse({"ok": False, "error": "not_found"}, status=404)
        raise Http404("Product not found")
    except ProductServiceError as exc:
        if _is_ajax(request):
            return JsonResponse({"ok": False, "error": str(exc)}, status=503)
        messages.error(request, str(exc))
        return redirect("dashboard_products")
    if _is_ajax(request):
        return JsonResponse({"ok": True, "is_hidden": product.is_hidden})
    messages.success(request, f"{product.name} is now {'hidden' if product.is_hidden else 'visible'}")
    return redirect("dashboard_products")


@staff_member_required(login_url="/admin/login/")
@require_POST
def bulk_visibility(request):
    ids = request.POST.getlist("ids")
    is_hidden = request.POST.get("hidden", "").lower() in TRUTHY
    try:
        count = get_product_service().bulk_toggle_visibility(ids, is_hidden)
    except ProductServiceError as exc:
        if _is_ajax(request):
            return JsonResponse({"ok": False, "error": str(exc)}, status=503)
        messages.error(request, str(exc))
        return redirect("dashboard_products")
    if _is_ajax(request):
        return JsonResponse({"ok": True, "updated": count, "is_hidden": is_hidden})
    messages.success(request, f"{count} product(s) {'hidden' if is_hidden else 'shown'}")
    return redirect("dashboard_products")


@staff_member_required(login_url="/admin/login/")
def whatsapp_numbers(request):
    filters = NumbersFilters.from_query(request.GET)
    try:
        page_number = max(1, int(request.GET.get("page", "1")))
    except ValueError:
        page_number = 1
    filters.limit = DEFAULT_PAGE_SIZE
    filters.offset = (page_number - 1) * DEFAULT_PAGE_SIZE
    service = get_whatsapp_numbers_service()
    page = service.get_whatsapp_numbers(filters)
    if page.error:
        messages.error(request, page.error)
    query = request.GET.copy()
    query.pop("page", None)
    return render(request, "dashboard/whatsapp_numbers.html", {
        "entries": page.data,
        "total": page.total,
        "page_number": page_number,
        "has_previous": page_number > 1,
        "has_next": filters.offset + len(page.data) < page.total,
        "filter_form": WhatsAppNumbersFilterForm(request.GET or None),
        "filter_query": query.urlencode(),
        "stats": service.get_whatsapp_numbers_stats(),
    })


@staff_member_required(login_url="/admin/login/")
def whatsapp_numbers_csv(request):
    filters = NumbersFilters.from_query(request.GET)
    filters.offset = None
    content = get_whatsapp_numbers_service().export_whatsapp_numbers(filters)
    resp = HttpResponse(content, content_type="text/csv")
    filename = f"whatsapp-numbers-{timezone.localdate().isoformat()}.csv"
    resp["Content-Disposition"] = f'attachment; filename="{filename}"'
    return resp


@staff_member_required(login_url="/admin/login/")
@require_POST
def delete_whatsapp_number(request, entry_id):
    result = get_whatsapp_numbers_service().delete_whatsapp_number(entry_id)
    if _is_ajax(request):
        status = 200 if result.success else 400
        return JsonResponse({"ok": result.success, "error": result.error}, status=status)
    if result.success:
        messages.success(request, "Entry deleted")
    else:
        messages.error(request, result.error)
    return redirect("dashboard_whatsapp_numbers")
