from django import forms

from catalog.media import (
    IMAGE,
    VIDEO,
    YOUTUBE,
    EnhancedProductMedia,
    MediaItem,
    generate_media_id,
    is_valid_youtube_url,
    make_youtube_item,
)
from catalog.storage import validate_image_file, validate_video_file
from visitors.models import WhatsAppNumber


class _BootstrapFormMixin:
    def _apply_bootstrap(self):
        for name, field in self.fields.items():
            widget = field.widget
            base = widget.attrs.get("class", "")
            if isinstance(widget, (forms.Select, forms.SelectMultiple)):
                widget.attrs["class"] = (base + " form-select").strip()
            elif isinstance(widget, (forms.CheckboxInput,)):
                widget.attrs["class"] = (base + " form-check-input").strip()
            else:
                widget.attrs["class"] = (base + " form-control").strip()
            # Placeholders for common fields
            if name in {"name", "category"}:
                widget.attrs.setdefault("placeholder", field.label)
            if name in {"price", "original_price"}:
                widget.attrs.setdefault("step", "0.01")
            if name in {"search"}:
                widget.attrs.setdefault("placeholder", "Number or page")


class MultipleFileInput(forms.ClearableFileInput):
    allow_multiple_selected = True


class MultipleFileField(forms.FileField):
    def __init__(self, *args, **kwargs):
        kwargs.setdefault("widget", MultipleFileInput())
        super().__init__(*args, **kwargs)

    def clean(self, data, initial=None):
        single_file_clean = super().clean
        if isinstance(data, (list, tuple)):
            return [single_file_clean(d, initial) for d in data if d]
        return [single_file_clean(data, initial)] if data else []


def _lines(value):
    return [line.strip() for line in (value or "").splitlines() if line.strip()]


class ProductForm(_BootstrapFormMixin, forms.Form):
    """Create/edit form for a catalogue product.

    Media is edited as plain lists: image URLs plus new image uploads, YouTube
    links, then video URLs plus new video uploads. The saved order follows
    that sequence.
    """

    name = forms.CharField(max_length=200, error_messages={"required": "Product name is required"})
    price = forms.DecimalField(
        max_digits=12, decimal_places=2, error_messages={"required": "Price must be greater than 0"}
    )
    original_price = forms.DecimalField(max_digits=12, decimal_places=2, required=False)
    category = forms.CharField(max_length=100, error_messages={"required": "Category is required"})
    features = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 4, "placeholder": "One feature per line"}),
        error_messages={"required": "At least one feature is required"},
    )
    description = forms.CharField(widget=forms.Textarea(attrs={"rows": 4}), required=False)
    whatsapp_link = forms.CharField(
        label="WhatsApp link", max_length=1000, error_messages={"required": "WhatsApp link is required"}
    )
    image_urls = forms.CharField(
        label="Image URLs",
        widget=forms.Textarea(attrs={"rows": 3, "placeholder": "One URL per line"}),
        required=False,
    )
    images = MultipleFileField(label="Upload images", required=False)
    youtube_links = forms.CharField(
        label="YouTube links",
        widget=forms.Textarea(attrs={"rows": 2, "placeholder": "https://www.youtube.com/watch?v=…"}),
        required=False,
    )
    video_urls = forms.CharField(
        label="Video URLs",
        widget=forms.Textarea(attrs={"rows": 2, "placeholder": "One URL per line"}),
        required=False,
    )
    videos = MultipleFileField(label="Upload videos", required=False)
    is_new = forms.BooleanField(label="New", required=False)
    is_featured = forms.BooleanField(label="Featured", required=False)
    is_hidden = forms.BooleanField(label="Hidden from storefront", required=False)

    def __init__(self, *args, product=None, **kwargs):
        self.product = product
        if product is not None and "initial" not in kwargs:
            kwargs["initial"] = self.initial_for(product)
        super().__init__(*args, **kwargs)
        self._apply_bootstrap()
        self.fields["category"].widget.attrs.setdefault("list", "categoryOptions")
        self.fields["images"].widget.attrs.setdefault("accept", "image/*")
        self.fields["videos"].widget.attrs.setdefault("accept", "video/*")

    @staticmethod
    def initial_for(product):
        items = product.media_items
        return {
            "name": product.name,
            "price": product.price,
            "original_price": product.original_price,
            "category": product.category,
            "features": "\n".join(product.features),
            "description": product.description or "",
            "whatsapp_link": product.whatsapp_link,
            "image_urls": "\n".join(item.url for item in items if item.type == IMAGE),
            "youtube_links": "\n".join(item.url for item in items if item.type == YOUTUBE),
            "video_urls": "\n".join(item.url for item in items if item.type == VIDEO),
            "is_new": product.is_new,
            "is_featured": product.is_featured,
            "is_hidden": product.is_hidden,
        }

    def clean_price(self):
        price = self.cleaned_data["price"]
        if price is None or price <= 0:
            raise forms.ValidationError("Price must be greater than 0")
        return price

    def clean_features(self):
        features = _lines(self.cleaned_data.get("features"))
        if not features:
            raise forms.ValidationError("At least one feature is required")
        return features

    def clean_image_urls(self):
        return _lines(self.cleaned_data.get("image_urls"))

    def clean_video_urls(self):
        return _lines(self.cleaned_data.get("video_urls"))

    def clean_youtube_links(self):
        links = _lines(self.cleaned_data.get("youtube_links"))
        invalid = [link for link in links if not is_valid_youtube_url(link)]
        if invalid:
            raise forms.ValidationError(f"Invalid YouTube URL: {invalid[0]}")
        return links

    def clean_images(self):
        files = self.cleaned_data.get("images") or []
        for upload in files:
            result = validate_image_file(upload)
            if not result.valid:
                raise forms.ValidationError(result.error)
        return files

    def clean_videos(self):
        files = self.cleaned_data.get("videos") or []
        for upload in files:
            result = validate_video_file(upload)
            if not result.valid:
                raise forms.ValidationError(result.error)
        return files

    def clean(self):
        cleaned = super().clean()
        price = cleaned.get("price")
        original = cleaned.get("original_price")
        if original is not None and price is not None and original <= price:
            self.add_error("original_price", "Original price must be greater than current price")
        if "image_urls" in cleaned and "images" in cleaned:
            if not cleaned["image_urls"] and not cleaned["images"]:
                self.add_error("image_urls", "At least one product image is required")
        return cleaned

    def product_fields(self):
        data = self.cleaned_data
        return {
            "name": data["name"].strip(),
            "price": data["price"],
            "original_price": data.get("original_price") or None,
            "category": data["category"].strip(),
            "features": data["features"],
            "description": (data.get("description") or "").strip() or None,
            "whatsapp_link": data["whatsapp_link"].strip(),
            "is_new": data.get("is_new", False),
            "is_featured": data.get("is_featured", False),
            "is_hidden": data.get("is_hidden", False),
        }

    def build_media(self, uploaded_images=(), uploaded_videos=()):
        """Ordered media from the cleaned lists plus already-uploaded file URLs.

        Items whose URL the product already had keep their ids.
        """
        known = {}
        if self.product is not None:
            known = {item.url: item for item in self.product.media_items}
        data = self.cleaned_data
        entries = [(IMAGE, url) for url in list(data["image_urls"]) + list(uploaded_images)]
        entries += [(YOUTUBE, url) for url in data["youtube_links"]]
        entries += [(VIDEO, url) for url in list(data["video_urls"]) + list(uploaded_videos)]

        items = []
        used = set()
        for order, (kind, url) in enumerate(entries):
            previous = known.get(url)
            if previous is not None and previous.id in used:
                previous = None
            if kind == YOUTUBE:
                item = make_youtube_item(url, order, title=previous.title if previous else None)
            else:
                item = MediaItem(id="", type=kind, url=url, order=order)
            item.id = previous.id if previous is not None and previous.type == item.type else generate_media_id()
            used.add(item.id)
            items.append(item)
        return EnhancedProductMedia(items=items)


class WhatsAppNumbersFilterForm(_BootstrapFormMixin, forms.Form):
    date_from = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    date_to = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    source_page = forms.CharField(required=False)
    device_type = forms.ChoiceField(
        required=False, choices=(("", "All devices"),) + WhatsAppNumber.DEVICE_TYPES
    )
    search = forms.CharField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._apply_bootstrap()

