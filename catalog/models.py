import uuid

from django.db import models


class ProductRecord(models.Model):
    """Storage row for a catalogue product.

    ``original_id`` is the business key used in URLs and by the dashboard;
    ``id`` is internal. Media is stored both as flat URL lists (legacy) and as
    the verbatim ordered item list in ``media_items``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    original_id = models.CharField(max_length=64, unique=True, null=True, blank=True)
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=12, decimal_places=2)
    original_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    image_url = models.CharField(max_length=500, null=True, blank=True)
    image_urls = models.JSONField(default=list, blank=True)
    video_urls = models.JSONField(default=list, blank=True)
    media_items = models.JSONField(default=list, blank=True)
    features = models.JSONField(default=list, blank=True)
    description = models.TextField(null=True, blank=True)
    whatsapp_link = models.CharField(max_length=500)
    category = models.CharField(max_length=120, db_index=True)
    is_new = models.BooleanField(default=False)
    is_featured = models.BooleanField(default=False)
    is_hidden = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ("-created_at",)

    def __str__(self):
        return self.name

    def as_row(self) -> dict:
        return {f.attname: getattr(self, f.attname) for f in self._meta.concrete_fields}
