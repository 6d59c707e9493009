import uuid

from django.db import models


class WhatsAppNumber(models.Model):
    """One row per accepted popup submission. Rows are never edited."""

    DEVICE_TYPES = (
        ("desktop", "Desktop"),
        ("mobile", "Mobile"),
        ("tablet", "Tablet"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    whatsapp_number = models.CharField(max_length=20, db_index=True)
    country_code = models.CharField(max_length=6, default="+234")
    source_page = models.CharField(max_length=300, blank=True)
    source_url = models.CharField(max_length=1000, blank=True)
    user_agent = models.TextField(blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    browser_fingerprint = models.CharField(max_length=32, blank=True)
    referrer = models.CharField(max_length=1000, blank=True, default="direct")
    utm_source = models.CharField(max_length=200, null=True, blank=True)
    utm_medium = models.CharField(max_length=200, null=True, blank=True)
    utm_campaign = models.CharField(max_length=200, null=True, blank=True)
    device_type = models.CharField(max_length=10, choices=DEVICE_TYPES, default="desktop")
    is_mobile = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "visitor_whatsapp_numbers"
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.whatsapp_number} ({self.source_page or '/'})"
