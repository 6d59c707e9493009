from django.contrib import admin
from .models import WhatsAppNumber


@admin.register(WhatsAppNumber)
class WhatsAppNumberAdmin(admin.ModelAdmin):
    list_display = ("whatsapp_number", "source_page", "device_type", "is_mobile", "utm_source", "created_at")
    list_filter = ("device_type", "is_mobile", "utm_source")
    search_fields = ("whatsapp_number", "source_page")
    readonly_fields = [f.name for f in WhatsAppNumber._meta.fields]
