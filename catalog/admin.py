from django.contrib import admin
from .models import ProductRecord


@admin.register(ProductRecord)
class ProductRecordAdmin(admin.ModelAdmin):
    list_display = ("original_id", "name", "category", "price", "is_featured", "is_hidden", "created_at")
    list_filter = ("category", "is_hidden", "is_featured", "is_new")
    search_fields = ("name", "original_id")
    readonly_fields = ("id", "created_at", "updated_at")
