from django.apps import AppConfig


class CatalogConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "catalog"

    product_service = None
    media_storage = None

    def ready(self):
        # Built once per process; views look them up through get_product_service()
        from .services import ProductService
        from .storage import MediaStorage

        self.media_storage = MediaStorage()
        self.product_service = ProductService(storage=self.media_storage)
