from django.apps import AppConfig


class VisitorsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "visitors"

    whatsapp_numbers_service = None

    def ready(self):
        from .services import WhatsAppNumbersService

        self.whatsapp_numbers_service = WhatsAppNumbersService()
