from django.urls import path
from . import views


urlpatterns = [
    path("visitor/popup/", views.popup_status, name="visitor_popup_status"),
    path("visitor/popup/shown/", views.popup_shown, name="visitor_popup_shown"),
    path("visitor/whatsapp/", views.submit_whatsapp, name="visitor_submit_whatsapp"),
]
