from django.urls import path
from . import views


urlpatterns = [
    path("dashboard/", views.index, name="dashboard"),
    path("dashboard/products/", views.products_list, name="dashboard_products"),
    path("dashboard/products/partial/", views.products_partial, name="dashboard_products_partial"),
    path("dashboard/products/new/", views.create_product, name="dashboard_product_new"),
    path("dashboard/products/visibility/", views.bulk_visibility, name="dashboard_products_visibility"),
    path("dashboard/products/<str:product_id>/edit/", views.edit_product, name="dashboard_product_edit"),
    path("dashboard/products/<str:product_id>/delete/", views.delete_product, name="dashboard_product_delete"),
    path(
        "dashboard/products/<str:product_id>/visibility/",
        views.toggle_product_visibility,
        name="dashboard_product_visibility",
    ),
    path("dashboard/whatsapp-numbers/", views.whatsapp_numbers, name="dashboard_whatsapp_numbers"),
    path("dashboard/whatsapp-numbers.csv", views.whatsapp_numbers_csv, name="dashboard_whatsapp_numbers_csv"),
    path(
        "dashboard/whatsapp-numbers/<str:entry_id>/delete/",
        views.delete_whatsapp_number,
        name="dashboard_whatsapp_number_delete",
    ),
]
