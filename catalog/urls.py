from django.urls import path
from . import views


urlpatterns = [
    path("", views.home, name="home"),
    path("products/", views.product_list, name="product_list"),
    path("category/<str:category>/", views.category_detail, name="category_detail"),
    path("product/<str:product_id>/", views.product_detail, name="product_detail"),
]
