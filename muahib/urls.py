from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("catalog.urls")),
    path("", include("visitors.urls")),
    path("", include("dashboard.urls")),
]

# Serve uploaded media from Django. In production point the media buckets at
# object storage instead.
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
