from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("navigational-list/", include("menus.api_urls")),
]
