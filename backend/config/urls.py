"""
URL configuration for the sweet shop backend.

API routes live under /api/ and accept paths with or without a trailing slash.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Sweet Shop Management Admin Panel"
admin.site.site_title = "Sweet Shop Admin Portal"
admin.site.index_title = "Welcome to the Sweet Shop Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', include('backend.core.urls')),
    path('api/', include('backend.inventory.urls')),
    path('', include('backend.inventory.frontend_urls')),
]
