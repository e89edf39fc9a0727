from django.urls import re_path
from .views import (
    sweet_list_create, sweet_search, sweet_detail,
    sweet_purchase, sweet_restock, sweet_movements
)

urlpatterns = [
    # Sweet endpoints
    re_path(r'^sweets/?$', sweet_list_create, name='sweet-list-create'),
    re_path(r'^sweets/search/?$', sweet_search, name='sweet-search'),
    re_path(r'^sweets/(?P<pk>\d+)/?$', sweet_detail, name='sweet-detail'),

    # Stock mutation endpoints
    re_path(r'^sweets/(?P<pk>\d+)/purchase/?$', sweet_purchase, name='sweet-purchase'),
    re_path(r'^sweets/(?P<pk>\d+)/restock/?$', sweet_restock, name='sweet-restock'),
    re_path(r'^sweets/(?P<pk>\d+)/movements/?$', sweet_movements, name='sweet-movements'),
]
