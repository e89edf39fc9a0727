from django.urls import re_path
from .views import (
    LoginView, RefreshView, register, user_me,
    user_list, user_detail,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth endpoints
    re_path(r'^auth/register/?$', register, name='register'),
    re_path(r'^auth/login/?$', LoginView.as_view(), name='token_obtain_pair'),
    re_path(r'^auth/refresh/?$', RefreshView.as_view(), name='token_refresh'),
    re_path(r'^auth/me/?$', user_me, name='user-me'),

    # User endpoints
    re_path(r'^users/?$', user_list, name='user-list'),
    re_path(r'^users/(?P<pk>\d+)/?$', user_detail, name='user-detail'),

    # AuditLog endpoints
    re_path(r'^audit-logs/?$', audit_log_list, name='audit-log-list'),
    re_path(r'^audit-logs/(?P<pk>\d+)/?$', audit_log_detail, name='audit-log-detail'),
]
