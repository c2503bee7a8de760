# core/urls/audit_urls.py
from django.urls import path

from core.views.api.audit import audit_list

urlpatterns = [
    path("", audit_list, name="audit_list"),
]
