# core/urls/__init__.py
from django.urls import path, include

urlpatterns = [
    path("tasks/", include("core.urls.task_urls")),
    path("behavioral/", include("core.urls.behavioral_urls")),
    path("audit/", include("core.urls.audit_urls")),
]
