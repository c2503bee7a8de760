# core/urls/behavioral_urls.py
from django.urls import path

from core.views.api.behavioral import (
    evaluation_approve,
    evaluation_chain,
    evaluation_collection,
    evaluation_detail,
    evaluation_pending,
    evaluation_resubmit,
)

urlpatterns = [
    path("", evaluation_collection, name="evaluation_collection"),
    path("pending/", evaluation_pending, name="evaluation_pending"),
    path("<int:pk>/", evaluation_detail, name="evaluation_detail"),
    path("<int:pk>/chain/", evaluation_chain, name="evaluation_chain"),
    path("<int:pk>/approve/", evaluation_approve, name="evaluation_approve"),
    path("<int:pk>/resubmit/", evaluation_resubmit, name="evaluation_resubmit"),
]
