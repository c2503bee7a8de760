# core/urls/task_urls.py
from django.urls import path

from core.views.api.tasks import (
    task_approve,
    task_chain,
    task_collection,
    task_detail,
    task_pending,
    task_resubmit,
)

urlpatterns = [
    path("", task_collection, name="task_collection"),
    path("pending/", task_pending, name="task_pending"),
    path("<int:pk>/", task_detail, name="task_detail"),
    path("<int:pk>/chain/", task_chain, name="task_chain"),
    path("<int:pk>/approve/", task_approve, name="task_approve"),
    path("<int:pk>/resubmit/", task_resubmit, name="task_resubmit"),
]
