# core/views/api/audit.py
from dateutil import parser as date_parser
from django.core.exceptions import BadRequest
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from core.constants import Settings
from core.models import AuditLog
from core.services import access
from core.views.api.common import api_view, parse_int


def _parse_date(value, name):
    try:
        value = date_parser.isoparse(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{name}' must be an ISO-8601 date.")
    if timezone.is_naive(value):
        value = timezone.make_aware(value)
    return value


def serialize_audit(entry: AuditLog) -> dict:
    return {
        "id": entry.pk,
        "user": entry.user_id,
        "action": entry.action,
        "entityType": entry.entity_type,
        "entityId": entry.entity_id,
        "entityName": entry.entity_name,
        "details": entry.details,
        "ipAddress": entry.ip_address,
        "metadata": entry.metadata,
        "timestamp": entry.created_at.isoformat(),
    }


@require_GET
@api_view
def audit_list(request):
    access.ensure_admin(request.user)

    qs = AuditLog.objects.all()
    params = request.GET

    if params.get("action"):
        qs = qs.filter(action=params["action"])
    if params.get("entity_type"):
        qs = qs.filter(entity_type=params["entity_type"])
    if params.get("user"):
        qs = qs.filter(user_id=parse_int(params["user"], "user"))
    if params.get("start"):
        qs = qs.filter(created_at__gte=_parse_date(params["start"], "start"))
    if params.get("end"):
        qs = qs.filter(created_at__lte=_parse_date(params["end"], "end"))

    limit = parse_int(params.get("limit"), "limit") or Settings.AUDIT_DEFAULT_LIMIT
    limit = max(1, min(limit, Settings.AUDIT_MAX_LIMIT))

    entries = list(qs[:limit])
    return JsonResponse({
        "success": True,
        "count": len(entries),
        "results": [serialize_audit(e) for e in entries],
    })
