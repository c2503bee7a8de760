# core/views/api/common.py
import json
import logging
from functools import wraps

from django.core.exceptions import BadRequest, ObjectDoesNotExist, PermissionDenied, ValidationError
from django.http import JsonResponse

from core.exceptions import ApprovalError

logger = logging.getLogger(__name__)


def error_response(error_code, message, status, details=None):
    return JsonResponse(
        {
            "success": False,
            "error_code": error_code,
            "message": message,
            "details": details or {},
        },
        status=status,
    )


def api_view(func):
    """
    JSON endpoint wrapper: requires a logged-in user and turns the
    known exceptions into error bodies.
    """
    @wraps(func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response("ERR_UNAUTHENTICATED", "Authentication required.", 401)
        try:
            return func(request, *args, **kwargs)
        except ApprovalError as exc:
            logger.info("%s %s refused: %s %s", request.method, request.path, exc.error_code, exc.details)
            return JsonResponse(exc.to_dict(), status=exc.http_status)
        except PermissionDenied as exc:
            return error_response("ERR_FORBIDDEN", str(exc) or "Permission denied.", 403)
        except ObjectDoesNotExist:
            return error_response("ERR_NOT_FOUND", "Not found.", 404)
        except ValidationError as exc:
            details = exc.message_dict if hasattr(exc, "error_dict") else {"errors": exc.messages}
            return error_response("ERR_VALIDATION", "Invalid data.", 400, details)
        except BadRequest as exc:
            return error_response("ERR_BAD_REQUEST", str(exc) or "Bad request.", 400)

    return wrapper


def parse_json(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (TypeError, ValueError):
        raise BadRequest("Request body must be valid JSON.")
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object.")
    return data


def require_fields(data: dict, *names):
    missing = [n for n in names if data.get(n) in (None, "")]
    if missing:
        raise ValidationError({n: "This field is required." for n in missing})


def parse_int(value, name):
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f"'{name}' must be an integer.")


def decision_payload(request):
    """(decision, comments, expected_revision) from an approve request."""
    data = parse_json(request)
    require_fields(data, "status")
    return (
        data["status"],
        data.get("comments") or "",
        parse_int(data.get("revision"), "revision"),
    )


def approvable_fields(entity) -> dict:
    return {
        "id": entity.pk,
        "approvalStatus": entity.approval_status,
        "approvalChain": entity.chain.view(),
        "revision": entity.revision,
        "submittedBy": entity.submitted_by_id,
        "branch": entity.branch_id,
        "createdAt": entity.created_at.isoformat() if entity.created_at else None,
        "updatedAt": entity.updated_at.isoformat() if entity.updated_at else None,
    }


def chain_response(entity):
    return JsonResponse({
        "success": True,
        "id": entity.pk,
        "approvalStatus": entity.approval_status,
        "revision": entity.revision,
        "chain": entity.chain.view(),
    })
