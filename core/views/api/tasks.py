# core/views/api/tasks.py
from decimal import Decimal, InvalidOperation

from django.core.exceptions import BadRequest, PermissionDenied
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from core.approval.workflow_engine import WorkflowEngine
from core.models import DailyTask
from core.services import access
from core.services.kpi import check_account_mapping
from core.views.api.common import (
    api_view,
    approvable_fields,
    chain_response,
    decision_payload,
    parse_json,
    require_fields,
)


def serialize_task(task: DailyTask) -> dict:
    data = approvable_fields(task)
    data.update({
        "taskType": task.task_type,
        "productType": task.product_type,
        "accountNumber": task.account_number,
        "amount": str(task.amount),
        "remarks": task.remarks,
        "evidence": task.evidence,
        "mappingStatus": task.mapping_status,
        "taskDate": task.task_date.isoformat() if task.task_date else None,
        "performanceImpacted": task.performance_impacted,
    })
    return data


def _get_visible_task(request, pk) -> DailyTask:
    task = DailyTask.objects.get(pk=pk)
    if not access.can_view(task, request.user):
        raise PermissionDenied("You cannot view this task.")
    return task


# -----------------------------------------------------------
@require_http_methods(["GET", "POST"])
@api_view
def task_collection(request):
    if request.method == "POST":
        return _create_task(request)

    qs = access.scope_queryset(DailyTask.objects.all(), request.user)
    status = request.GET.get("status")
    if status:
        qs = qs.filter(approval_status=status)
    return JsonResponse({"success": True, "results": [serialize_task(t) for t in qs]})


def _create_task(request):
    prof = access.ensure_can_submit_task(request.user)
    data = parse_json(request)
    require_fields(data, "taskType", "accountNumber")

    try:
        amount = Decimal(str(data.get("amount") or 0))
    except InvalidOperation:
        raise BadRequest("'amount' must be a number.")

    account_number = str(data["accountNumber"]).strip()
    mapping = check_account_mapping(account_number, request.user)

    task = DailyTask(
        task_type=data["taskType"],
        product_type=data.get("productType") or "",
        account_number=account_number,
        account=mapping.mapping,
        amount=amount,
        remarks=data.get("remarks") or "",
        evidence=data.get("evidence") or "",
        mapping_status=mapping.status,
        submitted_by=request.user,
        branch_id=prof.branch_id,
    )
    if data.get("taskDate"):
        task.task_date = str(data["taskDate"])
    task.full_clean(exclude=["approval_chain"])

    WorkflowEngine(DailyTask).submit(task, prof, request=request)
    return JsonResponse({"success": True, "task": serialize_task(task)}, status=201)


@require_GET
@api_view
def task_detail(request, pk):
    task = _get_visible_task(request, pk)
    return JsonResponse({"success": True, "task": serialize_task(task)})


@require_GET
@api_view
def task_chain(request, pk):
    return chain_response(_get_visible_task(request, pk))


@require_http_methods(["PUT", "POST"])
@api_view
def task_approve(request, pk):
    decision, comments, revision = decision_payload(request)
    WorkflowEngine(DailyTask).decide(pk, request.user, decision, comments, expected_revision=revision)
    task = DailyTask.objects.get(pk=pk)
    return JsonResponse({"success": True, "task": serialize_task(task)})


@require_POST
@api_view
def task_resubmit(request, pk):
    prof = access.get_profile(request.user)
    if prof is None:
        raise PermissionDenied("No employee profile.")
    task = WorkflowEngine(DailyTask).resubmit(pk, prof, request=request)
    return JsonResponse({"success": True, "task": serialize_task(task)})


@require_GET
@api_view
def task_pending(request):
    tasks = WorkflowEngine(DailyTask).pending_for(request.user)
    return JsonResponse({"success": True, "results": [serialize_task(t) for t in tasks]})
