# core/views/api/behavioral.py
from django.contrib.auth.models import User
from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from core.approval.workflow_engine import WorkflowEngine
from core.models import BehavioralEvaluation
from core.services import access
from core.views.api.common import (
    api_view,
    approvable_fields,
    chain_response,
    decision_payload,
    parse_int,
    parse_json,
    require_fields,
)


def serialize_evaluation(ev: BehavioralEvaluation) -> dict:
    data = approvable_fields(ev)
    data.update({
        "evaluatedUser": ev.evaluated_user_id,
        "period": ev.period,
        "year": ev.year,
        "quarter": ev.quarter,
        "month": ev.month,
        "competencies": ev.competencies,
        "totalScore": str(ev.total_score),
        "overallComments": ev.overall_comments,
        "isLocked": ev.is_locked,
    })
    return data


def _get_visible_evaluation(request, pk) -> BehavioralEvaluation:
    ev = BehavioralEvaluation.objects.get(pk=pk)
    if ev.evaluated_user_id != request.user.pk and not access.can_view(ev, request.user):
        raise PermissionDenied("You cannot view this evaluation.")
    return ev


# -----------------------------------------------------------
@require_http_methods(["GET", "POST"])
@api_view
def evaluation_collection(request):
    if request.method == "POST":
        return _create_evaluation(request)

    qs = access.scope_queryset(BehavioralEvaluation.objects.all(), request.user, owner_field="evaluated_user")
    status = request.GET.get("status")
    if status:
        qs = qs.filter(approval_status=status)
    return JsonResponse({"success": True, "results": [serialize_evaluation(e) for e in qs]})


def _create_evaluation(request):
    prof = access.ensure_can_evaluate(request.user)
    data = parse_json(request)
    require_fields(data, "evaluatedUserId", "period", "year")

    evaluated_id = parse_int(data["evaluatedUserId"], "evaluatedUserId")
    evaluated = User.objects.select_related("employee_profile").get(pk=evaluated_id)
    if evaluated.pk == request.user.pk:
        raise PermissionDenied("You cannot evaluate yourself.")

    target = access.get_profile(evaluated)
    branch_id = target.branch_id if target else None
    if branch_id is None:
        raise ValidationError({"evaluatedUserId": "The evaluated user has no branch."})

    visible = access.visible_branch_ids(request.user)
    if visible is not None and branch_id not in visible:
        raise PermissionDenied("The evaluated user is outside your scope.")

    ev = BehavioralEvaluation(
        evaluated_user=evaluated,
        period=data["period"],
        year=parse_int(data["year"], "year"),
        quarter=parse_int(data.get("quarter"), "quarter"),
        month=parse_int(data.get("month"), "month"),
        competencies=data.get("competencies") or {},
        overall_comments=data.get("overallComments") or "",
        submitted_by=request.user,
        branch_id=branch_id,
    )
    ev.full_clean(exclude=["approval_chain"])
    ev.recalc_score()

    WorkflowEngine(BehavioralEvaluation).submit(ev, prof, request=request)
    return JsonResponse({"success": True, "evaluation": serialize_evaluation(ev)}, status=201)


@require_GET
@api_view
def evaluation_detail(request, pk):
    ev = _get_visible_evaluation(request, pk)
    return JsonResponse({"success": True, "evaluation": serialize_evaluation(ev)})


@require_GET
@api_view
def evaluation_chain(request, pk):
    return chain_response(_get_visible_evaluation(request, pk))


@require_http_methods(["PUT", "POST"])
@api_view
def evaluation_approve(request, pk):
    decision, comments, revision = decision_payload(request)
    WorkflowEngine(BehavioralEvaluation).decide(pk, request.user, decision, comments, expected_revision=revision)
    ev = BehavioralEvaluation.objects.get(pk=pk)
    return JsonResponse({"success": True, "evaluation": serialize_evaluation(ev)})


@require_POST
@api_view
def evaluation_resubmit(request, pk):
    prof = access.get_profile(request.user)
    if prof is None:
        raise PermissionDenied("No employee profile.")
    ev = WorkflowEngine(BehavioralEvaluation).resubmit(pk, prof, request=request)
    return JsonResponse({"success": True, "evaluation": serialize_evaluation(ev)})


@require_GET
@api_view
def evaluation_pending(request):
    evaluations = WorkflowEngine(BehavioralEvaluation).pending_for(request.user)
    return JsonResponse({"success": True, "results": [serialize_evaluation(e) for e in evaluations]})
