# core/services/audit.py
"""
Append-only audit trail.

Audit writes must never break the main flow: any failure is logged and
swallowed here, so callers do not need their own try/except.
"""
import logging

from django.db import transaction

from core.approval.statuses import ApprovalStatus
from core.constants import EntityType
from core.models import AuditLog

logger = logging.getLogger(__name__)


def _client_ip(request):
    if request is None:
        return None
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_audit(user_id, action, entity_type="", entity_id="", entity_name="", details="",
              request=None, metadata=None):
    """Create one AuditLog row; returns it, or None when the write failed."""
    try:
        with transaction.atomic():
            return AuditLog.objects.create(
                user_id=user_id,
                action=action,
                entity_type=entity_type or "",
                entity_id=str(entity_id) if entity_id is not None else "",
                entity_name=entity_name or "",
                details=details or "",
                ip_address=_client_ip(request),
                user_agent=(request.META.get("HTTP_USER_AGENT", "") if request is not None else "")[:500],
                metadata=metadata,
            )
    except Exception:
        logger.exception(
            "Audit log write failed: action=%s entity=%s:%s user=%s",
            action, entity_type, entity_id, user_id,
        )
        return None


def record_decision_audit(entity, actor_id, decision, comments, timestamp):
    """Default on_audit hook: one entry per approve/reject decision."""
    action = entity.decision_action(decision)
    log_audit(
        actor_id,
        action,
        entity.ENTITY_TYPE or EntityType.SYSTEM,
        entity.pk,
        entity.audit_name,
        f"{decision} {entity.audit_name.lower()} with comments: {comments or 'No comments'}",
        metadata={
            "decision": decision,
            "decided_at": timestamp.isoformat() if timestamp else None,
            "revision": entity.revision,
            "approval_status": entity.approval_status,
        },
    )


def replay_decision_audits(queryset, dry_run=False):
    """
    Rebuild decision entries the on_audit hook never wrote.

    Every decided step of each entity's stored chain is matched against the
    log by actor, action and decision time; steps with no entry are written
    again through record_decision_audit. Returns the number of missing
    entries. Steps of a chain replaced by a resubmission are gone and
    cannot be recovered here.
    """
    missing = 0
    for entity in queryset.exclude(approval_status=ApprovalStatus.DRAFT.value):
        for step in entity.chain:
            if not step.is_decided or step.approved_at is None:
                continue
            decision = step.status.value
            exists = AuditLog.objects.filter(
                user_id=step.approver_id,
                action=entity.decision_action(decision),
                entity_type=entity.ENTITY_TYPE or EntityType.SYSTEM,
                entity_id=str(entity.pk),
                metadata__decided_at=step.approved_at.isoformat(),
            ).exists()
            if exists:
                continue

            missing += 1
            if not dry_run:
                record_decision_audit(entity, step.approver_id, decision, step.comments, step.approved_at)
    return missing
