# core/approval/workflow_engine.py
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from django.db import transaction
from django.utils import timezone

from core.approval.chains import ENTITY_EVALUATION, ENTITY_TASK, build_approval_chain
from core.approval.statuses import ApprovalStatus
from core.approval.workflow import ApprovalChain, ChainResult
from core.constants import AuditAction, Settings
from core.exceptions import ConcurrentModification, InvalidResubmission

logger = logging.getLogger(__name__)


@dataclass
class ApprovalHooks:
    """
    Collaborators notified after a decision is committed.

    on_audit(entity, actor_id, decision, comments, timestamp) runs once per decision.
    on_terminal(entity, final_status) runs once when the chain closes.
    """
    on_terminal: Optional[Callable] = None
    on_audit: Optional[Callable] = None


def default_hooks() -> ApprovalHooks:
    from core.services.audit import record_decision_audit
    from core.services.kpi import on_terminal

    return ApprovalHooks(on_terminal=on_terminal, on_audit=record_decision_audit)


def default_resolver():
    from core.services.role_resolver import BranchRoleResolver

    return BranchRoleResolver()


class WorkflowEngine:
    """
    Applies the approval chain state machine to a stored entity:
    1) reads the entity and its embedded chain
    2) validates and applies the decision in memory
    3) writes it back only if nobody else changed it meanwhile (revision)
    4) notifies the audit / KPI hooks after commit
    """

    CREATED_ACTIONS = {
        ENTITY_TASK: AuditAction.TASK_CREATED,
        ENTITY_EVALUATION: AuditAction.BEHAVIORAL_EVALUATION,
    }

    def __init__(self, model, hooks: Optional[ApprovalHooks] = None, resolver=None, clock=None):
        if model is None:
            raise ValueError("Model cannot be None")

        self.model = model
        self.hooks = hooks if hooks is not None else default_hooks()
        self.resolver = resolver if resolver is not None else default_resolver()
        self.clock = clock or timezone.now

    # ---------------------------------------
    # chain construction
    # ---------------------------------------
    def build_chain(self, submitter) -> ApprovalChain:
        return build_approval_chain(submitter, self.model.ENTITY_TYPE, self.resolver)

    def submit(self, entity, submitter, request=None):
        """
        Attach a freshly built chain to `entity` and save it as Pending.
        Nothing is stored when the chain cannot be built.
        """
        chain = self.build_chain(submitter)

        entity.submitted_by_id = submitter.user_id
        entity.set_chain(chain)
        entity.revision = (entity.revision or 0) + 1

        with transaction.atomic():
            entity.save()

        logger.info(
            "%s %s submitted by user %s with %d approval step(s)",
            self.model.ENTITY_TYPE, entity.pk, submitter.user_id, len(chain),
        )

        action = self.CREATED_ACTIONS.get(self.model.ENTITY_TYPE, AuditAction.APPROVAL)
        transaction.on_commit(lambda: self._log(
            submitter.user_id, action, entity,
            f"Created {entity.audit_name.lower()}", request,
        ))
        return entity

    # ---------------------------------------
    # turn resolution
    # ---------------------------------------
    def can_approve(self, entity, user) -> bool:
        return entity.chain.is_actionable_by(getattr(user, "pk", user))

    def pending_for(self, user, queryset=None) -> list:
        """Entities whose current step belongs to `user`."""
        actor_id = getattr(user, "pk", user)
        qs = queryset if queryset is not None else self.model.objects.all()
        qs = qs.filter(approval_status=ApprovalStatus.PENDING.value)
        return [e for e in qs if e.chain.is_actionable_by(actor_id)]

    # ---------------------------------------
    # decisions
    # ---------------------------------------
    def decide(self, entity_id, actor, decision, comments: str = "",
               expected_revision: Optional[int] = None) -> ChainResult:
        """
        Record `actor`'s decision on the entity's current step.

        Raises the ApprovalError subclasses of ApprovalChain.record_decision,
        ConcurrentModification when `expected_revision` is stale or every
        retry lost the race, and Model.DoesNotExist for unknown ids.
        """
        actor_id = getattr(actor, "pk", actor)

        for attempt in range(1, Settings.APPROVAL_MAX_RETRIES + 1):
            entity = self.model.objects.get(pk=entity_id)

            if expected_revision is not None and int(expected_revision) != entity.revision:
                raise ConcurrentModification(details={
                    "expected_revision": int(expected_revision),
                    "current_revision": entity.revision,
                })

            now = self.clock()
            chain = entity.chain
            result = chain.record_decision(actor_id, decision, comments, now=now)

            values = {
                "approval_chain": chain.to_list(),
                "approval_status": result.status.value,
                "revision": entity.revision + 1,
                "updated_at": now,
            }
            with transaction.atomic():
                updated = (
                    self.model.objects
                    .filter(pk=entity.pk, revision=entity.revision)
                    .update(**values)
                )
            if updated:
                break

            logger.warning(
                "Lost update on %s %s (revision %s, attempt %d); retrying",
                self.model.ENTITY_TYPE, entity.pk, entity.revision, attempt,
            )
        else:
            raise ConcurrentModification(details={"entity_id": entity_id})

        for field, value in values.items():
            setattr(entity, field, value)

        logger.info(
            "%s %s: user %s %s step %d (%s); overall %s",
            self.model.ENTITY_TYPE, entity.pk, actor_id, result.decision.value,
            result.step_index, chain.steps[result.step_index].role, result.status.value,
        )

        stored_comments = chain.steps[result.step_index].comments
        transaction.on_commit(lambda: self._notify(entity, actor_id, result, stored_comments, now))
        return result

    def resubmit(self, entity_id, submitter, request=None):
        """Give a rejected entity a fresh chain. Only its submitter may do this."""
        entity = self.model.objects.get(pk=entity_id)

        if entity.submitted_by_id != submitter.user_id:
            raise InvalidResubmission(details={"entity_id": entity.pk})
        if entity.approval_status != ApprovalStatus.REJECTED.value:
            raise InvalidResubmission(
                "Only rejected items can be resubmitted.",
                details={"entity_id": entity.pk, "approval_status": entity.approval_status},
            )

        chain = self.build_chain(submitter)
        values = {
            "approval_chain": chain.to_list(),
            "approval_status": chain.overall_status().value,
            "revision": entity.revision + 1,
            "updated_at": self.clock(),
        }
        with transaction.atomic():
            updated = (
                self.model.objects
                .filter(pk=entity.pk, revision=entity.revision)
                .update(**values)
            )
        if not updated:
            raise ConcurrentModification(details={"entity_id": entity.pk})

        for field, value in values.items():
            setattr(entity, field, value)

        logger.info("%s %s resubmitted by user %s", self.model.ENTITY_TYPE, entity.pk, submitter.user_id)
        transaction.on_commit(lambda: self._log(
            submitter.user_id, AuditAction.RESUBMITTED, entity,
            f"Resubmitted {entity.audit_name.lower()} (revision {entity.revision})", request,
        ))
        return entity

    # ---------------------------------------
    # collaborators
    # ---------------------------------------
    def _log(self, user_id, action, entity, details, request=None):
        from core.services.audit import log_audit

        log_audit(user_id, action, self.model.ENTITY_TYPE, entity.pk, entity.audit_name, details, request)

    def _notify(self, entity, actor_id, result: ChainResult, comments, when):
        self._call_hook("on_audit", self.hooks.on_audit, entity, actor_id, result.decision.value, comments, when)
        if result.is_terminal:
            self._call_hook("on_terminal", self.hooks.on_terminal, entity, result.status.value)

    def _call_hook(self, name, hook, entity, *args):
        if hook is None:
            return
        try:
            hook(entity, *args)
        except Exception:
            # a recorded decision is never rolled back because a side effect failed
            logger.exception("%s hook failed for %s %s", name, self.model.ENTITY_TYPE, entity.pk)
