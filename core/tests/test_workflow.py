from datetime import datetime, timezone

from django.test import SimpleTestCase

from core.approval.statuses import ApprovalStatus, StepStatus
from core.approval.workflow import ApprovalChain, ApprovalStep, render_chain_view
from core.exceptions import (
    CommentsRequired,
    InvalidDecision,
    NotYourTurn,
    StepAlreadyDecided,
)

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def three_step_chain():
    return ApprovalChain([
        ApprovalStep(approver_id=11, role="Sub-Team Leader"),
        ApprovalStep(approver_id=12, role="Line Manager"),
        ApprovalStep(approver_id=13, role="Branch Manager"),
    ])


class ApprovalChainTurnTest(SimpleTestCase):

    def test_only_first_step_is_actionable_initially(self):
        chain = three_step_chain()
        self.assertEqual(chain.frontier(), 0)
        self.assertTrue(chain.is_actionable_by(11))
        self.assertFalse(chain.is_actionable_by(12))
        self.assertFalse(chain.is_actionable_by(13))
        self.assertEqual(chain.overall_status(), ApprovalStatus.PENDING)

    def test_actor_ids_compare_across_int_and_str(self):
        chain = three_step_chain()
        self.assertTrue(chain.is_actionable_by("11"))

    def test_empty_chain_is_draft(self):
        chain = ApprovalChain([])
        self.assertEqual(chain.overall_status(), ApprovalStatus.DRAFT)
        self.assertIsNone(chain.frontier())
        self.assertEqual(render_chain_view(chain), [])


class ApprovalChainDecisionTest(SimpleTestCase):

    def test_happy_path_approves_in_order(self):
        chain = three_step_chain()

        first = chain.record_decision(11, "Approved", now=NOW)
        self.assertEqual(first.status, ApprovalStatus.PENDING)
        self.assertEqual(first.step_index, 0)
        self.assertFalse(first.is_terminal)
        self.assertTrue(chain.is_actionable_by(12))

        chain.record_decision(12, "Approved", now=NOW)
        last = chain.record_decision(13, "Approved", "Looks good", now=NOW)

        self.assertEqual(last.status, ApprovalStatus.APPROVED)
        self.assertTrue(last.is_terminal)
        self.assertTrue(all(s.status == StepStatus.APPROVED for s in chain))
        self.assertTrue(all(s.approved_at == NOW for s in chain))
        self.assertIsNone(chain.frontier())

    def test_rejection_closes_chain_and_leaves_later_steps_pending(self):
        chain = three_step_chain()
        chain.record_decision(11, "Approved", now=NOW)

        result = chain.record_decision(12, "Rejected", "Wrong account", now=NOW)

        self.assertEqual(result.status, ApprovalStatus.REJECTED)
        self.assertTrue(result.is_terminal)
        self.assertEqual(chain.steps[1].comments, "Wrong account")
        self.assertEqual(chain.steps[2].status, StepStatus.PENDING)
        self.assertIsNone(chain.steps[2].approved_at)
        self.assertFalse(chain.is_actionable_by(13))

        with self.assertRaises(StepAlreadyDecided):
            chain.record_decision(13, "Approved")

    def test_out_of_turn_decision_is_refused_without_changes(self):
        chain = three_step_chain()
        before = chain.to_list()

        with self.assertRaises(NotYourTurn) as ctx:
            chain.record_decision(13, "Approved")

        self.assertEqual(ctx.exception.details["waiting_on"], "Sub-Team Leader")
        self.assertEqual(chain.to_list(), before)

    def test_rejection_requires_comments(self):
        chain = three_step_chain()
        before = chain.to_list()

        with self.assertRaises(CommentsRequired):
            chain.record_decision(11, "Rejected")
        with self.assertRaises(CommentsRequired):
            chain.record_decision(11, "Rejected", "   ")

        self.assertEqual(chain.to_list(), before)

    def test_second_decision_on_same_step_is_refused(self):
        chain = three_step_chain()
        chain.record_decision(11, "Approved", now=NOW)
        snapshot = chain.to_list()

        with self.assertRaises(StepAlreadyDecided):
            chain.record_decision(11, "Approved")
        with self.assertRaises(StepAlreadyDecided):
            chain.record_decision(11, "Rejected", "changed my mind")

        self.assertEqual(chain.to_list(), snapshot)

    def test_stranger_gets_not_your_turn(self):
        chain = three_step_chain()
        with self.assertRaises(NotYourTurn):
            chain.record_decision(99, "Approved")

    def test_unknown_decision_value(self):
        chain = three_step_chain()
        with self.assertRaises(InvalidDecision):
            chain.record_decision(11, "Maybe")
        self.assertEqual(chain.steps[0].status, StepStatus.PENDING)

    def test_same_approver_on_two_steps_waits_for_the_middle_one(self):
        chain = ApprovalChain([
            ApprovalStep(approver_id=11, role="Sub-Team Leader"),
            ApprovalStep(approver_id=12, role="Line Manager"),
            ApprovalStep(approver_id=11, role="Branch Manager"),
        ])
        chain.record_decision(11, "Approved", now=NOW)

        with self.assertRaises(NotYourTurn):
            chain.record_decision(11, "Approved")

        chain.record_decision(12, "Approved", now=NOW)
        result = chain.record_decision(11, "Approved", now=NOW)
        self.assertEqual(result.step_index, 2)
        self.assertEqual(result.status, ApprovalStatus.APPROVED)

    def test_approval_comments_are_optional_and_stripped(self):
        chain = three_step_chain()
        chain.record_decision(11, "Approved", "  ok  ", now=NOW)
        self.assertEqual(chain.steps[0].comments, "ok")


class ChainSerializationTest(SimpleTestCase):

    def test_stored_layout_uses_camel_case_keys(self):
        chain = three_step_chain()
        chain.record_decision(11, "Approved", now=NOW)

        stored = chain.to_list()

        self.assertEqual(stored[0], {
            "approverId": 11,
            "role": "Sub-Team Leader",
            "status": "Approved",
            "approvedAt": NOW.isoformat(),
            "comments": "",
        })
        self.assertIsNone(stored[1]["approvedAt"])

    def test_chain_survives_storage(self):
        chain = three_step_chain()
        chain.record_decision(11, "Approved", now=NOW)

        restored = ApprovalChain.from_list(chain.to_list())

        self.assertEqual(restored.steps[0].approved_at, NOW)
        self.assertTrue(restored.is_actionable_by(12))
        self.assertEqual(restored.view(), chain.view())

    def test_view_of_fresh_chain(self):
        view = render_chain_view(three_step_chain())
        self.assertEqual(
            view,
            [
                {"role": "Sub-Team Leader", "status": "Pending", "approvedAt": None, "comments": None},
                {"role": "Line Manager", "status": "Pending", "approvedAt": None, "comments": None},
                {"role": "Branch Manager", "status": "Pending", "approvedAt": None, "comments": None},
            ],
        )

    def test_view_is_read_only(self):
        chain = three_step_chain()
        before = chain.to_list()
        render_chain_view(chain)
        render_chain_view(chain)
        self.assertEqual(chain.to_list(), before)
