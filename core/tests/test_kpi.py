from decimal import Decimal

from django.test import TestCase

from core.models import AccountMapping, BehavioralEvaluation, DailyTask
from core.services.kpi import check_account_mapping, on_terminal
from core.tests.helpers import OrgFixtureMixin


class CheckAccountMappingTest(OrgFixtureMixin, TestCase):

    def setUp(self):
        self.create_org()

    def map_account(self, number, user, balance, status=AccountMapping.Status.ACTIVE):
        return AccountMapping.objects.create(
            account_number=number,
            customer_name="Customer",
            current_balance=Decimal(balance),
            mapped_to=user,
            branch=self.branch,
            status=status,
        )

    def test_unmapped_account(self):
        check = check_account_mapping("999", self.mso)
        self.assertEqual(check.status, DailyTask.MappingStatus.UNMAPPED)
        self.assertFalse(check.can_count_for_kpi)
        self.assertIsNone(check.mapping)

    def test_account_of_another_staff(self):
        self.map_account("555", self.stl, "10000")
        check = check_account_mapping("555", self.mso)
        self.assertEqual(check.status, DailyTask.MappingStatus.MAPPED_TO_OTHER)
        self.assertFalse(check.can_count_for_kpi)

    def test_own_account_above_threshold(self):
        mapping = self.map_account("777", self.mso, "500.00")
        check = check_account_mapping(" 777 ", self.mso)
        self.assertEqual(check.status, DailyTask.MappingStatus.MAPPED_TO_YOU)
        self.assertTrue(check.can_count_for_kpi)
        self.assertEqual(check.mapping, mapping)

    def test_own_account_below_threshold(self):
        self.map_account("778", self.mso, "499.99")
        check = check_account_mapping("778", self.mso)
        self.assertEqual(check.status, DailyTask.MappingStatus.MAPPED_TO_YOU)
        self.assertFalse(check.can_count_for_kpi)

    def test_inactive_account_never_counts(self):
        self.map_account("779", self.mso, "5000", status=AccountMapping.Status.INACTIVE)
        self.assertFalse(check_account_mapping("779", self.mso).can_count_for_kpi)


class OnTerminalTest(OrgFixtureMixin, TestCase):

    def setUp(self):
        self.create_org()
        AccountMapping.objects.create(
            account_number="1000123",
            customer_name="Customer",
            current_balance=Decimal("800"),
            mapped_to=self.mso,
            branch=self.branch,
        )

    def make_task(self, status, mapping_status=DailyTask.MappingStatus.MAPPED_TO_YOU):
        return DailyTask.objects.create(
            task_type="Deposit Mobilization",
            account_number="1000123",
            mapping_status=mapping_status,
            submitted_by=self.mso,
            branch=self.branch,
            approval_status=status,
        )

    def test_approved_task_is_marked(self):
        task = self.make_task("Approved")
        on_terminal(task, "Approved")
        task.refresh_from_db()
        self.assertTrue(task.performance_impacted)

    def test_rejected_task_is_untouched(self):
        task = self.make_task("Rejected")
        on_terminal(task, "Rejected")
        task.refresh_from_db()
        self.assertFalse(task.performance_impacted)

    def test_task_on_someone_elses_account_is_untouched(self):
        task = self.make_task("Approved", mapping_status=DailyTask.MappingStatus.MAPPED_TO_OTHER)
        on_terminal(task, "Approved")
        task.refresh_from_db()
        self.assertFalse(task.performance_impacted)

    def test_approved_evaluation_is_locked(self):
        ev = BehavioralEvaluation.objects.create(
            evaluated_user=self.stl, period="Annual", year=2025,
            submitted_by=self.bm, branch=self.branch, approval_status="Approved",
        )
        on_terminal(ev, "Approved")
        ev.refresh_from_db()
        self.assertTrue(ev.is_locked)
        self.assertIsNotNone(ev.locked_at)
