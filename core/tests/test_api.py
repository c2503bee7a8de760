import json
from decimal import Decimal

from django.conf import settings
from django.test import Client, TestCase
from django.utils.crypto import get_random_string

from core.approval.roles import UserRole
from core.constants import AuditAction, Settings
from core.models import AccountMapping, BehavioralEvaluation, DailyTask
from core.tests.helpers import OrgFixtureMixin, make_user

TASKS_URL = "/api/tasks/"
BEHAVIORAL_URL = "/api/behavioral/"
AUDIT_URL = "/api/audit/"


class ApiTestBase(OrgFixtureMixin, TestCase):

    def setUp(self):
        self.create_org()
        AccountMapping.objects.create(
            account_number="1000123",
            customer_name="Abebe Kebede",
            current_balance=Decimal("1500.00"),
            mapped_to=self.mso,
            branch=self.branch,
        )

    def send(self, method, url, user, payload=None):
        self.client.force_login(user)
        return getattr(self.client, method)(
            url,
            data=json.dumps(payload) if payload is not None else None,
            content_type="application/json",
        )

    def create_task(self, user=None, **overrides):
        payload = {
            "taskType": "Deposit Mobilization",
            "accountNumber": "1000123",
            "amount": "2500",
            "remarks": "Walk-in deposit",
        }
        payload.update(overrides)
        return self.send("post", TASKS_URL, user or self.mso, payload)

    def decide(self, task_id, user, payload, method="put"):
        return self.send(method, f"{TASKS_URL}{task_id}/approve/", user, payload)


class TaskCreateApiTest(ApiTestBase):

    def test_create_task(self):
        response = self.create_task()

        self.assertEqual(response.status_code, 201)
        task = response.json()["task"]
        self.assertEqual(task["approvalStatus"], "Pending")
        self.assertEqual(task["revision"], 1)
        self.assertEqual(task["mappingStatus"], "Mapped to You")
        self.assertEqual(
            [(s["role"], s["status"]) for s in task["approvalChain"]],
            [("Sub-Team Leader", "Pending"), ("Line Manager", "Pending"), ("Branch Manager", "Pending")],
        )

    def test_unmapped_account_is_accepted_but_flagged(self):
        response = self.create_task(accountNumber="424242")
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["task"]["mappingStatus"], "Unmapped")

    def test_position_not_allowed_to_log_tasks(self):
        response = self.create_task(user=self.lm)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error_code"], "ERR_FORBIDDEN")

    def test_branch_without_approvers(self):
        lonely = make_user("lonely", UserRole.STAFF, self.other_branch, position="MSO I")

        response = self.create_task(user=lonely)

        self.assertEqual(response.status_code, 422)
        body = response.json()
        self.assertFalse(body["success"])
        self.assertEqual(body["error_code"], "ERR_UNRESOLVED_APPROVER")
        self.assertEqual(body["details"]["role"], "Sub-Team Leader")
        self.assertEqual(DailyTask.objects.count(), 0)

    def test_missing_fields(self):
        response = self.send("post", TASKS_URL, self.mso, {"taskType": "Deposit Mobilization"})
        self.assertEqual(response.status_code, 400)
        self.assertIn("accountNumber", response.json()["details"])

    def test_unknown_task_type(self):
        response = self.create_task(taskType="Coffee Run")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "ERR_VALIDATION")

    def test_numeric_account_number(self):
        response = self.create_task(accountNumber=1000123)

        self.assertEqual(response.status_code, 201)
        task = response.json()["task"]
        self.assertEqual(task["accountNumber"], "1000123")
        self.assertEqual(task["mappingStatus"], "Mapped to You")

    def test_task_date_of_wrong_type(self):
        response = self.create_task(taskDate=[2025, 1, 1])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "ERR_VALIDATION")
        self.assertEqual(DailyTask.objects.count(), 0)

    def test_malformed_body(self):
        self.client.force_login(self.mso)
        response = self.client.post(TASKS_URL, data="{not json", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "ERR_BAD_REQUEST")

    def test_anonymous_request(self):
        response = self.client.get(TASKS_URL)
        self.assertEqual(response.status_code, 401)


class TaskDecisionApiTest(ApiTestBase):

    def setUp(self):
        super().setUp()
        self.task_id = self.create_task().json()["task"]["id"]

    def test_error_codes_along_the_chain(self):
        response = self.decide(self.task_id, self.lm, {"status": "Approved"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error_code"], "ERR_NOT_YOUR_TURN")

        response = self.decide(self.task_id, self.stl, {"status": "Rejected"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "ERR_COMMENTS_REQUIRED")

        response = self.decide(self.task_id, self.stl, {"status": "Pending"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], "ERR_INVALID_DECISION")

        response = self.decide(self.task_id, self.stl, {"status": "Approved", "revision": 1})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["task"]["revision"], 2)

        response = self.decide(self.task_id, self.stl, {"status": "Approved"})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error_code"], "ERR_STEP_ALREADY_DECIDED")

        response = self.decide(self.task_id, self.lm, {"status": "Approved", "revision": 1})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error_code"], "ERR_CONCURRENT_MODIFICATION")

    def test_full_approval_over_post(self):
        with self.captureOnCommitCallbacks(execute=True):
            for approver in (self.stl, self.lm, self.bm):
                response = self.decide(self.task_id, approver, {"status": "Approved"}, method="post")
                self.assertEqual(response.status_code, 200)

        self.assertEqual(response.json()["task"]["approvalStatus"], "Approved")
        self.assertTrue(DailyTask.objects.get(pk=self.task_id).performance_impacted)

    def test_chain_endpoint(self):
        self.decide(self.task_id, self.stl, {"status": "Approved", "comments": "checked"})

        response = self.send("get", f"{TASKS_URL}{self.task_id}/chain/", self.mso)

        self.assertEqual(response.status_code, 200)
        chain = response.json()["chain"]
        self.assertEqual(chain[0]["status"], "Approved")
        self.assertEqual(chain[0]["comments"], "checked")
        self.assertIsNotNone(chain[0]["approvedAt"])
        self.assertEqual(chain[1], {"role": "Line Manager", "status": "Pending", "approvedAt": None, "comments": None})

    def test_pending_lists_follow_the_turn(self):
        stl_pending = self.send("get", f"{TASKS_URL}pending/", self.stl).json()["results"]
        lm_pending = self.send("get", f"{TASKS_URL}pending/", self.lm).json()["results"]

        self.assertEqual([t["id"] for t in stl_pending], [self.task_id])
        self.assertEqual(lm_pending, [])

    def test_resubmit_after_rejection(self):
        self.decide(self.task_id, self.stl, {"status": "Rejected", "comments": "Evidence missing"})

        response = self.send("post", f"{TASKS_URL}{self.task_id}/resubmit/", self.mso)

        self.assertEqual(response.status_code, 200)
        task = response.json()["task"]
        self.assertEqual(task["approvalStatus"], "Pending")
        self.assertEqual(task["revision"], 3)
        self.assertTrue(all(s["status"] == "Pending" for s in task["approvalChain"]))

    def test_resubmit_pending_task(self):
        response = self.send("post", f"{TASKS_URL}{self.task_id}/resubmit/", self.mso)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()["error_code"], "ERR_INVALID_RESUBMISSION")


class TaskVisibilityApiTest(ApiTestBase):

    def setUp(self):
        super().setUp()
        self.task_id = self.create_task().json()["task"]["id"]
        self.outsider = make_user("outsider", UserRole.STAFF, self.other_branch, position="MSO I")

    def test_outsider_cannot_read_task(self):
        response = self.send("get", f"{TASKS_URL}{self.task_id}/", self.outsider)
        self.assertEqual(response.status_code, 403)

    def test_unknown_task(self):
        response = self.send("get", f"{TASKS_URL}999999/", self.mso)
        self.assertEqual(response.status_code, 404)

    def test_list_is_scoped_by_role(self):
        def ids(user):
            return [t["id"] for t in self.send("get", TASKS_URL, user).json()["results"]]

        self.assertEqual(ids(self.mso), [self.task_id])
        self.assertEqual(ids(self.bm), [self.task_id])
        self.assertEqual(ids(self.am), [self.task_id])
        self.assertEqual(ids(self.rd), [self.task_id])
        self.assertEqual(ids(self.admin), [self.task_id])
        self.assertEqual(ids(self.outsider), [])


class BehavioralApiTest(ApiTestBase):

    def evaluation_payload(self, **overrides):
        payload = {
            "evaluatedUserId": self.stl.pk,
            "period": "Quarterly",
            "year": 2025,
            "quarter": 1,
            "competencies": {name: {"score": 4} for name in Settings.DEFAULT_COMPETENCY_WEIGHTS},
            "overallComments": "Solid quarter",
        }
        payload.update(overrides)
        return payload

    def test_branch_manager_evaluation_goes_to_area_manager(self):
        response = self.send("post", BEHAVIORAL_URL, self.bm, self.evaluation_payload())

        self.assertEqual(response.status_code, 201)
        ev = response.json()["evaluation"]
        self.assertEqual(Decimal(ev["totalScore"]), Decimal("12"))
        self.assertEqual([s["role"] for s in ev["approvalChain"]], ["Area Manager"])

        with self.captureOnCommitCallbacks(execute=True):
            response = self.send("put", f"{BEHAVIORAL_URL}{ev['id']}/approve/", self.am, {"status": "Approved"})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["evaluation"]["approvalStatus"], "Approved")
        self.assertTrue(BehavioralEvaluation.objects.get(pk=ev["id"]).is_locked)

    def test_staff_cannot_evaluate(self):
        response = self.send("post", BEHAVIORAL_URL, self.mso, self.evaluation_payload(evaluatedUserId=self.stl.pk))
        self.assertEqual(response.status_code, 403)

    def test_evaluated_user_outside_scope(self):
        outsider = make_user("outsider", UserRole.STAFF, self.other_branch, position="MSO I")
        response = self.send("post", BEHAVIORAL_URL, self.bm, self.evaluation_payload(evaluatedUserId=outsider.pk))
        self.assertEqual(response.status_code, 403)

    def test_invalid_score(self):
        payload = self.evaluation_payload(competencies={"teamwork": {"score": 9}})
        response = self.send("post", BEHAVIORAL_URL, self.bm, payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(BehavioralEvaluation.objects.count(), 0)

    def assert_rejected_payload(self, payload, error_code):
        response = self.send("post", BEHAVIORAL_URL, self.bm, payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error_code"], error_code)
        self.assertEqual(BehavioralEvaluation.objects.count(), 0)

    def test_non_numeric_score(self):
        payload = self.evaluation_payload(competencies={"teamwork": {"score": "high"}})
        self.assert_rejected_payload(payload, "ERR_VALIDATION")

    def test_non_numeric_weight(self):
        payload = self.evaluation_payload(competencies={"teamwork": {"score": 4, "weight": "heavy"}})
        self.assert_rejected_payload(payload, "ERR_VALIDATION")

    def test_competencies_must_be_an_object(self):
        self.assert_rejected_payload(self.evaluation_payload(competencies=[1, 2]), "ERR_VALIDATION")
        self.assert_rejected_payload(self.evaluation_payload(competencies={"teamwork": 4}), "ERR_VALIDATION")

    def test_non_integer_evaluated_user(self):
        self.assert_rejected_payload(self.evaluation_payload(evaluatedUserId="abc"), "ERR_BAD_REQUEST")

    def test_chain_and_pending(self):
        ev_id = self.send("post", BEHAVIORAL_URL, self.bm, self.evaluation_payload()).json()["evaluation"]["id"]

        pending = self.send("get", f"{BEHAVIORAL_URL}pending/", self.am).json()["results"]
        self.assertEqual([e["id"] for e in pending], [ev_id])

        chain = self.send("get", f"{BEHAVIORAL_URL}{ev_id}/chain/", self.stl).json()["chain"]
        self.assertEqual(chain, [{"role": "Area Manager", "status": "Pending", "approvedAt": None, "comments": None}])


class AuditApiTest(ApiTestBase):

    def test_admin_only(self):
        response = self.send("get", AUDIT_URL, self.bm)
        self.assertEqual(response.status_code, 403)

    def test_filters_and_limit(self):
        with self.captureOnCommitCallbacks(execute=True):
            task_id = self.create_task().json()["task"]["id"]
            self.create_task()
            self.decide(task_id, self.stl, {"status": "Approved"})

        response = self.send("get", f"{AUDIT_URL}?action={AuditAction.TASK_CREATED}", self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["count"], 2)

        response = self.send("get", f"{AUDIT_URL}?entity_type=Task&limit=1", self.admin)
        self.assertEqual(response.json()["count"], 1)

        response = self.send("get", f"{AUDIT_URL}?user={self.stl.pk}", self.admin)
        self.assertEqual([e["action"] for e in response.json()["results"]], [AuditAction.TASK_APPROVED])

    def test_bad_date_filter(self):
        response = self.send("get", f"{AUDIT_URL}?start=yesterday", self.admin)
        self.assertEqual(response.status_code, 400)


class CsrfApiTest(ApiTestBase):
    """Session clients echo the csrftoken cookie back in the X-CSRFToken header."""

    def setUp(self):
        super().setUp()
        self.csrf_client = Client(enforce_csrf_checks=True)
        self.csrf_client.force_login(self.mso)

    def post_task(self, **headers):
        payload = {"taskType": "Deposit Mobilization", "accountNumber": "1000123", "amount": "100"}
        return self.csrf_client.post(TASKS_URL, data=json.dumps(payload), content_type="application/json", **headers)

    def test_post_without_token_is_refused(self):
        response = self.post_task()
        self.assertEqual(response.status_code, 403)
        self.assertEqual(DailyTask.objects.count(), 0)

    def test_post_with_token_header(self):
        token = get_random_string(32)
        self.csrf_client.cookies[settings.CSRF_COOKIE_NAME] = token

        response = self.post_task(HTTP_X_CSRFTOKEN=token)

        self.assertEqual(response.status_code, 201)
        self.assertEqual(DailyTask.objects.count(), 1)
