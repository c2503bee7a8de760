import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


APPROVAL_STATUS_CHOICES = [
    ("Draft", "Draft"),
    ("Pending", "Pending"),
    ("Approved", "Approved"),
    ("Rejected", "Rejected"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Region",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("code", models.CharField(blank=True, default="", max_length=20)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Area",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("region", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                                             related_name="areas", to="core.region")),
            ],
            options={
                "ordering": ["name"],
                "unique_together": {("region", "name")},
            },
        ),
        migrations.CreateModel(
            name="Branch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=150)),
                ("code", models.CharField(max_length=20, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("area", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                                           related_name="branches", to="core.area")),
            ],
            options={
                "verbose_name_plural": "Branches",
                "ordering": ["code"],
            },
        ),
        migrations.CreateModel(
            name="EmployeeProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("employee_id", models.CharField(db_index=True, max_length=50, unique=True)),
                ("role", models.CharField(
                    choices=[
                        ("admin", "SAKO HQ / Admin"),
                        ("regionalDirector", "Regional Director"),
                        ("areaManager", "Area Manager"),
                        ("branchManager", "Branch Manager"),
                        ("lineManager", "Line Manager"),
                        ("subTeamLeader", "Sub-Team Leader"),
                        ("staff", "Staff / MSO"),
                    ],
                    default="staff",
                    max_length=32,
                )),
                ("position", models.CharField(
                    blank=True,
                    choices=[
                        ("Branch Manager", "Branch Manager"),
                        ("MSM", "Member Service Manager (MSM)"),
                        ("Accountant", "Accountant"),
                        ("Auditor", "Auditor"),
                        ("MSO I", "MSO I"),
                        ("MSO II", "MSO II"),
                        ("MSO III", "MSO III"),
                    ],
                    default="",
                    max_length=32,
                )),
                ("sub_team", models.CharField(blank=True, default="", max_length=50)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE,
                                              related_name="employee_profile", to=settings.AUTH_USER_MODEL)),
                ("branch", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                             related_name="employees", to="core.branch")),
                ("area", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                           related_name="managers", to="core.area")),
                ("region", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                             related_name="directors", to="core.region")),
            ],
            options={
                "verbose_name": "Employee Profile",
                "verbose_name_plural": "Employee Profiles",
                "ordering": ["user__last_name", "user__first_name", "employee_id"],
            },
        ),
        migrations.CreateModel(
            name="AccountMapping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_number", models.CharField(max_length=50, unique=True)),
                ("customer_name", models.CharField(max_length=255)),
                ("account_type", models.CharField(
                    choices=[
                        ("Savings", "Savings"),
                        ("Current", "Current"),
                        ("Fixed Deposit", "Fixed Deposit"),
                        ("Recurring Deposit", "Recurring Deposit"),
                        ("Loan", "Loan"),
                    ],
                    default="Savings",
                    max_length=32,
                )),
                ("june_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("current_balance", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("mapped_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("status", models.CharField(
                    choices=[("Active", "Active"), ("Inactive", "Inactive"), ("Transferred", "Transferred")],
                    default="Active",
                    max_length=16,
                )),
                ("notes", models.TextField(blank=True, default="")),
                ("mapped_to", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                related_name="mapped_accounts", to=settings.AUTH_USER_MODEL)),
                ("branch", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                             related_name="account_mappings", to="core.branch")),
                ("mapped_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                                related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["mapped_to", "branch", "status"], name="acctmap_owner_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="DailyTask",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("approval_status", models.CharField(choices=APPROVAL_STATUS_CHOICES, db_index=True,
                                                     default="Draft", max_length=16)),
                ("approval_chain", models.JSONField(blank=True, default=list)),
                ("revision", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("task_type", models.CharField(
                    choices=[
                        ("Deposit Mobilization", "Deposit Mobilization"),
                        ("Loan Follow-up", "Loan Follow-up"),
                        ("New Customer", "New Customer"),
                        ("Digital Activation", "Digital Activation"),
                        ("Member Registration", "Member Registration"),
                        ("Shareholder Recruitment", "Shareholder Recruitment"),
                    ],
                    max_length=50,
                )),
                ("product_type", models.CharField(blank=True, default="", max_length=100)),
                ("account_number", models.CharField(max_length=50)),
                ("amount", models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ("remarks", models.TextField(blank=True, default="")),
                ("evidence", models.CharField(blank=True, default="", max_length=500)),
                ("mapping_status", models.CharField(
                    choices=[
                        ("Mapped to You", "Mapped to You"),
                        ("Mapped to Another Staff", "Mapped to Another Staff"),
                        ("Unmapped", "Unmapped"),
                    ],
                    max_length=32,
                )),
                ("cbs_validated", models.BooleanField(default=False)),
                ("cbs_validated_at", models.DateTimeField(blank=True, null=True)),
                ("task_date", models.DateField(default=django.utils.timezone.localdate)),
                ("performance_impacted", models.BooleanField(default=False)),
                ("performance_impacted_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                   related_name="dailytask_submitted", to=settings.AUTH_USER_MODEL)),
                ("branch", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                             related_name="dailytask_items", to="core.branch")),
                ("account", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                              related_name="tasks", to="core.accountmapping")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["submitted_by", "task_date"], name="task_submitter_date_idx"),
                    models.Index(fields=["branch", "task_date"], name="task_branch_date_idx"),
                    models.Index(fields=["approval_status", "branch"], name="task_status_branch_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="BehavioralEvaluation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("approval_status", models.CharField(choices=APPROVAL_STATUS_CHOICES, db_index=True,
                                                     default="Draft", max_length=16)),
                ("approval_chain", models.JSONField(blank=True, default=list)),
                ("revision", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("period", models.CharField(
                    choices=[("Monthly", "Monthly"), ("Quarterly", "Quarterly"), ("Annual", "Annual")],
                    max_length=16,
                )),
                ("year", models.PositiveIntegerField()),
                ("quarter", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("month", models.PositiveSmallIntegerField(blank=True, null=True)),
                ("competencies", models.JSONField(blank=True, default=dict)),
                ("total_score", models.DecimalField(decimal_places=2, default=0, max_digits=6)),
                ("overall_comments", models.TextField(blank=True, default="")),
                ("is_locked", models.BooleanField(default=False)),
                ("locked_at", models.DateTimeField(blank=True, null=True)),
                ("submitted_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                   related_name="behavioralevaluation_submitted",
                                                   to=settings.AUTH_USER_MODEL)),
                ("branch", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                             related_name="behavioralevaluation_items", to="core.branch")),
                ("evaluated_user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT,
                                                     related_name="behavioral_evaluations",
                                                     to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["evaluated_user", "period", "year", "month"], name="beheval_user_period_idx"),
                    models.Index(fields=["branch", "approval_status"], name="beheval_branch_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="AuditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("action", models.CharField(
                    choices=[
                        ("Plan Upload", "Plan Upload"),
                        ("User Created", "User Created"),
                        ("User Updated", "User Updated"),
                        ("Mapping Created", "Mapping Created"),
                        ("Mapping Updated", "Mapping Updated"),
                        ("Task Created", "Task Created"),
                        ("Task Approved", "Task Approved"),
                        ("Task Rejected", "Task Rejected"),
                        ("Approval", "Approval"),
                        ("Behavioral Evaluation", "Behavioral Evaluation"),
                        ("Resubmitted", "Resubmitted"),
                        ("Login", "Login"),
                        ("Logout", "Logout"),
                    ],
                    max_length=50,
                )),
                ("entity_type", models.CharField(
                    blank=True,
                    choices=[
                        ("Task", "Task"),
                        ("Evaluation", "Evaluation"),
                        ("Mapping", "Mapping"),
                        ("User", "User"),
                        ("System", "System"),
                    ],
                    default="",
                    max_length=20,
                )),
                ("entity_id", models.CharField(blank=True, default="", max_length=64)),
                ("entity_name", models.CharField(blank=True, default="", max_length=255)),
                ("details", models.TextField(blank=True, default="")),
                ("ip_address", models.GenericIPAddressField(blank=True, null=True)),
                ("user_agent", models.CharField(blank=True, default="", max_length=500)),
                ("metadata", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                                           related_name="audit_logs", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["user", "created_at"], name="audit_user_created_idx"),
                    models.Index(fields=["action", "created_at"], name="audit_action_created_idx"),
                    models.Index(fields=["entity_type", "entity_id"], name="audit_entity_idx"),
                ],
            },
        ),
    ]
