# core/management/commands/import_staff.py
from __future__ import annotations

from dataclasses import dataclass

import pandas as pd
from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from core.approval.roles import UserRole, normalize_role, role_for_position
from core.models import Area, Branch, EmployeeProfile, Region

REQUIRED_COLUMNS = ["employee_id", "name"]
OPTIONAL_COLUMNS = ["email", "role", "position", "branch_code", "branch_name", "sub_team", "area", "region"]


def clean(value) -> str:
    s = ("" if value is None else str(value)).strip()
    # employee ids typed as numbers come back as "1234.0"
    return s[:-2] if s.endswith(".0") and s[:-2].isdigit() else s


@dataclass
class StaffRow:
    line: int
    employee_id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    position: str
    branch_code: str
    branch_name: str
    sub_team: str
    area: str
    region: str


class Command(BaseCommand):
    help = (
        "Import staff from an Excel (.xlsx) sheet. "
        "Columns: employee_id, name, email, role|position, branch_code, branch_name, sub_team, area, region. "
        "Username = employee_id; regions, areas and branches are created when missing."
    )

    def add_arguments(self, parser):
        parser.add_argument("excel", type=str, help="Path to Excel file (.xlsx)")
        parser.add_argument("--sheet", type=str, default=0, help="Worksheet name (default: first sheet)")
        parser.add_argument("--dry-run", action="store_true", help="Parse and validate only; roll back all changes")

    def handle(self, *args, **opts):
        excel: str = opts["excel"]
        sheet = opts["sheet"]
        dry_run: bool = bool(opts.get("dry_run"))

        try:
            df = pd.read_excel(excel, sheet_name=sheet, dtype=str, engine="openpyxl").fillna("")
        except FileNotFoundError:
            raise CommandError(f"Excel file not found: {excel}")
        except Exception as e:
            raise CommandError(f"Cannot read Excel: {e}")

        df.columns = [str(c).strip().lower() for c in df.columns]
        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise CommandError(f"Missing required columns: {missing}. Found: {list(df.columns)}")
        if "role" not in df.columns and "position" not in df.columns:
            raise CommandError("Either a 'role' or a 'position' column is required.")
        for c in OPTIONAL_COLUMNS:
            if c not in df.columns:
                df[c] = ""

        rows, errors = self.parse_rows(df)
        for err in errors:
            self.stderr.write(self.style.WARNING(err))

        created = updated = 0
        with transaction.atomic():
            for row in rows:
                if self.import_one(row):
                    created += 1
                else:
                    updated += 1
            if dry_run:
                transaction.set_rollback(True)

        summary = f"{created} created, {updated} updated, {len(errors)} skipped"
        if dry_run:
            self.stdout.write(self.style.WARNING(f"Dry run (rolled back): {summary}"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Staff import done: {summary}"))

    # --------------------------------------------------
    def parse_rows(self, df):
        rows, errors = [], []
        for i, rec in enumerate(df.to_dict("records"), start=2):
            employee_id = clean(rec["employee_id"])
            if not employee_id:
                continue

            raw_role = clean(rec.get("role"))
            position = clean(rec.get("position"))
            role = normalize_role(raw_role) if raw_role else role_for_position(position)
            if not isinstance(role, UserRole):
                errors.append(f"Row {i}: unknown role {raw_role or position!r} for {employee_id}")
                continue

            branch_code = clean(rec.get("branch_code"))
            if role.value in EmployeeProfile.BRANCH_ROLES and not branch_code:
                errors.append(f"Row {i}: branch_code is required for role {role.value} ({employee_id})")
                continue

            first, _, last = clean(rec["name"]).partition(" ")
            rows.append(StaffRow(
                line=i,
                employee_id=employee_id,
                first_name=first,
                last_name=last.strip(),
                email=clean(rec.get("email")),
                role=role,
                position=position,
                branch_code=branch_code,
                branch_name=clean(rec.get("branch_name")),
                sub_team=clean(rec.get("sub_team")),
                area=clean(rec.get("area")),
                region=clean(rec.get("region")),
            ))
        return rows, errors

    def import_one(self, row: StaffRow) -> bool:
        """Upsert one user + profile; True when the user is new."""
        region = Region.objects.get_or_create(name=row.region)[0] if row.region else None
        area = Area.objects.get_or_create(name=row.area, region=region)[0] if row.area else None

        branch = None
        if row.branch_code:
            branch, made = Branch.objects.get_or_create(
                code=row.branch_code,
                defaults={"name": row.branch_name or row.branch_code, "area": area},
            )
            if not made and area and branch.area_id is None:
                branch.area = area
                branch.save(update_fields=["area"])

        user, created = User.objects.get_or_create(
            username=row.employee_id,
            defaults={
                "first_name": row.first_name,
                "last_name": row.last_name,
                "email": row.email,
                "is_active": True,
            },
        )
        if created:
            user.set_unusable_password()
            user.save()
        else:
            changed = False
            for field in ("first_name", "last_name", "email"):
                value = getattr(row, field)
                if value and getattr(user, field) != value:
                    setattr(user, field, value)
                    changed = True
            if changed:
                user.save()

        EmployeeProfile.objects.update_or_create(
            user=user,
            defaults={
                "employee_id": row.employee_id,
                "role": row.role.value,
                "position": row.position,
                "branch": branch,
                "sub_team": row.sub_team,
                "area": area if row.role == UserRole.AREA_MANAGER else None,
                "region": region if row.role == UserRole.REGIONAL_DIRECTOR else None,
            },
        )
        return created
