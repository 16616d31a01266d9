# cg_core/iam/management/commands/seed_role_permissions.py

from django.core.management.base import BaseCommand

from cg_core.iam.models import RolePermission
from cg_core.iam.permission_codes import seed_role_permissions


class Command(BaseCommand):
    help = "Ensure default role permissions exist (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--overwrite",
            action="store_true",
            help="Reset existing rows to the default matrix.",
        )

    def handle(self, *args, **options):
        touched = seed_role_permissions(RolePermission, overwrite=options["overwrite"])
        self.stdout.write(self.style.SUCCESS(f"Role permissions ensured. Rows written: {touched}"))
