# cg_core/access/management/commands/expire_access_grants.py

from django.core.management.base import BaseCommand

from cg_core.access.services import AccessGrantService


class Command(BaseCommand):
    help = "Expire approved access grants past granted_until and revoke their overrides. Safe to run concurrently."

    def handle(self, *args, **options):
        expired = AccessGrantService.sweep_expired()
        self.stdout.write(self.style.SUCCESS(f"Access grants expired: {expired}"))
