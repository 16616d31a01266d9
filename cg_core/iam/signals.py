from __future__ import annotations

from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from cg_core.iam.models import Role, UserProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def ensure_user_profile(sender, instance, created, **kwargs):
    if not created or kwargs.get("raw"):
        return
    role = Role.CCRO_TEAM if instance.is_superuser else Role.VIEWER
    UserProfile.objects.get_or_create(user=instance, defaults={"role": role})
