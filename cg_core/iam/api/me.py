# cg_core/iam/api/me.py

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cg_core.iam.api.serializers import MeResponseSerializer
from cg_core.iam.services import PermissionResolver


class MeView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(responses={200: MeResponseSerializer}, tags=["IAM"])
    def get(self, request):
        """
        Returns user info, role and the effective permission codes for UI gating.
        """
        resolver = PermissionResolver()
        permissions = sorted(resolver.resolve_all(request.user.id))
        role = resolver.role_of(request.user.id)

        return Response(
            {
                "user": {
                    "id": request.user.id,
                    "username": getattr(request.user, "username", None),
                    "email": getattr(request.user, "email", None) or None,
                    "is_superuser": bool(getattr(request.user, "is_superuser", False)),
                },
                "role": role,
                "permissions": permissions,
            },
            status=status.HTTP_200_OK,
        )
