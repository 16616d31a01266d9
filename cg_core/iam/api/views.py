# cg_core/iam/api/views.py
from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from cg_core.iam import permission_codes as codes
from cg_core.iam.api.serializers import (
    RoleAssignSerializer,
    RolePermissionSerializer,
    RolePermissionsUpdateSerializer,
    UserPermissionSerializer,
    UserPermissionsUpdateSerializer,
)
from cg_core.iam.permissions import HasPermissionCode
from cg_core.iam.selectors import list_role_permissions, list_user_permissions
from cg_core.iam.services import PermissionService


class RolePermissionsView(APIView):
    """
    GET: role matrix (optionally ?role=OWNER).
    PUT: {"role": "...", "permissions": {"code": bool}} (can:manage-users).
    """
    permission_classes = [HasPermissionCode]
    required_permission = codes.PAGE_USERS

    @extend_schema(
        tags=["IAM"],
        parameters=[OpenApiParameter(name="role", type=str, location=OpenApiParameter.QUERY, required=False)],
        responses={200: RolePermissionSerializer(many=True)},
    )
    def get(self, request):
        qs = list_role_permissions(role=request.query_params.get("role") or None)
        return Response(RolePermissionSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=RolePermissionsUpdateSerializer, responses={200: RolePermissionSerializer(many=True)})
    def put(self, request):
        ser = RolePermissionsUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        PermissionService.set_role_permissions(
            actor_id=request.user.id,
            role=ser.validated_data["role"],
            permissions=ser.validated_data["permissions"],
            request=request,
        )
        qs = list_role_permissions(role=ser.validated_data["role"])
        return Response(RolePermissionSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class UserPermissionsView(APIView):
    """
    GET: overrides of one user.
    PUT: {"permissions": {"code": true|false|null}}; null removes the override.
    """
    permission_classes = [HasPermissionCode]
    required_permission = codes.PAGE_USERS

    @extend_schema(tags=["IAM"], responses={200: UserPermissionSerializer(many=True)})
    def get(self, request, user_id: int):
        qs = list_user_permissions(user_id=user_id)
        return Response(UserPermissionSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["IAM"], request=UserPermissionsUpdateSerializer, responses={200: UserPermissionSerializer(many=True)})
    def put(self, request, user_id: int):
        ser = UserPermissionsUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        PermissionService.set_user_permissions(
            actor_id=request.user.id,
            user_id=user_id,
            permissions=ser.validated_data["permissions"],
            request=request,
        )
        qs = list_user_permissions(user_id=user_id)
        return Response(UserPermissionSerializer(qs, many=True).data, status=status.HTTP_200_OK)


class UserRoleView(APIView):
    @extend_schema(tags=["IAM"], request=RoleAssignSerializer, responses={200: RoleAssignSerializer})
    def put(self, request, user_id: int):
        ser = RoleAssignSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        profile = PermissionService.assign_role(
            actor_id=request.user.id,
            user_id=user_id,
            role=ser.validated_data["role"],
            request=request,
        )
        return Response({"role": profile.role}, status=status.HTTP_200_OK)
