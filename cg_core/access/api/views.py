# cg_core/access/api/views.py
from __future__ import annotations

from uuid import UUID

from django.conf import settings
from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from cg_core.access.api.serializers import (
    AccessDecisionSerializer,
    AccessRequestCreateSerializer,
    AccessRequestSerializer,
    ExpireResponseSerializer,
)
from cg_core.access.selectors import list_requests
from cg_core.access.services import AccessGrantService
from cg_core.common.api.pagination import paginate
from cg_core.iam.permissions import HasRole


class AccessRequestListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["Access"],
        responses={200: AccessRequestSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="PENDING, APPROVED, REJECTED, EXPIRED or CANCELLED.",
            ),
        ],
    )
    def get(self, request):
        qs = list_requests(actor_id=request.user.id, status=request.query_params.get("status"))
        return paginate(request, qs, AccessRequestSerializer)

    @extend_schema(tags=["Access"], request=AccessRequestCreateSerializer, responses={201: AccessRequestSerializer})
    def post(self, request):
        ser = AccessRequestCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        access_request = AccessGrantService.request_access(
            requester_id=request.user.id,
            request=request,
            **ser.validated_data,
        )
        return Response(AccessRequestSerializer(access_request).data, status=status.HTTP_201_CREATED)


class AccessRequestDecideView(APIView):
    @extend_schema(tags=["Access"], request=AccessDecisionSerializer, responses={200: AccessRequestSerializer})
    def post(self, request, request_id: UUID):
        ser = AccessDecisionSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        access_request = AccessGrantService.decide(
            reviewer_id=request.user.id,
            request_id=request_id,
            approve=ser.validated_data["approve"],
            note=ser.validated_data.get("note"),
            request=request,
        )
        return Response(AccessRequestSerializer(access_request).data, status=status.HTTP_200_OK)


class AccessRequestCancelView(APIView):
    @extend_schema(tags=["Access"], request=None, responses={200: AccessRequestSerializer})
    def post(self, request, request_id: UUID):
        access_request = AccessGrantService.cancel(
            requester_id=request.user.id,
            request_id=request_id,
            request=request,
        )
        return Response(AccessRequestSerializer(access_request).data, status=status.HTTP_200_OK)


class AccessExpireView(APIView):
    """
    Manual trigger of the expiry sweep (the scheduled path is the
    expire_access_grants management command).
    """
    permission_classes = [HasRole]

    @property
    def required_role(self) -> str:
        return getattr(settings, "ACCESS_REVIEWER_ROLE", "CCRO_TEAM")

    @extend_schema(tags=["Access"], request=None, responses={200: ExpireResponseSerializer})
    def post(self, request):
        expired = AccessGrantService.sweep_expired()
        return Response({"expired": expired}, status=status.HTTP_200_OK)
