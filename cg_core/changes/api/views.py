# cg_core/changes/api/views.py
from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from cg_core.changes.api.serializers import (
    ChangeProposalSerializer,
    ProposeChangeSerializer,
    ReviewChangeSerializer,
)
from cg_core.changes.fields import get_entity_kind
from cg_core.changes.selectors import list_change_requests, list_proposals
from cg_core.changes.services import ChangeProposalService
from cg_core.iam import permission_codes as codes
from cg_core.iam.permissions import HasPermissionCode
from cg_core.iam.services import PermissionResolver


class EntityChangesView(APIView):
    """
    GET: proposals of one entity, newest first.
    POST: one proposal (object body) or a batch (array body, all-or-nothing).
    """

    @extend_schema(tags=["Changes"], responses={200: ChangeProposalSerializer(many=True)})
    def get(self, request, entity_kind: str, entity_id: UUID):
        definition = get_entity_kind(entity_kind)
        PermissionResolver().check_permission(request.user.id, definition.view_permission)

        qs = list_proposals(entity_kind=definition.kind, entity_id=entity_id)
        return Response(ChangeProposalSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Changes"],
        request=ProposeChangeSerializer,
        responses={201: ChangeProposalSerializer(many=True)},
    )
    def post(self, request, entity_kind: str, entity_id: UUID):
        many = isinstance(request.data, list)
        ser = ProposeChangeSerializer(data=request.data, many=many)
        ser.is_valid(raise_exception=True)

        if many:
            proposals = ChangeProposalService.propose_many(
                actor_id=request.user.id,
                entity_kind=entity_kind,
                entity_id=entity_id,
                changes=ser.validated_data,
                request=request,
            )
            data = ChangeProposalSerializer(proposals, many=True).data
        else:
            proposal = ChangeProposalService.propose(
                actor_id=request.user.id,
                entity_kind=entity_kind,
                entity_id=entity_id,
                request=request,
                **ser.validated_data,
            )
            data = ChangeProposalSerializer(proposal).data

        return Response(data, status=status.HTTP_201_CREATED)


class ChangeReviewView(APIView):
    @extend_schema(tags=["Changes"], request=ReviewChangeSerializer, responses={200: ChangeProposalSerializer})
    def post(self, request, entity_kind: str, entity_id: UUID, proposal_id: UUID):
        ser = ReviewChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        proposal = ChangeProposalService.review(
            reviewer_id=request.user.id,
            entity_kind=entity_kind,
            entity_id=entity_id,
            proposal_id=proposal_id,
            decision=ser.validated_data["decision"],
            note=ser.validated_data.get("note"),
            request=request,
        )
        return Response(ChangeProposalSerializer(proposal).data, status=status.HTTP_200_OK)


class ChangeRequestListView(APIView):
    permission_classes = [HasPermissionCode]
    required_permission = codes.VIEW_PENDING

    @extend_schema(
        tags=["Changes"],
        responses={200: ChangeProposalSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="status",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="PENDING (default), APPROVED, REJECTED or ALL.",
            ),
        ],
    )
    def get(self, request):
        qs = list_change_requests(status=request.query_params.get("status"))
        return Response(ChangeProposalSerializer(qs, many=True).data, status=status.HTTP_200_OK)
