# cg_core/audit/api/views.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from cg_core.audit.api.serializers import AuditLogEntrySerializer, AuditRecordCreateSerializer
from cg_core.audit.models import AuditLogEntry
from cg_core.audit.selectors import entity_history, get_entry, query_audit_log
from cg_core.audit.services import AuditService
from cg_core.common.api.exceptions import ImmutableLedgerError
from cg_core.common.api.pagination import AuditPagination, paginate
from cg_core.iam import permission_codes as codes
from cg_core.iam.permissions import HasPermissionCode

_IMMUTABLE = OpenApiResponse(description="Audit log entries are immutable.")


class AuditLogViewSet(viewsets.GenericViewSet):
    """
    Read + append only. Every mutating verb on an entry answers 405.
    """
    permission_classes = [HasPermissionCode]
    required_permissions = {
        "list": codes.PAGE_AUDIT,
        "retrieve": codes.PAGE_AUDIT,
        "history": codes.PAGE_AUDIT,
    }

    serializer_class = AuditLogEntrySerializer
    queryset = AuditLogEntry.objects.none()

    @extend_schema(
        tags=["Audit"],
        responses={200: AuditLogEntrySerializer(many=True)},
        parameters=[
            OpenApiParameter(name="user", type=OpenApiTypes.INT, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="action", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="entity_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="report_id", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(
                name="date_from",
                type=OpenApiTypes.DATETIME,
                location=OpenApiParameter.QUERY,
                required=False,
                description="ISO 8601, inclusive.",
            ),
            OpenApiParameter(
                name="date_to",
                type=OpenApiTypes.DATETIME,
                location=OpenApiParameter.QUERY,
                required=False,
                description="ISO 8601, inclusive.",
            ),
        ],
    )
    def list(self, request):
        qs = query_audit_log(request.query_params)
        return paginate(request, qs, AuditLogEntrySerializer, paginator=AuditPagination())

    @extend_schema(tags=["Audit"], responses={200: AuditLogEntrySerializer})
    def retrieve(self, request, pk=None):
        return Response(AuditLogEntrySerializer(get_entry(pk)).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Audit"], request=AuditRecordCreateSerializer, responses={201: AuditLogEntrySerializer})
    def create(self, request):
        ser = AuditRecordCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        record = AuditService.record(
            actor_id=request.user.id,
            request=request,
            raise_on_error=True,
            **ser.validated_data,
        )
        return Response(AuditLogEntrySerializer(get_entry(record.id)).data, status=status.HTTP_201_CREATED)

    @extend_schema(tags=["Audit"], request=None, responses={405: _IMMUTABLE})
    def update(self, request, pk=None):
        raise ImmutableLedgerError()

    @extend_schema(tags=["Audit"], request=None, responses={405: _IMMUTABLE})
    def partial_update(self, request, pk=None):
        raise ImmutableLedgerError()

    @extend_schema(tags=["Audit"], request=None, responses={405: _IMMUTABLE})
    def destroy(self, request, pk=None):
        raise ImmutableLedgerError()

    @extend_schema(tags=["Audit"], responses={200: AuditLogEntrySerializer(many=True)})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"history/(?P<entity_type>[\w-]+)/(?P<entity_id>[\w-]+)",
    )
    def history(self, request, entity_type=None, entity_id=None):
        qs = entity_history(entity_type=entity_type, entity_id=entity_id)
        return paginate(request, qs, AuditLogEntrySerializer, paginator=AuditPagination())
