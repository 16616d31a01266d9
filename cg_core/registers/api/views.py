# cg_core/registers/api/views.py
from __future__ import annotations

from drf_spectacular.utils import extend_schema, extend_schema_view
from rest_framework import status, viewsets
from rest_framework.response import Response

from cg_core.common.api.pagination import paginate
from cg_core.iam import permission_codes as codes
from cg_core.iam.permissions import HasPermissionCode
from cg_core.registers.api.serializers import (
    ActionCreateSerializer,
    ActionSerializer,
    ConductBreachCreateSerializer,
    ConductBreachSerializer,
    ControlCreateSerializer,
    ControlSerializer,
    RiskCreateSerializer,
    RiskSerializer,
)
from cg_core.registers.models import Action, Control, ConductBreach, Risk
from cg_core.registers.selectors import get_record, list_records
from cg_core.registers.services import RegisterService


class _RegisterViewSet(viewsets.GenericViewSet):
    """
    Thin API layer: list/retrieve via selectors, create via RegisterService.
    The service re-checks the create permission; the view gate only covers reads.
    """
    permission_classes = [HasPermissionCode]

    model = None
    view_permission: str = ""
    create_serializer_class = None

    @property
    def required_permissions(self):
        return {"list": self.view_permission, "retrieve": self.view_permission}

    def get_queryset(self):
        return self.model.objects.all()

    def _create(self, **values):
        raise NotImplementedError

    def list(self, request):
        qs = list_records(self.model, status=request.query_params.get("status") or None)
        return paginate(request, qs, self.serializer_class)

    def retrieve(self, request, pk=None):
        return Response(self.serializer_class(get_record(self.model, pk)).data, status=status.HTTP_200_OK)

    def create(self, request):
        ser = self.create_serializer_class(data=request.data)
        ser.is_valid(raise_exception=True)
        obj = self._create(actor_id=request.user.id, request=request, **ser.validated_data)
        return Response(self.serializer_class(obj).data, status=status.HTTP_201_CREATED)


@extend_schema_view(
    list=extend_schema(tags=["Registers"]),
    retrieve=extend_schema(tags=["Registers"]),
    create=extend_schema(tags=["Registers"], request=RiskCreateSerializer, responses={201: RiskSerializer}),
)
class RiskViewSet(_RegisterViewSet):
    model = Risk
    serializer_class = RiskSerializer
    create_serializer_class = RiskCreateSerializer
    view_permission = codes.PAGE_RISK_REGISTER

    def _create(self, **values):
        return RegisterService.create_risk(**values)


@extend_schema_view(
    list=extend_schema(tags=["Registers"]),
    retrieve=extend_schema(tags=["Registers"]),
    create=extend_schema(tags=["Registers"], request=ControlCreateSerializer, responses={201: ControlSerializer}),
)
class ControlViewSet(_RegisterViewSet):
    model = Control
    serializer_class = ControlSerializer
    create_serializer_class = ControlCreateSerializer
    view_permission = codes.PAGE_CONTROLS

    def _create(self, **values):
        return RegisterService.create_control(**values)


@extend_schema_view(
    list=extend_schema(tags=["Registers"]),
    retrieve=extend_schema(tags=["Registers"]),
    create=extend_schema(tags=["Registers"], request=ActionCreateSerializer, responses={201: ActionSerializer}),
)
class ActionViewSet(_RegisterViewSet):
    model = Action
    serializer_class = ActionSerializer
    create_serializer_class = ActionCreateSerializer
    view_permission = codes.PAGE_ACTIONS

    def _create(self, **values):
        return RegisterService.create_action(**values)


@extend_schema_view(
    list=extend_schema(tags=["Registers"]),
    retrieve=extend_schema(tags=["Registers"]),
    create=extend_schema(
        tags=["Registers"], request=ConductBreachCreateSerializer, responses={201: ConductBreachSerializer}
    ),
)
class ConductBreachViewSet(_RegisterViewSet):
    model = ConductBreach
    serializer_class = ConductBreachSerializer
    create_serializer_class = ConductBreachCreateSerializer
    view_permission = codes.PAGE_SMCR

    def _create(self, **values):
        return RegisterService.create_breach(**values)
