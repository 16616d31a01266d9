# cg_core/api/urls.py
from __future__ import annotations

from django.urls import path
from rest_framework.routers import DefaultRouter

from cg_core.access.api.views import (
    AccessExpireView,
    AccessRequestCancelView,
    AccessRequestDecideView,
    AccessRequestListCreateView,
)
from cg_core.audit.api.views import AuditLogViewSet
from cg_core.changes.api.views import ChangeRequestListView, ChangeReviewView, EntityChangesView
from cg_core.iam.api.auth import LoginView, LogoutView, RefreshView
from cg_core.iam.api.me import MeView
from cg_core.iam.api.views import RolePermissionsView, UserPermissionsView, UserRoleView
from cg_core.registers.api.views import ActionViewSet, ConductBreachViewSet, ControlViewSet, RiskViewSet

router = DefaultRouter()

router.register(r"audit", AuditLogViewSet, basename="audit")
router.register(r"risks", RiskViewSet, basename="risks")
router.register(r"controls", ControlViewSet, basename="controls")
router.register(r"actions", ActionViewSet, basename="actions")
router.register(r"breaches", ConductBreachViewSet, basename="breaches")

urlpatterns = [
    # Auth + /me
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", RefreshView.as_view(), name="refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("me/", MeView.as_view(), name="me"),

    # Permission matrices
    path("permissions/roles/", RolePermissionsView.as_view(), name="role-permissions"),
    path("permissions/users/<int:user_id>/", UserPermissionsView.as_view(), name="user-permissions"),
    path("users/<int:user_id>/role/", UserRoleView.as_view(), name="user-role"),

    # Change proposals
    path("change-requests/", ChangeRequestListView.as_view(), name="change-requests"),
    path(
        "changes/<str:entity_kind>/<uuid:entity_id>/",
        EntityChangesView.as_view(),
        name="entity-changes",
    ),
    path(
        "changes/<str:entity_kind>/<uuid:entity_id>/<uuid:proposal_id>/review/",
        ChangeReviewView.as_view(),
        name="change-review",
    ),

    # Temporary access
    path("access-requests/", AccessRequestListCreateView.as_view(), name="access-requests"),
    path("access-requests/expire/", AccessExpireView.as_view(), name="access-requests-expire"),
    path(
        "access-requests/<uuid:request_id>/decide/",
        AccessRequestDecideView.as_view(),
        name="access-request-decide",
    ),
    path(
        "access-requests/<uuid:request_id>/cancel/",
        AccessRequestCancelView.as_view(),
        name="access-request-cancel",
    ),

    # Router URLs last (so explicit paths win if ever overlapping)
    *router.urls,
]
