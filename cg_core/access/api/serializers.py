# cg_core/access/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cg_core.access.models import AccessRequest


class AccessRequestSerializer(serializers.ModelSerializer):
    requester_name = serializers.CharField(source="requester.username", read_only=True)
    reviewed_by_name = serializers.CharField(source="reviewed_by.username", read_only=True, allow_null=True)

    class Meta:
        model = AccessRequest
        fields = [
            "id",
            "requester",
            "requester_name",
            "permission",
            "reason",
            "duration_hours",
            "entity_type",
            "entity_id",
            "entity_name",
            "status",
            "reviewed_by",
            "reviewed_by_name",
            "reviewed_at",
            "review_note",
            "granted_until",
            "created_at",
        ]
        read_only_fields = fields


class AccessRequestCreateSerializer(serializers.Serializer):
    """
    Shape only; code, reason and duration limits are enforced by AccessGrantService.
    """
    permission = serializers.CharField(max_length=64)
    reason = serializers.CharField(allow_blank=True, trim_whitespace=False)
    duration_hours = serializers.IntegerField()
    entity_type = serializers.CharField(max_length=32, required=False, allow_blank=True, allow_null=True)
    entity_id = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    entity_name = serializers.CharField(max_length=255, required=False, allow_blank=True, allow_null=True)


class AccessDecisionSerializer(serializers.Serializer):
    approve = serializers.BooleanField()
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ExpireResponseSerializer(serializers.Serializer):
    expired = serializers.IntegerField()
