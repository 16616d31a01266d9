# cg_core/changes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cg_core.changes.models import ChangeProposal, ProposalStatus


class ChangeProposalSerializer(serializers.ModelSerializer):
    proposed_by_name = serializers.CharField(source="proposed_by.username", read_only=True)
    reviewed_by_name = serializers.CharField(source="reviewed_by.username", read_only=True, allow_null=True)

    class Meta:
        model = ChangeProposal
        fields = [
            "id",
            "entity_kind",
            "entity_id",
            "field_name",
            "old_value",
            "new_value",
            "rationale",
            "status",
            "proposed_by",
            "proposed_by_name",
            "proposed_at",
            "reviewed_by",
            "reviewed_by_name",
            "reviewed_at",
            "review_note",
            "applied",
        ]
        read_only_fields = fields


class ProposeChangeSerializer(serializers.Serializer):
    """
    old_value/new_value accept any JSON scalar; they are stored as text.
    """
    field_name = serializers.CharField(max_length=64)
    old_value = serializers.JSONField(required=False, allow_null=True, default=None)
    new_value = serializers.JSONField(required=False, allow_null=True, default=None)
    rationale = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)

    def _scalar(self, value, field):
        if isinstance(value, (dict, list)):
            raise serializers.ValidationError({field: "Must be a string, number, boolean or null."})
        return value

    def validate(self, attrs):
        attrs["old_value"] = self._scalar(attrs.get("old_value"), "old_value")
        attrs["new_value"] = self._scalar(attrs.get("new_value"), "new_value")
        return attrs


class ReviewChangeSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=[ProposalStatus.APPROVED, ProposalStatus.REJECTED])
    note = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)
