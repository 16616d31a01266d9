from rest_framework import serializers

from cg_core.audit.models import AuditLogEntry


class AuditLogEntrySerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True, allow_null=True)
    username = serializers.CharField(source="user.username", read_only=True, allow_null=True)

    class Meta:
        model = AuditLogEntry
        fields = [
            "id",
            "user_id",
            "username",
            "user_role",
            "action",
            "entity_type",
            "entity_id",
            "changes",
            "report_id",
            "ip_address",
            "user_agent",
            "timestamp",
        ]
        read_only_fields = fields


class AuditRecordCreateSerializer(serializers.Serializer):
    """
    Client-reported events. Actor and timestamp are always taken from the server.
    """
    action = serializers.CharField(max_length=64)
    entity_type = serializers.CharField(max_length=64)
    entity_id = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    changes = serializers.JSONField(required=False, allow_null=True, default=None)
    report_id = serializers.CharField(max_length=64, required=False, allow_null=True, default=None)
