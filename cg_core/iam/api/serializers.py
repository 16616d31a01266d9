# cg_core/iam/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cg_core.iam.models import Role, RolePermission, UserPermission


class LoginRequestSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField()


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()


class MeUserSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    username = serializers.CharField(allow_null=True, required=False)
    email = serializers.EmailField(allow_null=True, required=False)
    is_superuser = serializers.BooleanField()


class MeResponseSerializer(serializers.Serializer):
    user = MeUserSerializer()
    role = serializers.ChoiceField(choices=Role.choices)
    permissions = serializers.ListField(child=serializers.CharField())


class RolePermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = RolePermission
        fields = ["role", "permission", "granted", "updated_at"]
        read_only_fields = fields


class UserPermissionSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserPermission
        fields = ["user", "permission", "granted", "updated_at"]
        read_only_fields = fields


class RolePermissionsUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)
    permissions = serializers.DictField(child=serializers.BooleanField())


class UserPermissionsUpdateSerializer(serializers.Serializer):
    # null value -> remove the override (inherit from role)
    permissions = serializers.DictField(child=serializers.BooleanField(allow_null=True))


class RoleAssignSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)
