# cg_core/registers/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cg_core.registers.models import Action, Control, ConductBreach, Risk


class RiskSerializer(serializers.ModelSerializer):
    inherent_score = serializers.IntegerField(read_only=True)
    residual_score = serializers.IntegerField(read_only=True)

    class Meta:
        model = Risk
        fields = [
            "id",
            "reference",
            "name",
            "description",
            "owner",
            "inherent_likelihood",
            "inherent_impact",
            "inherent_score",
            "residual_likelihood",
            "residual_impact",
            "residual_score",
            "review_frequency_days",
            "review_requested",
            "last_reviewed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RiskCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Risk
        fields = [
            "name",
            "description",
            "owner",
            "inherent_likelihood",
            "inherent_impact",
            "residual_likelihood",
            "residual_impact",
            "review_frequency_days",
        ]


class ControlSerializer(serializers.ModelSerializer):
    class Meta:
        model = Control
        fields = [
            "id",
            "control_ref",
            "control_name",
            "control_description",
            "control_owner",
            "consumer_duty_outcome",
            "control_frequency",
            "control_type",
            "internal_or_third_party",
            "standing_comments",
            "business_area",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ControlCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Control
        fields = [
            "control_name",
            "control_description",
            "control_owner",
            "consumer_duty_outcome",
            "control_frequency",
            "control_type",
            "internal_or_third_party",
            "standing_comments",
            "business_area",
        ]


class ActionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Action
        fields = [
            "id",
            "reference",
            "title",
            "description",
            "status",
            "assigned_to",
            "due_date",
            "completed_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ActionCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Action
        fields = ["title", "description", "assigned_to", "due_date"]


class ConductBreachSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConductBreach
        fields = ["id", "reference", "title", "description", "status", "closed_at", "created_at", "updated_at"]
        read_only_fields = fields


class ConductBreachCreateSerializer(serializers.ModelSerializer):
    class Meta:
        model = ConductBreach
        fields = ["title", "description"]
