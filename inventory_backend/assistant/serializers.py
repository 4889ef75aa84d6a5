# assistant/serializers.py

from rest_framework import serializers

from assistant.services import ACTION_HANDLERS


class AssistantActionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=64)
    args = serializers.DictField(required=False, default=dict)


class AssistantActionResultSerializer(serializers.Serializer):
    action = serializers.ChoiceField(choices=sorted(ACTION_HANDLERS))
    message = serializers.CharField()
    data = serializers.DictField()
