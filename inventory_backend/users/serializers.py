from django.contrib.auth import get_user_model
from rest_framework import serializers

from permissions.roles import effective_capabilities_for

User = get_user_model()


# ---------------- USER OUTPUT ----------------
class UserSerializer(serializers.ModelSerializer):
    """
    Safe user representation for frontend consumption.
    Capabilities let the client hide actions the role cannot perform.
    """
    capabilities = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            "id",
            "email",
            "first_name",
            "last_name",
            "role",
            "capabilities",
        ]

    def get_capabilities(self, obj) -> list[str]:
        request = self.context.get("request")
        return sorted(effective_capabilities_for(request, obj))
