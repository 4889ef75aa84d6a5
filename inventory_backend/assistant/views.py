# assistant/views.py

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from assistant.serializers import AssistantActionResultSerializer, AssistantActionSerializer
from assistant.services import execute_action
from inventory.services.errors import LedgerError
from inventory.views.errors import ledger_error_response
from permissions.roles import CAP_ASSISTANT_USE, HasCapability, effective_capabilities_for


class AssistantActionView(GenericAPIView):
    """
    Execute one confirmed assistant action.

    The response message is what the chat shows back to the user.
    """

    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_ASSISTANT_USE

    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "assistant"

    serializer_class = AssistantActionSerializer

    @extend_schema(
        tags=["assistant"],
        request=AssistantActionSerializer,
        responses={200: AssistantActionResultSerializer},
    )
    def post(self, request):
        s = AssistantActionSerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            result = execute_action(
                name=s.validated_data["name"],
                args=s.validated_data.get("args") or {},
                user=request.user,
                capabilities=effective_capabilities_for(request, request.user),
            )
        except LedgerError as exc:
            return ledger_error_response(exc, request=request)

        return Response(
            {"action": result.action, "message": result.message, "data": result.data},
            status=status.HTTP_200_OK,
        )
