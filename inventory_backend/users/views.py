# users/views.py
"""
USER VIEWS

Tokens are issued by SimpleJWT (/api/auth/jwt/create/).
This module only exposes the current user profile.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle
from rest_framework.views import APIView

from .serializers import UserSerializer


# ---------------- THROTTLES (TARGETED) ----------------
class MeUserThrottle(UserRateThrottle):
    """
    Authenticated user throttling for /me/.
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['user'].
    """
    scope = "user"


# ---------------- CURRENT USER ----------------
class MeView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_classes = [MeUserThrottle]
    serializer_class = UserSerializer

    @extend_schema(
        responses={200: UserSerializer},
        description="Get current authenticated user profile and capabilities",
    )
    def get(self, request):
        return Response(
            {
                "authenticated": True,
                "user": UserSerializer(request.user, context={"request": request}).data,
            },
            status=status.HTTP_200_OK,
        )
