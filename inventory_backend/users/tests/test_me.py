# users/tests/test_me.py

from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from permissions.roles import (
    CAP_INVENTORY_ADJUST,
    CAP_INVENTORY_VIEW,
    CAP_SETTINGS_MANAGE,
    ROLE_ALMACENISTA,
    ROLE_JEFE,
)

User = get_user_model()


class MeEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_requires_authentication(self):
        response = self.client.get("/api/auth/me/")
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_storekeeper_capabilities(self):
        user = User.objects.create_user(
            email="almacen@example.com", password="password123", role=ROLE_ALMACENISTA
        )
        self.client.force_authenticate(user)

        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["authenticated"])
        self.assertEqual(response.data["user"]["role"], ROLE_ALMACENISTA)
        caps = response.data["user"]["capabilities"]
        self.assertIn(CAP_INVENTORY_VIEW, caps)
        self.assertNotIn(CAP_INVENTORY_ADJUST, caps)
        self.assertNotIn(CAP_SETTINGS_MANAGE, caps)

    def test_jwt_login_flow(self):
        User.objects.create_user(email="jefe@example.com", password="password123", role=ROLE_JEFE)

        tokens = self.client.post(
            "/api/auth/jwt/create/",
            {"email": "jefe@example.com", "password": "password123"},
            format="json",
        )
        self.assertEqual(tokens.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens.data['access']}")
        response = self.client.get("/api/auth/me/")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn(CAP_SETTINGS_MANAGE, response.data["user"]["capabilities"])


class UserManagerTests(TestCase):
    def test_default_role_is_storekeeper(self):
        user = User.objects.create_user(email="nuevo@example.com", password="password123")
        self.assertEqual(user.role, ROLE_ALMACENISTA)

    def test_superuser_is_jefe(self):
        user = User.objects.create_superuser(email="admin@example.com", password="password123")
        self.assertEqual(user.role, ROLE_JEFE)
        self.assertTrue(user.is_staff)

    def test_seed_users_command(self):
        call_command("seed_users", stdout=StringIO())
        call_command("seed_users", stdout=StringIO())

        self.assertEqual(User.objects.count(), 3)
        self.assertTrue(User.objects.get(email="jefe@example.com").is_superuser)


class HealthCheckTests(TestCase):
    def test_health_is_public(self):
        response = APIClient().get("/api/health/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {"status": "ok", "db": "ok"})
