# production/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from production.views import ProductionViewSet

router = SimpleRouter()
router.register(r"", ProductionViewSet, basename="production")

urlpatterns = [
    path("", include(router.urls)),
]
