# requisitions/urls.py

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from requisitions.views import RequisitionViewSet

router = SimpleRouter()
router.register(r"", RequisitionViewSet, basename="requisitions")

urlpatterns = [
    path("", include(router.urls)),
]
