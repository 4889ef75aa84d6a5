# assistant/urls.py

from django.urls import path

from assistant.views import AssistantActionView

urlpatterns = [
    path("actions/", AssistantActionView.as_view(), name="assistant-actions"),
]
