"""
URL configuration for the rule-service callbacks called by the workflow engine.
"""

from django.urls import path

from .api_views import RulesEvaluatorAdapterViewSet

app_name = "rules_adapter"

urlpatterns = [
    path(
        "check-new-workflow",
        RulesEvaluatorAdapterViewSet.as_view({"post": "check_new_workflow"}),
        name="check-new-workflow",
    ),
    path(
        "check-new-instance",
        RulesEvaluatorAdapterViewSet.as_view({"post": "check_new_instance"}),
        name="check-new-instance",
    ),
    path(
        "check-state-transition",
        RulesEvaluatorAdapterViewSet.as_view({"post": "check_state_transition"}),
        name="check-state-transition",
    ),
]
