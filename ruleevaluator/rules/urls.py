"""
URL configuration for the rule evaluation API.
"""

from django.urls import path

from .api_views import ExtensionFunctionListView
from .api_views import RuleEvaluationView

app_name = "rules"

urlpatterns = [
    path("evaluate", RuleEvaluationView.as_view(), name="evaluate"),
    path("functions", ExtensionFunctionListView.as_view(), name="functions"),
]
