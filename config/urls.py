"""
Root URLConf.

The service only exposes API routes: rule evaluation, the rule-service
callbacks used by the workflow engine, liveness checks and the OpenAPI schema.
"""

from django.urls import include, path

from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("", include("ruleevaluator.core.urls")),
    path("rules/", include("ruleevaluator.rules.urls", namespace="rules")),
    path(
        "rulesEvaluator/",
        include("ruleevaluator.rules.adapter_urls", namespace="rules_adapter"),
    ),
    path("api/schema/", SpectacularAPIView.as_view(), name="api-schema"),
    path(
        "api/docs/",
        SpectacularSwaggerView.as_view(url_name="api-schema"),
        name="api-docs",
    ),
]
