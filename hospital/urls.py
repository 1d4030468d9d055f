"""
Root URL configuration.

``/api/...`` and ``/healthz`` come from ``core.routers``; Prometheus
serves ``/metrics``; the OpenAPI schema is browsable under ``/swagger/``
and ``/redoc/``; ``/admin/`` is the Django admin.
"""
from django.contrib import admin
from django.urls import include, path
from drf_yasg import openapi
from drf_yasg.views import get_schema_view
from rest_framework.permissions import AllowAny

api_info = openapi.Info(
    title="Hospital Administration API",
    default_version="v1",
    description="Patients, doctors, appointments and medical records.",
)

schema_view = get_schema_view(api_info, public=True, permission_classes=(AllowAny,))

urlpatterns = [
    path("admin/", admin.site.urls),
    path("", include("django_prometheus.urls")),
    path("", include("core.routers")),
    path("swagger/", schema_view.with_ui("swagger", cache_timeout=0), name="schema-swagger-ui"),
    path("redoc/", schema_view.with_ui("redoc", cache_timeout=0), name="schema-redoc"),
]
