from django.urls import path, include

from apps.common.views import api_root, healthz

urlpatterns = [
    path("", api_root, name="root"),
    path("healthz/", healthz, name="healthz"),
    path(
        "api/",
        include([
            path("", include("apps.users.api.urls")),
            path("", include("apps.tasks.api.urls")),
        ])
    ),
]

# Error handlers
handler404 = "apps.common.views.route_not_found"
handler500 = "apps.common.views.server_error"
