from django.conf import settings
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView

urlpatterns = [
    path("admin-panel/", admin.site.urls, name="admin"),
    path("api/v1/", include("apps.users.urls")),
    path("api/v1/", include("apps.swap_offers.api.urls")),
    path("api/v1/", include("apps.swap_requests.api.urls")),
    path("api/v1/", include("apps.swap_transactions.api.urls")),
    path("api/v1/", include("apps.notifications.urls")),
]

if settings.DEBUG:
    urlpatterns += [
        path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
        path(
            "api/schema/swagger-ui/",
            SpectacularSwaggerView.as_view(url_name="schema"),
            name="swagger-ui",
        ),
    ]
