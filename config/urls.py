"""
URL configuration for the hotel operations API.

Every staff endpoint lives under /api/ and is scoped to the caller's hotel.
The guest portal (/api/qr/guest/...) is public and scoped by QR token.
"""
from django.contrib import admin
from django.urls import path, include
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenRefreshView

from config.views import health_check

urlpatterns = [
    # Health check (for Render)
    path('api/health/', health_check, name='health-check'),

    # Admin
    path('admin/', admin.site.urls),

    # API Documentation
    path('api/schema/', SpectacularAPIView.as_view(), name='api-schema'),
    path('api/docs/', SpectacularSwaggerView.as_view(url_name='api-schema'), name='api-docs'),

    # Authentication
    path('api/auth/', include('apps.accounts.urls')),
    path('api/auth/token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),

    # API endpoints
    path('api/tenants/', include('apps.tenants.urls')),
    path('api/audit/', include('apps.audit.urls')),
    path('api/rooms/', include('apps.rooms.urls')),
    path('api/reservations/', include('apps.reservations.urls')),
    path('api/billing/', include('apps.billing.urls')),
    path('api/housekeeping/', include('apps.housekeeping.urls')),
    path('api/maintenance/', include('apps.maintenance.urls')),
    path('api/pos/', include('apps.pos.urls')),
    path('api/qr/', include('apps.qr.urls')),
    path('api/analytics/', include('apps.analytics.urls')),
]


# Custom error handlers
handler404 = 'config.views.error_404'
handler500 = 'config.views.error_500'
