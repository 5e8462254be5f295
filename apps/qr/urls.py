from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'qr'

router = DefaultRouter()
router.register(r'codes', views.QRCodeViewSet, basename='qr-code')
router.register(r'requests', views.ServiceRequestViewSet, basename='service-request')

urlpatterns = [
    # Guest request routes come before the token routes they would otherwise match
    path('guest/requests/<uuid:request_id>/', views.guest_request_detail, name='guest-request-detail'),
    path('guest/requests/<uuid:request_id>/messages/', views.guest_request_message, name='guest-request-message'),
    path('guest/<str:token>/', views.guest_portal, name='guest-portal'),
    path('guest/<str:token>/<slug:service>/', views.guest_submit_request, name='guest-submit'),
    path('analytics/', views.analytics, name='analytics'),
    path('', include(router.urls)),
]

# Guest portal (public):
# GET   /api/qr/guest/{token}/                          - branding and services
# POST  /api/qr/guest/{token}/{service}/                - create request
# GET   /api/qr/guest/requests/{id}/?session=           - request status and messages
# POST  /api/qr/guest/requests/{id}/messages/           - guest message
#
# Staff:
# GET/POST  /api/qr/codes/                              - QR codes (management)
# POST      /api/qr/codes/{id}/deactivate/              - deactivate
# POST      /api/qr/codes/{id}/regenerate/              - new token
# GET       /api/qr/codes/{id}/image/                   - PNG
# GET       /api/qr/requests/?updated_since=            - request dashboard
# POST      /api/qr/requests/{id}/assign|accept|update_status|complete|cancel|messages/
# GET       /api/qr/analytics/                          - requests per type, completion time
