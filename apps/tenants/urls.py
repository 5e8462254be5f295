from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'tenants'

router = DefaultRouter()
router.register(r'hotels', views.TenantViewSet, basename='tenant')

urlpatterns = [
    path('me/', views.my_hotel, name='my-hotel'),
    path('settings/', views.hotel_settings, name='hotel-settings'),
    path('', include(router.urls)),
]

# Platform administration (SUPER_ADMIN):
# GET    /api/tenants/hotels/                   - list hotels
# POST   /api/tenants/hotels/                   - create hotel + owner
# GET    /api/tenants/hotels/{id}/              - detail
# PATCH  /api/tenants/hotels/{id}/              - update profile
# POST   /api/tenants/hotels/{id}/suspend/      - suspend
# POST   /api/tenants/hotels/{id}/reactivate/   - reactivate
#
# Hotel staff:
# GET/PATCH /api/tenants/me/                    - own hotel profile
# GET/PATCH /api/tenants/settings/              - tax & front desk settings
