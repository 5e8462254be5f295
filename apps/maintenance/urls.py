from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'maintenance'

router = DefaultRouter()
router.register(r'work-orders', views.WorkOrderViewSet, basename='work-order')

urlpatterns = [
    path('stats/', views.stats, name='stats'),
    path('', include(router.urls)),
]

# GET/POST  /api/maintenance/work-orders/                  - work orders
# POST      /api/maintenance/work-orders/{id}/accept/      - start work
# POST      /api/maintenance/work-orders/{id}/complete/    - close (maintenance room -> dirty)
# POST      /api/maintenance/work-orders/{id}/escalate/    - escalate, bump priority
# POST      /api/maintenance/work-orders/{id}/cancel/      - cancel (management)
# GET       /api/maintenance/stats/                        - board counters
