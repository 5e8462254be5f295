from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'housekeeping'

router = DefaultRouter()
router.register(r'tasks', views.HousekeepingTaskViewSet, basename='task')
router.register(r'supplies', views.SupplyViewSet, basename='supply')

urlpatterns = [
    path('stats/', views.stats, name='stats'),
    path('', include(router.urls)),
]

# GET/POST      /api/housekeeping/tasks/                    - tasks
# POST          /api/housekeeping/tasks/{id}/assign/        - assign (management)
# POST          /api/housekeeping/tasks/{id}/accept/        - start work
# POST          /api/housekeeping/tasks/{id}/complete/      - finish (dirty room -> clean)
# POST          /api/housekeeping/tasks/{id}/delay/         - delay
# POST          /api/housekeeping/tasks/{id}/cancel/        - cancel (management)
# GET/POST      /api/housekeeping/supplies/                 - supplies
# POST          /api/housekeeping/supplies/{id}/use/        - record usage
# GET           /api/housekeeping/supplies/low_stock/       - low stock
# GET           /api/housekeeping/stats/                    - board counters
