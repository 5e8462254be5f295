from django.urls import path, include
from rest_framework.routers import SimpleRouter
from . import views

app_name = 'audit'

router = SimpleRouter()
router.register(r'', views.AuditLogViewSet, basename='auditlog')

urlpatterns = [
    path('', include(router.urls)),
]

# GET /api/audit/        - list (filters: resource_type, resource_id, action, actor, date_from, date_to)
# GET /api/audit/{id}/   - detail
