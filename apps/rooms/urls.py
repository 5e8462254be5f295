from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'rooms'

router = DefaultRouter()
router.register(r'types', views.RoomTypeViewSet, basename='roomtype')
router.register(r'rooms', views.RoomViewSet, basename='room')

urlpatterns = [
    path('consistency/', views.consistency_report, name='consistency-report'),
    path('consistency/fix/', views.consistency_fix, name='consistency-fix'),
    path('consistency/sync/', views.consistency_sync, name='consistency-sync'),
    path('', include(router.urls)),
]

# GET/POST      /api/rooms/types/                  - room types
# GET/POST      /api/rooms/rooms/                  - rooms (filters: status, room_type, floor)
# POST          /api/rooms/rooms/{id}/status/      - status change
# GET           /api/rooms/rooms/available/        - availability for dates
# GET           /api/rooms/consistency/            - inconsistency report
# POST          /api/rooms/consistency/fix/        - repair inconsistencies
# POST          /api/rooms/consistency/sync/       - resync statuses from reservations
