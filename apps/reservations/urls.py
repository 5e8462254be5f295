from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'reservations'

router = DefaultRouter()
router.register(r'guests', views.GuestViewSet, basename='guest')
router.register(r'bookings', views.ReservationViewSet, basename='reservation')

urlpatterns = [
    path('', include(router.urls)),
]

# GET/POST      /api/reservations/guests/                      - guest profiles
# POST          /api/reservations/guests/{id}/blacklist/       - blacklist toggle
# GET/POST      /api/reservations/bookings/                    - reservations
# POST          /api/reservations/bookings/{id}/assign_room/   - assign room
# POST          /api/reservations/bookings/{id}/check_in/      - check in (posts room charge)
# POST          /api/reservations/bookings/{id}/check_out/     - check out (closes folio)
# POST          /api/reservations/bookings/{id}/cancel/        - cancel
# POST          /api/reservations/bookings/{id}/extend/        - extend stay
# POST          /api/reservations/bookings/{id}/no_show/       - mark no-show
# GET           /api/reservations/bookings/arrivals/           - arrivals board
# GET           /api/reservations/bookings/departures/         - departures board
# GET           /api/reservations/bookings/in_house/           - in-house guests
