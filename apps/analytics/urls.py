from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('occupancy/', views.occupancy, name='occupancy'),
    path('revenue/', views.revenue, name='revenue'),
    path('dashboard/', views.dashboard, name='dashboard'),
    path('outstanding-balances/', views.outstanding_balances, name='outstanding-balances'),
]

# GET /api/analytics/occupancy/?date=                               - occupancy
# GET /api/analytics/revenue/?start_date=&end_date=  or ?period=YYYY-MM
# GET /api/analytics/dashboard/                                     - today's summary
# GET /api/analytics/outstanding-balances/                          - open folios owing
