from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'billing'

router = DefaultRouter()
router.register(r'folios', views.FolioViewSet, basename='folio')
router.register(r'payments', views.PaymentViewSet, basename='payment')
router.register(r'shifts', views.ShiftViewSet, basename='shift')

urlpatterns = [
    path('tax-preview/', views.tax_preview, name='tax-preview'),
    path('double-tax/', views.double_tax_scan, name='double-tax-scan'),
    path('double-tax/fix/', views.double_tax_fix, name='double-tax-fix'),
    path('', include(router.urls)),
]

# GET           /api/billing/folios/                     - folios
# POST          /api/billing/folios/{id}/charges/        - post a charge
# POST          /api/billing/folios/{id}/payments/       - record a payment
# GET           /api/billing/folios/{id}/breakdown/      - totals by type and tax
# POST          /api/billing/folios/{id}/close/          - close settled folio
# POST          /api/billing/payments/{id}/refund/       - refund a payment
# POST          /api/billing/shifts/start/               - open a shift
# GET           /api/billing/shifts/current/             - running totals of own shift
# POST          /api/billing/shifts/{id}/close/          - close with counted cash
# POST          /api/billing/tax-preview/                - VAT/service preview
# GET/POST      /api/billing/double-tax/(fix/)           - double-tax repair
