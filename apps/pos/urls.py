from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'pos'

router = DefaultRouter()
router.register(r'menu-categories', views.MenuCategoryViewSet, basename='menu-category')
router.register(r'menu-items', views.MenuItemViewSet, basename='menu-item')
router.register(r'orders', views.PosOrderViewSet, basename='order')

urlpatterns = [
    path('stats/', views.stats, name='stats'),
    path('', include(router.urls)),
]

# GET/POST/PUT/DELETE  /api/pos/menu-categories/             - categories
# GET/POST/PUT/DELETE  /api/pos/menu-items/                  - menu
# GET/POST             /api/pos/orders/                      - orders
# POST                 /api/pos/orders/{id}/update_status/   - kitchen workflow
# POST                 /api/pos/orders/{id}/cancel/          - cancel (pending/accepted)
# POST                 /api/pos/orders/{id}/pay/             - settle (room_folio, cash, card, ...)
# GET                  /api/pos/orders/kitchen/              - kitchen tickets
# GET                  /api/pos/stats/                       - today's figures
