from django.contrib import admin

from .models import MenuCategory, MenuItem, PosOrder, PosOrderItem


@admin.register(MenuCategory)
class MenuCategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'tenant', 'display_order', 'is_active']
    list_filter = ['is_active', 'tenant']


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'category', 'price', 'is_available', 'preparation_time']
    list_filter = ['is_available', 'category', 'tenant']
    search_fields = ['name']


class PosOrderItemInline(admin.TabularInline):
    model = PosOrderItem
    extra = 0
    readonly_fields = ['item_name', 'item_price', 'quantity', 'line_total', 'special_requests']


@admin.register(PosOrder)
class PosOrderAdmin(admin.ModelAdmin):
    list_display = ['order_number', 'order_type', 'status', 'room', 'total_amount', 'is_paid', 'order_time']
    list_filter = ['status', 'order_type', 'is_paid', 'tenant']
    search_fields = ['order_number', 'room__room_number']
    readonly_fields = ['order_number', 'subtotal', 'service_charge', 'tax_amount', 'total_amount', 'order_time']
    inlines = [PosOrderItemInline]
