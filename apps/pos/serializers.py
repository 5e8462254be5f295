from rest_framework import serializers

from apps.billing.models import PaymentMethod
from .models import MenuCategory, MenuItem, PosOrder, PosOrderItem, OrderStatus, OrderType


class MenuCategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = MenuCategory
        fields = ['id', 'name', 'description', 'display_order', 'is_active']
        read_only_fields = ['id']

    def validate_name(self, value):
        tenant = self.context['request'].user.tenant
        queryset = MenuCategory.objects.filter(tenant=tenant, name__iexact=value)
        if self.instance:
            queryset = queryset.exclude(id=self.instance.id)
        if queryset.exists():
            raise serializers.ValidationError('A category with this name already exists')
        return value


class MenuItemSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = MenuItem
        fields = [
            'id',
            'category',
            'category_name',
            'name',
            'description',
            'price',
            'is_available',
            'preparation_time',
            'dietary_info',
            'tags',
            'updated_at',
        ]
        read_only_fields = ['id', 'category_name', 'updated_at']

    def validate_category(self, value):
        if value and value.tenant_id != self.context['request'].user.tenant_id:
            raise serializers.ValidationError('Category not found')
        return value


class PosOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = PosOrderItem
        fields = ['id', 'menu_item', 'item_name', 'item_price', 'quantity', 'line_total', 'special_requests']
        read_only_fields = fields


class PosOrderSerializer(serializers.ModelSerializer):
    items = PosOrderItemSerializer(many=True, read_only=True)
    room_number = serializers.CharField(source='room.room_number', read_only=True, default=None)

    class Meta:
        model = PosOrder
        fields = [
            'id',
            'order_number',
            'order_type',
            'status',
            'room',
            'room_number',
            'table_number',
            'items',
            'subtotal',
            'service_charge',
            'tax_amount',
            'total_amount',
            'special_instructions',
            'taken_by',
            'prepared_by',
            'served_by',
            'order_time',
            'completed_time',
            'is_paid',
            'payment_method',
            'payment',
            'folio_charge',
        ]
        read_only_fields = fields


class OrderLineSerializer(serializers.Serializer):
    menu_item = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    special_requests = serializers.CharField(required=False, allow_blank=True, default='')


class OrderCreateSerializer(serializers.Serializer):
    items = OrderLineSerializer(many=True, allow_empty=False)
    order_type = serializers.ChoiceField(choices=OrderType.choices, default=OrderType.DINE_IN)
    room = serializers.UUIDField(required=False, allow_null=True, default=None)
    table_number = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    special_instructions = serializers.CharField(required=False, allow_blank=True, default='')

    def validate(self, attrs):
        if attrs['order_type'] == OrderType.ROOM_SERVICE and not attrs['room']:
            raise serializers.ValidationError({'room': 'Room service orders need a room'})
        return attrs


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class OrderPaymentSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(choices=PaymentMethod.choices)
    reference = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')


class OrderFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    order_type = serializers.ChoiceField(choices=OrderType.choices, required=False)
    is_paid = serializers.BooleanField(required=False, allow_null=True, default=None)
    date = serializers.DateField(required=False)
    room = serializers.UUIDField(required=False)


# Response serializers for API documentation
class TicketItemSerializer(serializers.Serializer):
    name = serializers.CharField()
    quantity = serializers.IntegerField()
    special_requests = serializers.CharField()


class KitchenTicketSerializer(serializers.Serializer):
    ticket_id = serializers.CharField()
    order_id = serializers.UUIDField()
    order_number = serializers.CharField()
    station = serializers.CharField()
    items = TicketItemSerializer(many=True)
    status = serializers.CharField()
    room = serializers.CharField(allow_null=True)
    table_number = serializers.CharField()
    priority = serializers.CharField()
    eta = serializers.DateTimeField()


class PosStatsSerializer(serializers.Serializer):
    orders = serializers.IntegerField()
    revenue = serializers.DecimalField(max_digits=14, decimal_places=2)
    average_order_value = serializers.DecimalField(max_digits=14, decimal_places=2)
    by_status = serializers.DictField(child=serializers.IntegerField())
