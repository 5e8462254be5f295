"""
API tests for pos app.

Tests cover:
- Menu management permissions
- Order creation, kitchen workflow and cancellation over HTTP
- Settling orders by cash and to a room folio
- Kitchen board and stats endpoints
"""

import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status

from apps.billing.models import Folio, PaymentMethod
from apps.pos.models import OrderStatus, OrderType, PosOrder
from apps.pos.services import create_order, update_order_status


def _order_payload(*lines, **extra):
    payload = {
        'items': [{'menu_item': str(item.id), 'quantity': quantity} for item, quantity in lines],
    }
    payload.update(extra)
    return payload


@pytest.fixture
def lunch_order(hotel, jollof, chapman, pos_staff):
    return create_order(
        tenant=hotel,
        actor=pos_staff,
        items=[
            {'menu_item': jollof.id, 'quantity': 2},
            {'menu_item': chapman.id, 'quantity': 1},
        ],
    )


# =============================================================================
# Menu
# =============================================================================

@pytest.mark.django_db
class TestMenu:
    """Tests for menu endpoints."""

    def test_pos_staff_adds_item(self, pos_client, mains):
        url = reverse('pos:menu-item-list')
        response = pos_client.post(url, {
            'category': str(mains.id),
            'name': 'Fried plantain',
            'price': '1200.00',
        }, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['category_name'] == 'Mains'
        assert response.data['preparation_time'] == 15

    def test_front_desk_reads_but_cannot_edit(self, front_desk_client, jollof):
        url = reverse('pos:menu-item-list')

        assert front_desk_client.get(url).status_code == status.HTTP_200_OK
        response = front_desk_client.post(url, {'name': 'Suya', 'price': '800.00'}, format='json')
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_available_filter(self, pos_client, jollof, sold_out):
        url = reverse('pos:menu-item-list')
        response = pos_client.get(url, {'available': 'true'})

        names = [item['name'] for item in response.data['results']]
        assert names == ['Jollof rice']

    def test_housekeeper_forbidden(self, housekeeper_client):
        response = housekeeper_client.get(reverse('pos:menu-item-list'))
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_menu_is_per_hotel(self, other_manager_client, jollof):
        response = other_manager_client.get(reverse('pos:menu-item-list'))
        assert response.data['count'] == 0


# =============================================================================
# Orders
# =============================================================================

@pytest.mark.django_db
class TestCreateOrder:
    """Tests for POST /api/pos/orders/."""

    def test_create_dine_in(self, pos_client, jollof, chapman):
        url = reverse('pos:order-list')
        response = pos_client.post(url, _order_payload((jollof, 2), (chapman, 1), table_number='T4'), format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == OrderStatus.PENDING
        assert response.data['table_number'] == 'T4'
        assert Decimal(response.data['total_amount']) == Decimal('6500.00')
        assert len(response.data['items']) == 2

    def test_room_service_needs_room(self, front_desk_client, jollof):
        url = reverse('pos:order-list')
        response = front_desk_client.post(
            url, _order_payload((jollof, 1), order_type=OrderType.ROOM_SERVICE), format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'room' in response.data

    def test_room_from_other_hotel(self, front_desk_client, jollof, other_hotel_room):
        url = reverse('pos:order-list')
        response = front_desk_client.post(
            url,
            _order_payload((jollof, 1), order_type=OrderType.ROOM_SERVICE, room=str(other_hotel_room.id)),
            format='json',
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_empty_items(self, pos_client):
        response = pos_client.post(reverse('pos:order-list'), {'items': []}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unavailable_item(self, pos_client, sold_out):
        response = pos_client.post(reverse('pos:order-list'), _order_payload((sold_out, 1)), format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'not available' in response.data['error']


@pytest.mark.django_db
class TestOrderWorkflow:
    """Tests for the order status actions."""

    def test_accept_then_prepare(self, pos_client, lunch_order, pos_staff):
        url = reverse('pos:order-update-status', kwargs={'pk': lunch_order.id})

        assert pos_client.post(url, {'status': 'accepted'}, format='json').status_code == status.HTTP_200_OK
        response = pos_client.post(url, {'status': 'preparing'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == OrderStatus.PREPARING
        assert response.data['prepared_by'] == pos_staff.id

    def test_invalid_transition(self, pos_client, lunch_order):
        url = reverse('pos:order-update-status', kwargs={'pk': lunch_order.id})
        response = pos_client.post(url, {'status': 'delivered'}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_cancel_by_pos_staff(self, pos_client, lunch_order):
        url = reverse('pos:order-cancel', kwargs={'pk': lunch_order.id})
        response = pos_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == OrderStatus.CANCELLED

    def test_front_desk_cannot_cancel(self, front_desk_client, lunch_order):
        url = reverse('pos:order-cancel', kwargs={'pk': lunch_order.id})
        response = front_desk_client.post(url)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_other_hotel_order_not_found(self, other_manager_client, lunch_order):
        url = reverse('pos:order-detail', kwargs={'pk': lunch_order.id})
        response = other_manager_client.get(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_status_filter(self, pos_client, lunch_order, hotel, pos_staff):
        update_order_status(tenant=hotel, order_id=lunch_order.id, new_status=OrderStatus.ACCEPTED, actor=pos_staff)

        response = pos_client.get(reverse('pos:order-list'), {'status': 'pending'})
        assert response.data['count'] == 0
        response = pos_client.get(reverse('pos:order-list'), {'status': 'accepted'})
        assert response.data['count'] == 1


@pytest.mark.django_db
class TestPayOrder:
    """Tests for POST /api/pos/orders/{id}/pay/."""

    def test_cash(self, pos_client, lunch_order):
        url = reverse('pos:order-pay', kwargs={'pk': lunch_order.id})
        response = pos_client.post(url, {'payment_method': PaymentMethod.CASH}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['is_paid'] is True
        assert response.data['payment'] is not None
        assert response.data['folio_charge'] is None

    def test_pay_twice(self, pos_client, lunch_order):
        url = reverse('pos:order-pay', kwargs={'pk': lunch_order.id})
        pos_client.post(url, {'payment_method': PaymentMethod.CASH}, format='json')
        response = pos_client.post(url, {'payment_method': PaymentMethod.CARD}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_charge_to_occupied_room(self, front_desk_client, hotel, jollof, room, checked_in_reservation):
        order = create_order(
            tenant=hotel,
            items=[{'menu_item': jollof.id, 'quantity': 1}],
            order_type=OrderType.ROOM_SERVICE,
            room=room,
        )
        url = reverse('pos:order-pay', kwargs={'pk': order.id})
        response = front_desk_client.post(url, {'payment_method': PaymentMethod.ROOM_FOLIO}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['folio_charge'] is not None
        folio = Folio.objects.get(reservation=checked_in_reservation)
        assert folio.balance == Decimal('14325.00')

    def test_charge_to_vacant_room(self, front_desk_client, hotel, jollof, second_room):
        order = create_order(
            tenant=hotel,
            items=[{'menu_item': jollof.id, 'quantity': 1}],
            order_type=OrderType.ROOM_SERVICE,
            room=second_room,
        )
        url = reverse('pos:order-pay', kwargs={'pk': order.id})
        response = front_desk_client.post(url, {'payment_method': PaymentMethod.ROOM_FOLIO}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert PosOrder.objects.get(id=order.id).is_paid is False


# =============================================================================
# Kitchen & stats
# =============================================================================

@pytest.mark.django_db
class TestKitchenAndStats:
    """Tests for the kitchen board and stats."""

    def test_kitchen_board(self, pos_client, lunch_order, hotel, pos_staff):
        update_order_status(tenant=hotel, order_id=lunch_order.id, new_status=OrderStatus.ACCEPTED, actor=pos_staff)

        response = pos_client.get(reverse('pos:order-kitchen'))

        assert response.status_code == status.HTTP_200_OK
        assert len(response.data) == 1
        assert response.data[0]['order_number'] == lunch_order.order_number
        assert response.data[0]['priority'] == 'normal'
        assert response.data[0]['station'] == 'kitchen'

    def test_stats(self, pos_client, lunch_order):
        response = pos_client.get(reverse('pos:stats'))

        assert response.status_code == status.HTTP_200_OK
        assert response.data['orders'] == 1
        assert response.data['by_status']['pending'] == 1

    def test_stats_hidden_from_front_desk(self, front_desk_client):
        response = front_desk_client.get(reverse('pos:stats'))
        assert response.status_code == status.HTTP_403_FORBIDDEN
