"""
Service layer unit tests for pos app.

Tests cover:
- Order pricing with the hotel's VAT and service charge
- Kitchen workflow transitions and ETA
- Settling by cash or by charging the guest's room folio
- Kitchen tickets and daily stats
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from apps.billing.models import ChargeType, Folio, Payment, PaymentMethod
from apps.billing.services import NoOpenFolioError
from apps.pos.models import OrderStatus, OrderType
from apps.pos.services import (
    create_order,
    update_order_status,
    cancel_order,
    process_payment,
    order_eta,
    kitchen_tickets,
    pos_stats,
    InvalidOrderError,
    MenuItemUnavailableError,
    InvalidOrderTransitionError,
    OrderAlreadyPaidError,
)


def _lunch(hotel, jollof, chapman, **kwargs):
    return create_order(
        tenant=hotel,
        items=[
            {'menu_item': jollof.id, 'quantity': 2},
            {'menu_item': chapman.id, 'quantity': 1, 'special_requests': 'Less ice'},
        ],
        **kwargs,
    )


def _advance(hotel, order, actor, *statuses):
    for new_status in statuses:
        order = update_order_status(tenant=hotel, order_id=order.id, new_status=new_status, actor=actor)
    return order


@pytest.mark.django_db
class TestCreateOrder:

    def test_untaxed_by_default(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman, actor=pos_staff)

        assert order.order_number.startswith('POS-')
        assert order.subtotal == Decimal('6500.00')
        assert order.total_amount == Decimal('6500.00')
        assert order.items.count() == 2

    def test_priced_with_restaurant_tax(self, taxed_restaurant, jollof, chapman, pos_staff):
        order = _lunch(taxed_restaurant, jollof, chapman, actor=pos_staff)

        assert order.subtotal == Decimal('6500.00')
        assert order.service_charge == Decimal('650.00')
        assert order.tax_amount == Decimal('536.25')
        assert order.total_amount == Decimal('7686.25')

    def test_lines_keep_price_snapshot(self, hotel, jollof, chapman):
        order = _lunch(hotel, jollof, chapman)
        jollof.price = Decimal('9999.00')
        jollof.save()

        line = order.items.get(item_name='Jollof rice')
        assert line.item_price == Decimal('2500.00')
        assert line.line_total == Decimal('5000.00')

    def test_unavailable_item_rejected(self, hotel, sold_out):
        with pytest.raises(MenuItemUnavailableError):
            create_order(tenant=hotel, items=[{'menu_item': sold_out.id, 'quantity': 1}])

    def test_other_hotel_item_rejected(self, other_hotel, jollof):
        with pytest.raises(MenuItemUnavailableError):
            create_order(tenant=other_hotel, items=[{'menu_item': jollof.id, 'quantity': 1}])

    def test_empty_order_rejected(self, hotel):
        with pytest.raises(InvalidOrderError):
            create_order(tenant=hotel, items=[])

    def test_room_service_needs_room(self, hotel, jollof):
        with pytest.raises(InvalidOrderError):
            create_order(
                tenant=hotel,
                items=[{'menu_item': jollof.id, 'quantity': 1}],
                order_type=OrderType.ROOM_SERVICE,
            )


@pytest.mark.django_db
class TestOrderWorkflow:

    def test_full_kitchen_flow(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman)

        order = _advance(
            hotel, order, pos_staff,
            OrderStatus.ACCEPTED, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED,
        )

        assert order.status == OrderStatus.DELIVERED
        assert order.taken_by == pos_staff
        assert order.served_by == pos_staff
        assert order.completed_time is not None

    def test_cannot_skip_steps(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman)

        with pytest.raises(InvalidOrderTransitionError):
            update_order_status(tenant=hotel, order_id=order.id, new_status=OrderStatus.READY, actor=pos_staff)

    def test_cannot_cancel_once_preparing(self, hotel, jollof, chapman, pos_staff):
        order = _advance(hotel, _lunch(hotel, jollof, chapman), pos_staff, OrderStatus.ACCEPTED, OrderStatus.PREPARING)

        with pytest.raises(InvalidOrderTransitionError):
            cancel_order(tenant=hotel, order_id=order.id, actor=pos_staff)

    def test_cannot_cancel_paid_order(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman)
        process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.CASH, actor=pos_staff)

        with pytest.raises(InvalidOrderTransitionError):
            cancel_order(tenant=hotel, order_id=order.id, actor=pos_staff)

    def test_eta_uses_slowest_item(self, hotel, jollof, chapman):
        order = _lunch(hotel, jollof, chapman)

        assert order_eta(order) == order.order_time + timedelta(minutes=20)


@pytest.mark.django_db
class TestOrderPayment:

    def test_cash_payment_records_walk_in_payment(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman)

        paid = process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.CASH, actor=pos_staff)

        payment = Payment.objects.get(id=paid.payment_id)
        assert paid.is_paid is True
        assert payment.folio is None
        assert payment.amount == Decimal('6500.00')
        assert payment.reference == order.order_number

    def test_paying_twice_rejected(self, hotel, jollof, chapman, pos_staff):
        order = _lunch(hotel, jollof, chapman)
        process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.CASH, actor=pos_staff)

        with pytest.raises(OrderAlreadyPaidError):
            process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.CARD, actor=pos_staff)

    def test_charge_to_room_posts_components_once(
        self, taxed_restaurant, jollof, chapman, front_desk, room, checked_in_reservation,
    ):
        order = _lunch(taxed_restaurant, jollof, chapman, order_type=OrderType.ROOM_SERVICE, room=room)

        paid = process_payment(
            tenant=taxed_restaurant, order_id=order.id, payment_method=PaymentMethod.ROOM_FOLIO, actor=front_desk,
        )

        folio = Folio.objects.get(reservation=checked_in_reservation)
        charge = folio.charges.get(charge_type=ChargeType.RESTAURANT)
        assert paid.folio_charge == charge
        assert charge.base_amount == Decimal('6500.00')
        assert charge.vat_amount == Decimal('536.25')
        assert charge.amount == Decimal('7686.25')
        assert folio.balance == Decimal('19511.25')

    def test_charge_to_empty_room_rejected(self, hotel, jollof, chapman, front_desk, second_room):
        order = _lunch(hotel, jollof, chapman, order_type=OrderType.ROOM_SERVICE, room=second_room)

        with pytest.raises(NoOpenFolioError):
            process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.ROOM_FOLIO, actor=front_desk)

    def test_charge_to_room_needs_room(self, hotel, jollof, chapman, front_desk):
        order = _lunch(hotel, jollof, chapman)

        with pytest.raises(InvalidOrderError):
            process_payment(tenant=hotel, order_id=order.id, payment_method=PaymentMethod.ROOM_FOLIO, actor=front_desk)


@pytest.mark.django_db
class TestKitchenAndStats:

    def test_tickets_only_for_active_orders(self, hotel, jollof, chapman, pos_staff, room):
        waiting = _lunch(hotel, jollof, chapman)
        cooking = _advance(
            hotel,
            _lunch(hotel, jollof, chapman, order_type=OrderType.ROOM_SERVICE, room=room),
            pos_staff,
            OrderStatus.ACCEPTED,
        )

        tickets = kitchen_tickets(tenant=hotel)

        assert [t['order_id'] for t in tickets] == [cooking.id]
        assert tickets[0]['priority'] == 'high'
        assert tickets[0]['room'] == '101'
        assert waiting.status == OrderStatus.PENDING

    def test_stats(self, hotel, jollof, chapman, pos_staff):
        _advance(
            hotel, _lunch(hotel, jollof, chapman), pos_staff,
            OrderStatus.ACCEPTED, OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.DELIVERED,
        )
        _lunch(hotel, jollof, chapman)

        stats = pos_stats(tenant=hotel)

        assert stats['orders'] == 2
        assert stats['revenue'] == Decimal('6500.00')
        assert stats['average_order_value'] == Decimal('6500.00')
        assert stats['by_status']['pending'] == 1
        assert stats['by_status']['delivered'] == 1
