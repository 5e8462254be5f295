"""Settling restaurant orders."""

import logging
from uuid import UUID

from django.db import transaction

from apps.audit.services import record_audit
from apps.billing.models import ChargeType, PaymentMethod
from apps.billing.services import get_room_open_folio, post_charge, record_payment
from apps.pos.models import OrderStatus, PosOrder

from .exceptions import InvalidOrderError, OrderAlreadyPaidError
from .orders import get_order

logger = logging.getLogger(__name__)


def _charge_to_room(order: PosOrder, actor):
    if order.room is None:
        raise InvalidOrderError("Only orders for a room can be charged to a room")

    folio = get_room_open_folio(order.room)
    # Components were priced when the order was created; post them as they are
    return post_charge(
        folio=folio,
        charge_type=ChargeType.RESTAURANT,
        amount=order.total_amount,
        description=f"Restaurant {order.order_number}",
        posted_by=actor,
        reference_type='pos_order',
        reference_id=order.id,
        breakdown={
            'base_amount': order.subtotal,
            'service_charge_amount': order.service_charge,
            'vat_amount': order.tax_amount,
            'total_amount': order.total_amount,
        },
    )


@transaction.atomic
def process_payment(*, tenant, order_id: UUID, payment_method: str, actor, reference: str = '') -> PosOrder:
    """
    Settle an order.

    ``room_folio`` posts the bill to the open folio of the guest checked into
    the order's room. Any other method records a payment with no folio,
    attached to the cashier's active shift.

    Raises:
        OrderNotFoundError: If the order does not exist
        OrderAlreadyPaidError: If the order was already settled
        InvalidOrderError: If the order is cancelled or has no room for room_folio
        NoOpenFolioError: If nobody is checked into the room
        DuplicatePaymentError: If the reference was already used
    """
    order = get_order(tenant=tenant, order_id=order_id)
    if order.is_paid:
        raise OrderAlreadyPaidError(f"Order {order.order_number} is already paid")
    if order.status == OrderStatus.CANCELLED:
        raise InvalidOrderError(f"Order {order.order_number} is cancelled")

    if payment_method == PaymentMethod.ROOM_FOLIO:
        order.folio_charge = _charge_to_room(order, actor)
    else:
        order.payment = record_payment(
            tenant=tenant,
            amount=order.total_amount,
            payment_method=payment_method,
            processed_by=actor,
            reference=reference or order.order_number,
            notes=f"POS order {order.order_number}",
        )

    order.is_paid = True
    order.payment_method = payment_method
    order.save(update_fields=['is_paid', 'payment_method', 'payment', 'folio_charge', 'updated_at'])

    record_audit(
        tenant=tenant,
        actor=actor,
        action='pos_order_paid',
        resource_type='pos_order',
        resource_id=order.id,
        description=f"{order.order_number} paid by {payment_method}",
        metadata={'amount': str(order.total_amount), 'method': payment_method},
    )
    logger.info("POS order %s paid %s via %s", order.order_number, order.total_amount, payment_method)
    return order
