"""Supply stock and usage."""

import logging
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import F, QuerySet

from apps.audit.services import record_audit
from apps.housekeeping.models import Supply, SupplyUsage

from .exceptions import SupplyNotFoundError, InsufficientStockError, InvalidQuantityError

logger = logging.getLogger(__name__)


@transaction.atomic
def record_supply_usage(
    *,
    tenant,
    supply_id: UUID,
    quantity: int,
    used_by,
    room=None,
    task=None,
    notes: str = '',
) -> SupplyUsage:
    """
    Take items out of stock.

    Raises:
        InvalidQuantityError: If quantity <= 0
        SupplyNotFoundError: If supply doesn't exist in the hotel
        InsufficientStockError: If stock is lower than quantity
    """
    if quantity <= 0:
        raise InvalidQuantityError("Quantity must be greater than zero")

    try:
        supply = Supply.objects.select_for_update().get(id=supply_id, tenant=tenant)
    except Supply.DoesNotExist:
        raise SupplyNotFoundError(f"Supply with ID {supply_id} not found")

    if supply.current_stock < quantity:
        raise InsufficientStockError(
            f"Only {supply.current_stock} {supply.unit} of {supply.name} in stock"
        )

    Supply.objects.filter(id=supply.id).update(current_stock=F('current_stock') - quantity)
    supply.refresh_from_db(fields=['current_stock'])

    usage = SupplyUsage.objects.create(
        supply=supply,
        quantity=quantity,
        room=room,
        task=task,
        used_by=used_by,
        notes=notes,
    )
    record_audit(
        tenant=tenant,
        actor=used_by,
        action='supply_used',
        resource_type='supply',
        resource_id=supply.id,
        description=f"{quantity} {supply.unit} of {supply.name}",
        metadata={'remaining': supply.current_stock},
    )
    if supply.is_low_stock:
        logger.warning("Supply %s is low: %d left", supply.name, supply.current_stock)
    return usage


def low_stock_supplies(*, tenant, category: Optional[str] = None) -> QuerySet:
    """Active supplies at or below their minimum stock."""
    queryset = Supply.objects.filter(
        tenant=tenant,
        is_active=True,
        current_stock__lte=F('minimum_stock'),
    )
    if category:
        queryset = queryset.filter(category=category)
    return queryset
