"""
Repair of room charges that were taxed twice.

Older room assignments posted the tax-inclusive total as if it were the net
rate, so VAT and service charge were applied on top of an already-taxed
amount. Those charges are recognisable: they are room charges without stored
tax components whose description states the number of nights.

Example:
    Expected 10,000 base + 1,000 service + 825 VAT = 11,825. Posted instead
    as 11,825 base, giving 13,983.06.
"""

import logging
import re
from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.db import transaction

from apps.audit.services import record_audit
from apps.billing.models import ChargeType, Folio, FolioCharge
from apps.tenants.services import get_hotel_settings

from .folio_management import recalculate_folio_balance
from .tax_calculator import calculate_charge, HUNDRED

logger = logging.getLogger(__name__)

NIGHTS_PATTERN = re.compile(r'(\d+)\s*night\(s\)', re.IGNORECASE)
RATE_ROUNDING = Decimal('1000')


def _nights_from_description(description: str):
    match = NIGHTS_PATTERN.search(description or '')
    if not match:
        return None
    nights = int(match.group(1))
    return nights or None


def estimate_original_base(amount: Decimal, hotel_settings) -> Decimal:
    """
    Undo the double taxation of a posted amount.

    Exclusive pricing: amount = base(1 + s) + base(1 + s)v.
    Inclusive pricing: amount = base(1 + v + s).
    """
    vat = Decimal(hotel_settings.vat_rate) / HUNDRED
    service = Decimal(hotel_settings.service_charge_rate) / HUNDRED

    if hotel_settings.tax_inclusive:
        return amount / (1 + vat + service)

    service_factor = 1 + service
    return amount / (service_factor + service_factor * vat)


def _round_rate(value: Decimal) -> Decimal:
    return (value / RATE_ROUNDING).quantize(Decimal('1'), rounding=ROUND_HALF_UP) * RATE_ROUNDING


def scan_double_tax_charges(*, tenant) -> list:
    """
    Room charges of a hotel that look double-taxed.

    Returns:
        list[dict]: charge_id, folio_id, folio_number, description, nights,
        current_amount, and the calculated base/service/vat/total plus the
        difference; only charges off by more than HOTEL_DOUBLE_TAX_TOLERANCE.
    """
    hotel_settings = get_hotel_settings(tenant=tenant)
    tolerance = settings.HOTEL_DOUBLE_TAX_TOLERANCE

    charges = FolioCharge.objects.filter(
        folio__tenant=tenant,
        charge_type=ChargeType.ROOM,
        base_amount=0,
        vat_amount=0,
        service_charge_amount=0,
    ).select_related('folio')

    flagged = []
    for charge in charges:
        nights = _nights_from_description(charge.description)
        if not nights:
            continue

        # Taxed twice: strip one layer to get the total that was mistaken for
        # the net rate, and a second to get the net rate itself.
        mistaken_base = estimate_original_base(charge.amount, hotel_settings)
        nightly_rate = _round_rate(estimate_original_base(mistaken_base, hotel_settings) / nights)
        if nightly_rate <= 0:
            continue

        breakdown = calculate_charge(
            base_amount=nightly_rate * nights,
            charge_type=ChargeType.ROOM,
            hotel_settings=hotel_settings,
        )
        retaxed = calculate_charge(
            base_amount=breakdown['total_amount'],
            charge_type=ChargeType.ROOM,
            hotel_settings=hotel_settings,
        )
        difference = charge.amount - breakdown['total_amount']
        if abs(difference) <= tolerance or abs(charge.amount - retaxed['total_amount']) > tolerance:
            continue

        flagged.append({
            'charge_id': charge.id,
            'folio_id': charge.folio_id,
            'folio_number': charge.folio.folio_number,
            'description': charge.description,
            'nights': nights,
            'current_amount': charge.amount,
            'calculated_base_amount': breakdown['base_amount'],
            'calculated_service_charge_amount': breakdown['service_charge_amount'],
            'calculated_vat_amount': breakdown['vat_amount'],
            'calculated_total_amount': breakdown['total_amount'],
            'difference': difference,
        })

    logger.info("Double-tax scan for %s: %d charge(s) flagged", tenant.hotel_slug, len(flagged))
    return flagged


@transaction.atomic
def fix_double_tax_charges(*, tenant, actor=None, items=None) -> dict:
    """
    Rewrite flagged charges with their recalculated components.

    Args:
        tenant: Hotel to repair
        actor: User running the repair, None from the management command
        items: Output of scan_double_tax_charges; scanned when omitted

    Returns:
        dict: charges_fixed, folios_recalculated, total_adjustment
    """
    if items is None:
        items = scan_double_tax_charges(tenant=tenant)

    fixed = 0
    folio_ids = set()
    total_adjustment = Decimal('0.00')

    for item in items:
        updated = FolioCharge.objects.filter(id=item['charge_id'], folio__tenant=tenant).update(
            amount=item['calculated_total_amount'],
            base_amount=item['calculated_base_amount'],
            service_charge_amount=item['calculated_service_charge_amount'],
            vat_amount=item['calculated_vat_amount'],
        )
        if updated:
            fixed += 1
            folio_ids.add(item['folio_id'])
            total_adjustment += item['difference']

    for folio in Folio.objects.select_for_update().filter(id__in=folio_ids):
        recalculate_folio_balance(folio)

    result = {
        'charges_fixed': fixed,
        'folios_recalculated': len(folio_ids),
        'total_adjustment': total_adjustment,
    }
    if fixed:
        record_audit(
            tenant=tenant,
            actor=actor,
            action='double_tax_repaired',
            resource_type='folio_charge',
            description=f"Corrected {fixed} double-taxed room charge(s)",
            metadata={
                'charge_ids': [str(item['charge_id']) for item in items],
                'total_adjustment': str(total_adjustment),
            },
        )
    logger.info(
        "Double-tax repair for %s: %d charge(s), %d folio(s)",
        tenant.hotel_slug, fixed, len(folio_ids),
    )
    return result
