"""
Tax and service charge arithmetic.

Hotels configure a VAT rate and a service charge rate (percentages) in
HotelSettings, plus whether entered prices already include them. VAT is
levied on the base amount plus the service charge.

Example:
    Exclusive pricing at 7.5% VAT and 10% service charge::

        calculate_charge(
            base_amount=Decimal('10000'),
            charge_type='room',
            hotel_settings=settings,
        )
        # base 10000.00 + service 1000.00 + vat 825.00 = total 11825.00
"""

from decimal import Decimal, ROUND_HALF_UP

CENT = Decimal('0.01')
HUNDRED = Decimal('100')
ZERO = Decimal('0.00')


def quantize(value) -> Decimal:
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def applicable_rates(
    hotel_settings,
    charge_type: str,
    *,
    is_taxable: bool = True,
    is_service_chargeable: bool = True,
    guest_tax_exempt: bool = False,
) -> tuple:
    """
    Effective (service_rate, vat_rate) for a charge, as fractions.

    A rate is zero when the charge is flagged out of it or the hotel does not
    apply it to this charge type. Tax-exempt guests pay no VAT but still pay
    service charge.
    """
    service_rate = ZERO
    vat_rate = ZERO

    if is_service_chargeable and charge_type in (hotel_settings.service_applicable_to or []):
        service_rate = Decimal(hotel_settings.service_charge_rate) / HUNDRED
    if is_taxable and not guest_tax_exempt and charge_type in (hotel_settings.vat_applicable_to or []):
        vat_rate = Decimal(hotel_settings.vat_rate) / HUNDRED

    return service_rate, vat_rate


def calculate_charge(
    *,
    base_amount,
    charge_type: str,
    hotel_settings,
    is_taxable: bool = True,
    is_service_chargeable: bool = True,
    guest_tax_exempt: bool = False,
) -> dict:
    """
    Split an entered amount into base, service charge and VAT.

    ``base_amount`` is the price as entered by staff; whether it already
    contains VAT and/or service charge is decided by the hotel's
    ``tax_inclusive`` and ``service_charge_inclusive`` flags.

    Returns:
        dict: base_amount, service_charge_amount, vat_amount, total_amount
        (all Decimal, 2 dp, components summing exactly to the total) plus the
        applied service_charge_rate and vat_rate as percentages.
    """
    amount = Decimal(base_amount)
    service_rate, vat_rate = applicable_rates(
        hotel_settings,
        charge_type,
        is_taxable=is_taxable,
        is_service_chargeable=is_service_chargeable,
        guest_tax_exempt=guest_tax_exempt,
    )
    vat_inclusive = hotel_settings.tax_inclusive
    service_inclusive = hotel_settings.service_charge_inclusive

    if vat_inclusive and service_inclusive:
        total = quantize(amount)
        base = quantize(amount / ((1 + service_rate) * (1 + vat_rate)))
        service = quantize(base * service_rate)
        vat = total - base - service
    elif service_inclusive:
        base = quantize(amount / (1 + service_rate))
        service = quantize(amount) - base
        vat = quantize(amount * vat_rate)
        total = base + service + vat
    else:
        if vat_inclusive:
            amount = amount / (1 + vat_rate)
        base = quantize(amount)
        service = quantize(base * service_rate)
        vat = quantize((base + service) * vat_rate)
        total = base + service + vat

    return {
        'base_amount': base,
        'service_charge_amount': service,
        'vat_amount': vat,
        'total_amount': total,
        'service_charge_rate': service_rate * HUNDRED,
        'vat_rate': vat_rate * HUNDRED,
    }
