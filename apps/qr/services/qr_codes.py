"""QR code management and image rendering."""

import logging
import secrets
from io import BytesIO
from typing import Optional
from uuid import UUID

import qrcode
from django.conf import settings
from django.db import IntegrityError, transaction

from apps.audit.services import record_audit
from apps.qr.models import QRCode, ScanType, default_services

from .exceptions import QRCodeNotFoundError

logger = logging.getLogger(__name__)


def generate_qr_token() -> str:
    return secrets.token_urlsafe(16)


def portal_url(qr_code: QRCode) -> str:
    """Public URL the printed code points at."""
    return f"{settings.HOTEL_QR_PORTAL_BASE_URL.rstrip('/')}/{qr_code.qr_token}"


def get_qr_code(*, tenant, qr_code_id: UUID) -> QRCode:
    try:
        return QRCode.objects.select_for_update().get(id=qr_code_id, tenant=tenant)
    except QRCode.DoesNotExist:
        raise QRCodeNotFoundError(f"QR code with ID {qr_code_id} not found")


def create_qr_code(
    *,
    tenant,
    label: str,
    actor,
    room=None,
    scan_type: str = ScanType.ROOM,
    services: Optional[list] = None,
    max_retries: int = 5,
) -> QRCode:
    """
    Create a QR code with a fresh URL-safe token.

    Raises:
        RuntimeError: If a unique token cannot be generated after retries
    """
    for attempt in range(max_retries):
        try:
            with transaction.atomic():
                qr_code = QRCode.objects.create(
                    tenant=tenant,
                    qr_token=generate_qr_token(),
                    label=label,
                    room=room,
                    scan_type=scan_type,
                    services=services if services is not None else default_services(),
                    created_by=actor,
                )
                record_audit(
                    tenant=tenant,
                    actor=actor,
                    action='qr_code_created',
                    resource_type='qr_code',
                    resource_id=qr_code.id,
                    description=label,
                )
                logger.info("Created QR code %s (%s)", qr_code.id, label)
                return qr_code
        except IntegrityError:
            if attempt == max_retries - 1:
                raise RuntimeError(f"Failed to generate unique QR token after {max_retries} attempts")

    raise RuntimeError("Unexpected error in QR code creation")


@transaction.atomic
def deactivate_qr_code(*, tenant, qr_code_id: UUID, actor) -> QRCode:
    qr_code = get_qr_code(tenant=tenant, qr_code_id=qr_code_id)
    qr_code.is_active = False
    qr_code.save(update_fields=['is_active', 'updated_at'])
    record_audit(
        tenant=tenant,
        actor=actor,
        action='qr_code_deactivated',
        resource_type='qr_code',
        resource_id=qr_code.id,
        description=qr_code.label,
    )
    return qr_code


@transaction.atomic
def regenerate_qr_token(*, tenant, qr_code_id: UUID, actor) -> QRCode:
    """Issue a new token; printed copies of the old one stop working."""
    qr_code = get_qr_code(tenant=tenant, qr_code_id=qr_code_id)
    old_token = qr_code.qr_token
    qr_code.qr_token = generate_qr_token()
    qr_code.save(update_fields=['qr_token', 'updated_at'])
    record_audit(
        tenant=tenant,
        actor=actor,
        action='qr_token_regenerated',
        resource_type='qr_code',
        resource_id=qr_code.id,
        description=qr_code.label,
        metadata={'old_token_prefix': old_token[:6]},
    )
    logger.info("Regenerated token for QR code %s", qr_code.id)
    return qr_code


def render_qr_png(qr_code: QRCode) -> bytes:
    """PNG image of the portal URL, error correction level M."""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(portal_url(qr_code))
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()
