"""
Service layer unit tests for maintenance app.

Tests cover:
- Work order numbering and taking rooms offline
- Accept / complete / escalate / cancel transitions
- Board statistics, including average resolution time
"""

import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone

from apps.maintenance.models import WorkOrder, WorkOrderPriority, WorkOrderStatus
from apps.maintenance.services import (
    create_work_order,
    accept_work_order,
    complete_work_order,
    escalate_work_order,
    cancel_work_order,
    maintenance_stats,
    WorkOrderNotFoundError,
    InvalidWorkOrderTransitionError,
)
from apps.rooms.models import RoomStatus


@pytest.fixture
def leaking_tap(hotel, room, front_desk):
    return create_work_order(
        tenant=hotel,
        room=room,
        title='Leaking tap',
        priority=WorkOrderPriority.HIGH,
        actor=front_desk,
    )


@pytest.mark.django_db
class TestCreateWorkOrder:

    def test_numbered_and_pending(self, leaking_tap, room):
        room.refresh_from_db()

        assert leaking_tap.work_order_number.startswith('WO-')
        assert leaking_tap.status == WorkOrderStatus.PENDING
        assert room.status == RoomStatus.AVAILABLE

    def test_take_room_offline(self, hotel, room, manager):
        create_work_order(tenant=hotel, room=room, title='Broken AC', take_room_offline=True, actor=manager)

        room.refresh_from_db()
        assert room.status == RoomStatus.MAINTENANCE
        assert not room.is_sellable

    def test_reserved_room_can_be_taken_offline(self, hotel, reservation, room, manager):
        room.refresh_from_db()
        assert room.status == RoomStatus.RESERVED

        create_work_order(tenant=hotel, room=room, title='Burst pipe', take_room_offline=True, actor=manager)

        room.refresh_from_db()
        assert room.status == RoomStatus.MAINTENANCE


@pytest.mark.django_db
class TestWorkOrderLifecycle:

    def test_accept_assigns_technician(self, hotel, leaking_tap, technician):
        work_order = accept_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=technician)

        assert work_order.status == WorkOrderStatus.IN_PROGRESS
        assert work_order.assigned_to == technician

    def test_complete_returns_room_to_housekeeping(self, hotel, room, manager, technician):
        work_order = create_work_order(
            tenant=hotel, room=room, title='Broken AC', take_room_offline=True, actor=manager,
        )
        accept_work_order(tenant=hotel, work_order_id=work_order.id, actor=technician)

        completed = complete_work_order(
            tenant=hotel,
            work_order_id=work_order.id,
            actor=technician,
            completion_notes='Replaced compressor',
            actual_hours=Decimal('2.5'),
            actual_cost=Decimal('45000.00'),
        )

        room.refresh_from_db()
        assert completed.status == WorkOrderStatus.COMPLETED
        assert completed.completed_at is not None
        assert room.status == RoomStatus.DIRTY

    def test_pending_cannot_complete(self, hotel, leaking_tap, technician):
        with pytest.raises(InvalidWorkOrderTransitionError):
            complete_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=technician)

    def test_escalation_bumps_priority(self, hotel, leaking_tap, technician):
        escalated = escalate_work_order(
            tenant=hotel, work_order_id=leaking_tap.id, actor=technician, reason='Needs a plumber',
        )

        assert escalated.status == WorkOrderStatus.ESCALATED
        assert escalated.priority == WorkOrderPriority.CRITICAL
        assert escalated.escalation_reason == 'Needs a plumber'

    def test_escalated_order_can_be_completed(self, hotel, leaking_tap, technician):
        escalate_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=technician, reason='Parts')

        completed = complete_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=technician)

        assert completed.status == WorkOrderStatus.COMPLETED
        assert completed.assigned_to == technician

    def test_cancelled_is_final(self, hotel, leaking_tap, manager, technician):
        cancel_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=manager, reason='Duplicate')

        with pytest.raises(InvalidWorkOrderTransitionError):
            accept_work_order(tenant=hotel, work_order_id=leaking_tap.id, actor=technician)

    def test_other_hotel(self, other_hotel, leaking_tap, other_manager):
        with pytest.raises(WorkOrderNotFoundError):
            accept_work_order(tenant=other_hotel, work_order_id=leaking_tap.id, actor=other_manager)


@pytest.mark.django_db
class TestMaintenanceStats:

    def test_empty(self, hotel):
        stats = maintenance_stats(tenant=hotel)

        assert stats['open_issues'] == 0
        assert stats['average_resolution_minutes'] is None

    def test_counts(self, hotel, leaking_tap, technician):
        create_work_order(tenant=hotel, title='Fire alarm fault', priority=WorkOrderPriority.CRITICAL)
        done = create_work_order(tenant=hotel, title='Lobby bulb')
        accept_work_order(tenant=hotel, work_order_id=done.id, actor=technician)
        complete_work_order(tenant=hotel, work_order_id=done.id, actor=technician)

        stats = maintenance_stats(tenant=hotel)

        assert stats['open_issues'] == 2
        assert stats['pending_critical'] == 1
        assert stats['completed_today'] == 1
        assert stats['average_resolution_minutes'] is not None

    def test_average_resolution_minutes(self, hotel, technician):
        now = timezone.now()
        for title, minutes in [('Lobby bulb', 90), ('Door closer', 30)]:
            work_order = create_work_order(tenant=hotel, title=title)
            accept_work_order(tenant=hotel, work_order_id=work_order.id, actor=technician)
            complete_work_order(tenant=hotel, work_order_id=work_order.id, actor=technician)
            WorkOrder.objects.filter(id=work_order.id).update(
                created_at=now - timedelta(minutes=minutes),
                completed_at=now,
            )

        stats = maintenance_stats(tenant=hotel)

        assert stats['average_resolution_minutes'] == 60.0
