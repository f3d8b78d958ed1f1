"""Concurrent bookings of the same slot: only the scope lock keeps them apart."""
from __future__ import annotations

import asyncio
import unittest
import uuid
from decimal import Decimal

from slotkeeper.core.exceptions import SlotUnavailableError
from slotkeeper.services.appointment_service import AppointmentService, BookAppointmentCommand
from slotkeeper.tests.fakes import FakeClock, InMemoryAppointmentStore, _run, at

SCOPE = uuid.uuid4()


def _command():
    return BookAppointmentCommand(
        resource_scope_id=SCOPE,
        subject_id=uuid.uuid4(),
        service_id=1,
        start_time=at(2030, 1, 7, 10, 0),
        end_time=at(2030, 1, 7, 10, 30),
        price=Decimal("20"),
        currency="USD",
    )


async def _book_twice(store):
    clock = FakeClock(at(2030, 1, 6, 12, 0))
    first = AppointmentService(store, clock=clock)
    second = AppointmentService(store, clock=clock)
    return await asyncio.gather(
        first.book(_command()), second.book(_command()), return_exceptions=True
    )


class TestBookingRace(unittest.TestCase):
    def test_unserialized_check_then_insert_double_books(self):
        store = InMemoryAppointmentStore(serialize_bookings=False)
        results = _run(_book_twice(store))
        self.assertFalse(any(isinstance(r, Exception) for r in results))
        self.assertEqual(len(store.rows), 2)

    def test_scope_lock_admits_exactly_one(self):
        store = InMemoryAppointmentStore()
        results = _run(_book_twice(store))
        failures = [r for r in results if isinstance(r, Exception)]
        self.assertEqual(len(failures), 1)
        self.assertIsInstance(failures[0], SlotUnavailableError)
        self.assertEqual(len(store.rows), 1)

    def test_different_scopes_do_not_block_each_other(self):
        store = InMemoryAppointmentStore()
        clock = FakeClock(at(2030, 1, 6, 12, 0))
        svc = AppointmentService(store, clock=clock)
        other = BookAppointmentCommand(
            resource_scope_id=uuid.uuid4(),
            subject_id=uuid.uuid4(),
            service_id=1,
            start_time=at(2030, 1, 7, 10, 0),
            end_time=at(2030, 1, 7, 10, 30),
            price=Decimal("20"),
            currency="USD",
        )

        async def scenario():
            return await asyncio.gather(svc.book(_command()), svc.book(other))

        self.assertEqual(len(_run(scenario())), 2)
        self.assertEqual(len(store.rows), 2)


if __name__ == "__main__":
    unittest.main()
