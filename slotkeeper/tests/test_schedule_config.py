"""Tests for ScheduleConfig: payload parsing and candidate slot generation."""
from __future__ import annotations

import datetime as _dt
import unittest

from slotkeeper.core.exceptions import ConfigurationError
from slotkeeper.domain.schedule import DEFAULT_TIMEZONE, DaySchedule, ScheduleConfig
from slotkeeper.tests.fakes import at, weekday_config

MONDAY = _dt.date(2030, 1, 7)
SATURDAY = _dt.date(2030, 1, 5)


def _payload(**overrides):
    data = {
        "slotDuration": 30,
        "bufferBetweenAppointments": 0,
        "appointmentEnabled": True,
        "timezone": "UTC",
        "businessHours": {"monday": {"start": "09:00:00", "end": "10:00:00", "closed": False}},
    }
    data.update(overrides)
    return data


class TestScheduleConfigParsing(unittest.TestCase):
    def test_full_payload(self):
        cfg = ScheduleConfig.from_payload(_payload(bufferBetweenAppointments=10))
        self.assertEqual(cfg.slot_duration_minutes, 30)
        self.assertEqual(cfg.buffer_minutes, 10)
        self.assertTrue(cfg.appointments_enabled)
        self.assertEqual(cfg.per_weekday["monday"].opens, _dt.time(9, 0))

    def test_defaults(self):
        cfg = ScheduleConfig.from_payload({"slotDuration": 45})
        self.assertEqual(cfg.buffer_minutes, 0)
        self.assertFalse(cfg.appointments_enabled)
        self.assertEqual(cfg.timezone, DEFAULT_TIMEZONE)
        self.assertEqual(dict(cfg.per_weekday), {})

    def test_short_time_format_accepted(self):
        cfg = ScheduleConfig.from_payload(
            _payload(businessHours={"Monday": {"start": "08:30", "end": "12:00"}})
        )
        self.assertEqual(cfg.per_weekday["monday"].opens, _dt.time(8, 30))

    def test_unknown_day_keys_ignored(self):
        cfg = ScheduleConfig.from_payload(_payload(businessHours={"holiday": {"closed": True}}))
        self.assertNotIn("holiday", cfg.per_weekday)

    def test_missing_slot_duration(self):
        with self.assertRaises(ConfigurationError):
            ScheduleConfig.from_payload({"appointmentEnabled": True})

    def test_non_positive_slot_duration(self):
        for bad in (0, -15, "30", True):
            with self.subTest(value=bad), self.assertRaises(ConfigurationError):
                ScheduleConfig.from_payload(_payload(slotDuration=bad))

    def test_negative_buffer(self):
        with self.assertRaises(ConfigurationError):
            ScheduleConfig.from_payload(_payload(bufferBetweenAppointments=-5))

    def test_bad_time_string(self):
        with self.assertRaises(ConfigurationError) as ctx:
            ScheduleConfig.from_payload(
                _payload(businessHours={"monday": {"start": "9am", "end": "17:00"}})
            )
        self.assertEqual(ctx.exception.details["day"], "monday")

    def test_unknown_timezone(self):
        with self.assertRaises(ConfigurationError):
            ScheduleConfig.from_payload(_payload(timezone="Mars/Olympus_Mons"))

    def test_not_an_object(self):
        with self.assertRaises(ConfigurationError):
            ScheduleConfig.from_payload(["slotDuration", 30])

    def test_flags_must_be_booleans(self):
        for bad in ("false", "true", 0, 1):
            with self.subTest(value=bad), self.assertRaises(ConfigurationError):
                ScheduleConfig.from_payload(_payload(appointmentEnabled=bad))

    def test_closed_flag_must_be_boolean(self):
        with self.assertRaises(ConfigurationError) as ctx:
            ScheduleConfig.from_payload(
                _payload(businessHours={"sunday": {"start": "09:00", "end": "12:00", "closed": "false"}})
            )
        self.assertEqual(ctx.exception.details["field"], "businessHours.sunday.closed")

    def test_payload_round_trip(self):
        cfg = weekday_config(buffer=5)
        self.assertEqual(ScheduleConfig.from_payload(cfg.to_payload()), cfg)


class TestCandidateGeneration(unittest.TestCase):
    def test_two_back_to_back_slots(self):
        cfg = ScheduleConfig.from_payload(_payload())
        slots = cfg.generate_candidates(MONDAY)
        self.assertEqual(
            [(s.start, s.end) for s in slots],
            [
                (at(2030, 1, 7, 9, 0), at(2030, 1, 7, 9, 30)),
                (at(2030, 1, 7, 9, 30), at(2030, 1, 7, 10, 0)),
            ],
        )

    def test_deterministic(self):
        cfg = weekday_config()
        self.assertEqual(cfg.generate_candidates(MONDAY), cfg.generate_candidates(MONDAY))

    def test_buffer_spaces_slots(self):
        cfg = ScheduleConfig.from_payload(
            _payload(
                bufferBetweenAppointments=10,
                businessHours={"monday": {"start": "09:00:00", "end": "11:00:00"}},
            )
        )
        starts = [s.start.strftime("%H:%M") for s in cfg.generate_candidates(MONDAY)]
        self.assertEqual(starts, ["09:00", "09:40", "10:20"])

    def test_no_partial_trailing_slot(self):
        cfg = ScheduleConfig.from_payload(
            _payload(slotDuration=45, businessHours={"monday": {"start": "09:00", "end": "10:00"}})
        )
        slots = cfg.generate_candidates(MONDAY)
        self.assertEqual(len(slots), 1)
        self.assertEqual(slots[0].end, at(2030, 1, 7, 9, 45))

    def test_slot_longer_than_day(self):
        cfg = ScheduleConfig.from_payload(_payload(slotDuration=90))
        self.assertEqual(cfg.generate_candidates(MONDAY), [])

    def test_closed_day(self):
        self.assertEqual(weekday_config().generate_candidates(SATURDAY), [])

    def test_missing_day_is_closed(self):
        cfg = ScheduleConfig.from_payload(_payload())
        self.assertEqual(cfg.generate_candidates(_dt.date(2030, 1, 8)), [])

    def test_half_specified_day_is_closed(self):
        cfg = ScheduleConfig.from_payload(_payload(businessHours={"monday": {"start": "09:00"}}))
        self.assertFalse(cfg.per_weekday["monday"].is_open)
        self.assertEqual(cfg.generate_candidates(MONDAY), [])

    def test_hours_are_local_to_scope_timezone(self):
        cfg = ScheduleConfig.from_payload(_payload(timezone="America/Bogota"))
        slots = cfg.generate_candidates(MONDAY)
        self.assertEqual(slots[0].start, at(2030, 1, 7, 14, 0))
        self.assertEqual(slots[-1].end, at(2030, 1, 7, 15, 0))

    def test_candidates_never_overlap(self):
        slots = weekday_config(slot=25, buffer=5).generate_candidates(MONDAY)
        for earlier, later in zip(slots, slots[1:]):
            self.assertFalse(earlier.overlaps(later))
            self.assertLessEqual(earlier.end, later.start)

    def test_seconds_in_opening_time_are_kept(self):
        cfg = ScheduleConfig.from_payload(
            _payload(businessHours={"monday": {"start": "09:00:30", "end": "10:00:00"}})
        )
        slots = cfg.generate_candidates(MONDAY)
        self.assertEqual(len(slots), 1)
        self.assertEqual(slots[0].start, at(2030, 1, 7, 9, 0) + _dt.timedelta(seconds=30))


class TestCandidateGenerationAcrossDst(unittest.TestCase):
    """America/New_York: clocks jump 02:00 -> 03:00 on 2030-03-10, fall back on 2030-11-03."""

    def _sunday_config(self):
        return ScheduleConfig.from_payload(
            _payload(
                timezone="America/New_York",
                businessHours={"sunday": {"start": "00:00", "end": "06:00"}},
            )
        )

    def _assert_back_to_back(self, slots):
        for slot in slots:
            self.assertEqual(slot.duration_minutes, 30)
        for earlier, later in zip(slots, slots[1:]):
            self.assertEqual(earlier.end, later.start)

    def test_spring_forward_day_skips_missing_hour(self):
        slots = self._sunday_config().generate_candidates(_dt.date(2030, 3, 10))
        # 00:00 EST is 05:00Z, 06:00 EDT is 10:00Z
        self.assertEqual(len(slots), 10)
        self.assertEqual(slots[0].start, at(2030, 3, 10, 5, 0))
        self.assertEqual(slots[-1].end, at(2030, 3, 10, 10, 0))
        self._assert_back_to_back(slots)

    def test_fall_back_day_covers_repeated_hour(self):
        slots = self._sunday_config().generate_candidates(_dt.date(2030, 11, 3))
        # 00:00 EDT is 04:00Z, 06:00 EST is 11:00Z
        self.assertEqual(len(slots), 14)
        self.assertEqual(slots[0].start, at(2030, 11, 3, 4, 0))
        self.assertEqual(slots[-1].end, at(2030, 11, 3, 11, 0))
        self._assert_back_to_back(slots)

    def test_opening_inside_gap(self):
        cfg = ScheduleConfig.from_payload(
            _payload(
                timezone="America/New_York",
                businessHours={"sunday": {"start": "02:30", "end": "04:00"}},
            )
        )
        slots = cfg.generate_candidates(_dt.date(2030, 3, 10))
        # 02:30 does not exist; it resolves with the EST offset to 07:30Z (03:30 EDT)
        self.assertEqual([s.start for s in slots], [at(2030, 3, 10, 7, 30)])
        self.assertEqual(slots[0].end, at(2030, 3, 10, 8, 0))


class TestDaySchedule(unittest.TestCase):
    def test_closed_flag_wins(self):
        day = DaySchedule.from_payload("sunday", {"start": "09:00", "end": "12:00", "closed": True})
        self.assertFalse(day.is_open)
        self.assertEqual(day.to_payload(), {"closed": True})

    def test_null_is_closed(self):
        self.assertFalse(DaySchedule.from_payload("sunday", None).is_open)


if __name__ == "__main__":
    unittest.main()
