"""Slotkeeper: appointment scheduling engine (slots, bookings, lifecycle sweep)."""

__version__ = "1.0.0"
