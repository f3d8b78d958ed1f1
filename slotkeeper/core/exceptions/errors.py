"""
Built-in exception types. The scheduling-specific kinds live at the bottom.
"""
from __future__ import annotations

from slotkeeper.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration (env or per-scope schedule payload)."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    """Requested resource not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate, overlapping reservation)."""

    default_code = "CONFLICT"
    default_http_status = 409


# ── Scheduling ────────────────────────────────────────────────────────────────

class InvalidAppointmentError(ValidationError):
    """Malformed appointment data: bad price/currency, start >= end, start in the past."""

    default_code = "INVALID_APPOINTMENT"
    default_http_status = 400


class SlotUnavailableError(ConflictError):
    """The requested interval overlaps an active appointment in the same scope."""

    default_code = "SLOT_UNAVAILABLE"
    default_http_status = 409


class InvalidTransitionError(ProjectError):
    """A lifecycle method was called from a status that does not allow it."""

    default_code = "INVALID_TRANSITION"
    default_http_status = 422
