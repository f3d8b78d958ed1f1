"""
Project exception system.

Usage:
    from slotkeeper.core.exceptions import SlotUnavailableError, InvalidTransitionError

    raise SlotUnavailableError(
        "Time slot is already booked",
        details={"resource_scope_id": str(scope_id)},
    )

    try:
        appointment.complete()
    except InvalidTransitionError as exc:
        logger.warning("Rejected: %s", exc.to_dict())
"""
from slotkeeper.core.exceptions.base import ProjectError
from slotkeeper.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    InvalidAppointmentError,
    InvalidTransitionError,
    NotFoundError,
    SlotUnavailableError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "InvalidAppointmentError",
    "SlotUnavailableError",
    "InvalidTransitionError",
]
