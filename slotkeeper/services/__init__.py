"""Service layer: booking, availability, the lifecycle sweeper and webhook delivery."""
from slotkeeper.services.appointment_service import AppointmentService, BookAppointmentCommand
from slotkeeper.services.appointment_webhook_service import WebhookEventPublisher
from slotkeeper.services.availability_service import AvailabilityService
from slotkeeper.services.lifecycle_sweeper import LifecycleSweeper, SweepResult

__all__ = [
    "AppointmentService",
    "BookAppointmentCommand",
    "AvailabilityService",
    "LifecycleSweeper",
    "SweepResult",
    "WebhookEventPublisher",
]
