from __future__ import annotations

from typing import Iterable, Optional

from ..domain import Event, EventStatus


class LifecycleError(RuntimeError):
    """Base class for event lifecycle failures."""


class LifecycleValidationError(LifecycleError):
    """Raised before any network call when the field snapshot cannot be saved."""

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Event form is invalid.")


class CancellationReasonRequired(LifecycleValidationError):
    """Raised when a cancellation is requested without a reason."""

    def __init__(self) -> None:
        super().__init__(["A cancellation reason is required."])


class InvalidTransition(LifecycleError):
    """Raised when a status change is not allowed from the event's current status."""

    def __init__(self, current: Optional[EventStatus], requested: Optional[EventStatus]) -> None:
        self.current = current
        self.requested = requested
        current_label = current.value if current else "unknown"
        requested_label = requested.value if requested else "none"
        super().__init__(f"Cannot change event status from {current_label!r} to {requested_label!r}.")


class FieldSaveError(LifecycleError):
    """Raised when the field upsert fails; no status change was attempted."""


class StatusUpdateError(LifecycleError):
    """Raised when fields were saved but the status change did not apply."""

    def __init__(self, message: str, *, event: Optional[Event], requested: EventStatus) -> None:
        super().__init__(message)
        self.event = event
        self.requested = requested
