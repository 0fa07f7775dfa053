"""Event status lifecycle: gating, cancellation reasons, and the two-step save."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from ..data import BackendRequestError, StatusReadBackError
from ..domain import Event, EventForm, EventStatus, LifecycleAction, Navigation, NavigationTarget
from .context import ServiceContext
from .exceptions import (
    CancellationReasonRequired,
    FieldSaveError,
    InvalidTransition,
    LifecycleValidationError,
    StatusUpdateError,
)

logger = logging.getLogger(__name__)

CANCELLATION_MARKER = "\n\n--- CANCELLED ---\nReason: "

FORWARD_TRANSITIONS = {
    EventStatus.PLANNED: frozenset({EventStatus.CONDUCTED, EventStatus.CANCELLED}),
    EventStatus.CONDUCTED: frozenset(),
    EventStatus.CANCELLED: frozenset(),
}


def append_cancellation_reason(description: str, reason: Optional[str]) -> str:
    cleaned = (reason or "").strip()
    if not cleaned:
        raise CancellationReasonRequired()
    return f"{description or ''}{CANCELLATION_MARKER}{cleaned}"


def has_cancellation_reason(description: str) -> bool:
    _, marker, reason = (description or "").rpartition(CANCELLATION_MARKER)
    return bool(marker) and bool(reason.strip())


def cancellation_count(description: str) -> int:
    return (description or "").count(CANCELLATION_MARKER)


def _check_forward(current: EventStatus, requested: EventStatus) -> None:
    if requested not in FORWARD_TRANSITIONS[current]:
        raise InvalidTransition(current, requested)


def available_actions(status: EventStatus, *, elevated: bool = False) -> tuple[LifecycleAction, ...]:
    actions = [LifecycleAction.SAVE]
    if status is EventStatus.PLANNED:
        actions.extend([LifecycleAction.MARK_CONDUCTED, LifecycleAction.CANCEL])
    elif elevated:
        actions.append(LifecycleAction.REVERT_TO_PLANNED)
    return tuple(actions)


@dataclass(frozen=True, slots=True)
class SaveOutcome:
    event: Event
    navigation: Navigation


def _navigation_after(event: Event, status_override: Optional[EventStatus]) -> Navigation:
    if status_override is EventStatus.CONDUCTED:
        return Navigation(
            NavigationTarget.REPORT_CREATE,
            {
                "eventId": event.id,
                "eventTitle": event.title,
                "eventDate": event.start_date.isoformat(),
            },
        )
    if status_override is EventStatus.CANCELLED:
        return Navigation(NavigationTarget.EVENT_LIST)
    return Navigation(NavigationTarget.EVENT_DETAIL, {"eventId": event.id})


@dataclass(slots=True)
class EventLifecycleController:
    context: ServiceContext

    @property
    def min_description_length(self) -> int:
        return self.context.settings.lifecycle.min_description_length

    def actions_for(self, event: Event, *, elevated: bool = False) -> tuple[LifecycleAction, ...]:
        return available_actions(event.status, elevated=elevated)

    def prepare_cancellation(self, form: EventForm, reason: Optional[str]) -> EventForm:
        """Fold a user supplied cancellation reason into the form's description."""

        return form.with_description(append_cancellation_reason(form.description, reason))

    async def save(
        self,
        form: EventForm,
        status_override: Optional[EventStatus] = None,
        *,
        current_status: Optional[EventStatus] = None,
    ) -> SaveOutcome:
        """Persist the form, then apply ``status_override`` as a separate second call.

        The status call is skipped entirely when the field save fails. When the
        status call fails the fields stay saved and :class:`StatusUpdateError`
        carries the saved event.
        """

        errors = form.validation_errors(min_description_length=self.min_description_length)
        if errors:
            raise LifecycleValidationError(errors)
        if status_override is not None:
            await self._check_transition(form, status_override, current_status)

        saved = await self._save_fields(form)
        if status_override is None:
            logger.info("Saved event %s", saved.id)
            return SaveOutcome(event=saved, navigation=_navigation_after(saved, None))

        try:
            updated = await self.context.events.update_event_status(saved.id, status_override)
        except StatusReadBackError as exc:
            updated = replace(saved, status=exc.status)
        except BackendRequestError as exc:
            logger.error("Event %s saved but status change to %r failed: %s", saved.id, status_override.value, exc)
            raise StatusUpdateError(
                f"The event was saved, but its status could not be changed to "
                f"{status_override.value!r}: {exc}",
                event=saved,
                requested=status_override,
            ) from exc
        logger.info("Event %s moved to %r", updated.id, updated.status.value)
        return SaveOutcome(event=updated, navigation=_navigation_after(updated, status_override))

    async def cancel(
        self,
        form: EventForm,
        reason: Optional[str],
        *,
        current_status: Optional[EventStatus] = None,
    ) -> SaveOutcome:
        prepared = self.prepare_cancellation(form, reason)
        return await self.save(prepared, EventStatus.CANCELLED, current_status=current_status)

    async def override_status(self, event_id: int, status: EventStatus) -> SaveOutcome:
        """Privileged status override outside the forward lifecycle; the description is left as is."""

        try:
            previous = await self.context.events.get_event(event_id)
            updated = await self.context.events.update_event_status(event_id, status)
        except StatusReadBackError as exc:
            updated = replace(previous, status=exc.status)
        except BackendRequestError as exc:
            raise StatusUpdateError(
                f"Status of event {event_id} could not be changed to {status.value!r}: {exc}",
                event=None,
                requested=status,
            ) from exc
        logger.warning(
            "Event %s status overridden from %r to %r",
            event_id,
            previous.status.value,
            updated.status.value,
        )
        return SaveOutcome(event=updated, navigation=_navigation_after(updated, None))

    async def _check_transition(
        self,
        form: EventForm,
        requested: EventStatus,
        current_status: Optional[EventStatus],
    ) -> None:
        stored: Optional[Event] = None
        if current_status is None and form.id is not None:
            stored = await self._load_stored(form.id)
            current_status = stored.status
        _check_forward(current_status or EventStatus.PLANNED, requested)
        if requested is not EventStatus.CANCELLED:
            return
        if not has_cancellation_reason(form.description):
            raise CancellationReasonRequired()
        if form.id is None:
            return
        if stored is None:
            stored = await self._load_stored(form.id)
            _check_forward(stored.status, requested)
        # A block left over from an earlier cancellation does not count as a new reason.
        if cancellation_count(form.description) <= cancellation_count(stored.description):
            raise CancellationReasonRequired()

    async def _load_stored(self, event_id: int) -> Event:
        try:
            return await self.context.events.get_event(event_id)
        except BackendRequestError as exc:
            raise FieldSaveError(f"Could not load event {event_id}: {exc}") from exc

    async def _save_fields(self, form: EventForm) -> Event:
        fields = form.to_fields()
        try:
            if form.id is None:
                return await self.context.events.create_event(fields)
            return await self.context.events.update_event(form.id, fields)
        except BackendRequestError as exc:
            logger.warning("Saving event %s failed: %s", form.id or "(new)", exc)
            raise FieldSaveError(f"The event could not be saved: {exc}") from exc
