"""Editable event field snapshot and its save-time validation."""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Event, parse_date

DEFAULT_MIN_DESCRIPTION_LENGTH = 100

_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Keys owned by the status endpoint or the backend, never sent with a field save.
_NON_FIELD_KEYS = ("eventId", "status", "createdByUserId")


class EventForm(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id: Optional[int] = Field(default=None, alias="eventId")
    title: str = ""
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible_full_name: str = ""
    responsible_position: Optional[str] = None
    responsible_phone: Optional[str] = None
    responsible_email: Optional[str] = None
    location_text: Optional[str] = None
    address_text: Optional[str] = None
    participants_info: Optional[str] = None
    participant_count: Optional[int] = None
    has_foreigners: bool = False
    foreigner_count: Optional[int] = None
    has_minors: bool = False
    minor_count: Optional[int] = None
    funding_amount: Optional[float] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        return parse_date(value)

    @field_validator(
        "responsible_position",
        "responsible_phone",
        "responsible_email",
        "location_text",
        "address_text",
        "participants_info",
        "participant_count",
        "foreigner_count",
        "minor_count",
        "funding_amount",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_event(cls, event: Event) -> "EventForm":
        record = event.to_record()
        record.pop("status", None)
        record.pop("createdByUserId", None)
        return cls.model_validate(record)

    def validation_errors(self, *, min_description_length: int = DEFAULT_MIN_DESCRIPTION_LENGTH) -> List[str]:
        """Return human readable problems that block a save; empty when the form is valid."""

        errors: list[str] = []
        if not self.title.strip():
            errors.append("Title is required.")
        if not self.description.strip():
            errors.append("Description is required.")
        elif len(self.description) < min_description_length:
            errors.append(f"Description must be at least {min_description_length} characters long.")
        if self.start_date is None:
            errors.append("Start date is required.")
        elif self.end_date is not None and self.end_date < self.start_date:
            errors.append("End date cannot be earlier than the start date.")
        if not self.responsible_full_name.strip():
            errors.append("Responsible person's full name is required.")
        if self.responsible_email and not _EMAIL_PATTERN.match(self.responsible_email):
            errors.append("Responsible person's email is not a valid address.")
        for label, value in (
            ("Participant count", self.participant_count),
            ("Foreigner count", self.foreigner_count),
            ("Minor count", self.minor_count),
            ("Funding amount", self.funding_amount),
        ):
            if value is not None and value < 0:
                errors.append(f"{label} cannot be negative.")
        if self.has_foreigners and self.foreigner_count is None:
            errors.append("Foreigner count is required when foreigners participate.")
        if self.has_minors and self.minor_count is None:
            errors.append("Minor count is required when minors participate.")
        return errors

    def with_description(self, description: str) -> "EventForm":
        return self.model_copy(update={"description": description})

    def to_fields(self) -> Dict[str, Any]:
        payload = self.model_dump(mode="json", by_alias=True)
        for key in _NON_FIELD_KEYS:
            payload.pop(key, None)
        payload["foreignerCount"] = self.foreigner_count if self.has_foreigners else 0
        payload["minorCount"] = self.minor_count if self.has_minors else 0
        return payload
