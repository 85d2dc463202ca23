"""
Request schemas for the temple registry.

Payloads are validated once here, at the boundary; services receive
already-typed objects and never parse embedded JSON text.
"""

import re
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\d{10}$")


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _check_email(value: Optional[str]) -> Optional[str]:
    if value is not None and not EMAIL_RE.match(value):
        raise ValueError("A valid email address must be provided.")
    return value


def _check_phone(value: Optional[str]) -> Optional[str]:
    if value is not None and not PHONE_RE.match(value):
        raise ValueError("A valid 10-digit phone number must be provided.")
    return value


class _Schema(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# --- Nested objects ---


class Location(_Schema):
    address: Optional[str] = None
    city: str = Field(min_length=1)
    state: Optional[str] = None
    country: Optional[str] = None

    @field_validator("city")
    @classmethod
    def city_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Location city must be provided.")
        return v.strip()


class DarshanTimings(_Schema):
    morning: str = Field(min_length=1)
    evening: str = Field(min_length=1)


class ContactDetails(_Schema):
    email: str
    phone: str
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None

    @field_validator("email", "phone", mode="before")
    @classmethod
    def strip(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: str) -> str:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: str) -> str:
        return _check_phone(v)


# --- Sub-collection items ---


class CeremonyIn(_Schema):
    """A special ceremony: name plus a parseable timestamp."""
    name: str = Field(min_length=1)
    date_time: datetime = Field(alias="dateTime")

    def to_item(self) -> dict:
        return {"name": self.name, "dateTime": self.date_time.isoformat()}


class EventIn(_Schema):
    """An upcoming event: title, optional description and a parseable date."""
    title: str = Field(min_length=1)
    description: Optional[str] = None
    event_date: datetime = Field(alias="eventDate")

    def to_item(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "eventDate": self.event_date.isoformat(),
        }


# --- Create ---


class TempleCreate(_Schema):
    """Full creation payload (everything except the uploaded files)."""

    temple_name: str = Field(alias="templeName", min_length=1)
    location: Location
    description: str = Field(min_length=1)
    history: str = Field(min_length=1)
    darshan_timings: DarshanTimings = Field(alias="darshanTimings")
    activities_and_services: str = Field(alias="activitiesAndServices", min_length=1)
    contact_details: ContactDetails = Field(alias="contactDetails")
    special_ceremonies: List[CeremonyIn] = Field(default_factory=list, alias="specialCeremonies")
    upcoming_events: List[EventIn] = Field(default_factory=list, alias="upcomingEvents")
    verification_remarks: Optional[str] = Field(default=None, alias="verificationRemarks")

    @field_validator("temple_name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Temple name must be provided.")
        return v.strip()


# --- Patch ---


class LocationPatch(_Schema):
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blanks_are_absent(cls, v):
        return _blank_to_none(v)


class DarshanTimingsPatch(_Schema):
    morning: Optional[str] = None
    evening: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blanks_are_absent(cls, v):
        return _blank_to_none(v)


class ContactDetailsPatch(_Schema):
    email: Optional[str] = None
    phone: Optional[str] = None
    facebook: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blanks_are_absent(cls, v):
        return _blank_to_none(v)

    @field_validator("email")
    @classmethod
    def valid_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_email(v)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, v: Optional[str]) -> Optional[str]:
        return _check_phone(v)


class TemplePatch(_Schema):
    """
    Sparse update. Blank strings count as absent; `slug`, `verifiedBy`
    and `registeredBy` are never accepted from callers.
    """

    temple_name: Optional[str] = Field(default=None, alias="templeName")
    description: Optional[str] = None
    history: Optional[str] = None
    activities_and_services: Optional[str] = Field(default=None, alias="activitiesAndServices")
    location: Optional[LocationPatch] = None
    darshan_timings: Optional[DarshanTimingsPatch] = Field(default=None, alias="darshanTimings")
    contact_details: Optional[ContactDetailsPatch] = Field(default=None, alias="contactDetails")

    # Honoured only for privileged callers
    is_verified: Optional[bool] = Field(default=None, alias="isVerified")
    verification_remarks: Optional[str] = Field(default=None, alias="verificationRemarks")

    @field_validator(
        "temple_name", "description", "history", "activities_and_services",
        "verification_remarks", mode="before",
    )
    @classmethod
    def blanks_are_absent(cls, v):
        return _blank_to_none(v)


# --- Other requests ---


class GalleryImageDelete(_Schema):
    image_url: str = Field(alias="imageUrl", min_length=1)


class TempleListQuery(_Schema):
    page: int = Field(default=1, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    city: Optional[str] = None
    state: Optional[str] = None
    is_verified: Optional[bool] = Field(default=None, alias="isVerified")
    sort_by: str = Field(default="createdAt", alias="sortBy")
    order: Literal["asc", "desc"] = "desc"
    fields: Optional[str] = None

    @field_validator("city", "state", "fields", mode="before")
    @classmethod
    def blanks_are_absent(cls, v):
        return _blank_to_none(v)
