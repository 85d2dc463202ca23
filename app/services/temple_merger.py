"""
Partial-update merger for temples.

Applies a sparse patch field by field. Nested objects are merged per
sub-field, so a patch carrying only `location.city` leaves the address,
state and country alone. Fields the patch does not carry are never
touched.
"""

from typing import Any, Dict, Tuple

from app.models.temple import Temple
from app.schemas.temple import TemplePatch
from app.services.slug import temple_slug

# patch attribute -> (document path, column)
TOP_LEVEL_FIELDS = {
    "temple_name": ("templeName", "temple_name"),
    "description": ("description", "description"),
    "history": ("history", "history"),
    "activities_and_services": ("activitiesAndServices", "activities_and_services"),
}

# patch attribute -> (document key, {sub-field: column})
NESTED_FIELDS = {
    "location": ("location", {
        "address": "location_address",
        "city": "location_city",
        "state": "location_state",
        "country": "location_country",
    }),
    "darshan_timings": ("darshanTimings", {
        "morning": "darshan_morning",
        "evening": "darshan_evening",
    }),
    "contact_details": ("contactDetails", {
        "email": "contact_email",
        "phone": "contact_phone",
        "facebook": "contact_facebook",
        "instagram": "contact_instagram",
        "website": "contact_website",
    }),
}

SLUG_SOURCES = {"templeName", "location.city"}


def merge(existing: Temple, patch: TemplePatch) -> Tuple[Temple, Dict[str, Any]]:
    """
    Merge `patch` onto `existing` in place.

    Returns the temple and a map of changed document paths to their new
    values. Only values that actually differ are reported. Verification
    keys are left to the verification workflow.
    """
    changed: Dict[str, Any] = {}

    for attr, (path, column) in TOP_LEVEL_FIELDS.items():
        value = getattr(patch, attr)
        if value is None:
            continue
        if getattr(existing, column) != value:
            setattr(existing, column, value)
            changed[path] = value

    for attr, (prefix, columns) in NESTED_FIELDS.items():
        sub_patch = getattr(patch, attr)
        if sub_patch is None:
            continue
        for sub_field, column in columns.items():
            value = getattr(sub_patch, sub_field)
            if value is None:
                continue
            if getattr(existing, column) != value:
                setattr(existing, column, value)
                changed[f"{prefix}.{sub_field}"] = value

    if SLUG_SOURCES & changed.keys():
        slug = temple_slug(existing.temple_name, existing.location_city)
        if slug != existing.slug:
            existing.slug = slug
        changed["slug"] = existing.slug

    return existing, changed


def proposed_values(existing: Temple, patch: TemplePatch) -> Dict[str, Any]:
    """
    Values the uniqueness-relevant columns would hold after the patch,
    computed without touching `existing`.
    """
    location = patch.location
    contact = patch.contact_details
    return {
        "temple_name": patch.temple_name or existing.temple_name,
        "location_city": (location.city if location and location.city else existing.location_city),
        "contact_email": (contact.email if contact and contact.email else existing.contact_email),
        "contact_phone": (contact.phone if contact and contact.phone else existing.contact_phone),
    }
