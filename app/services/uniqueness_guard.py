"""
Uniqueness Guard - rejects duplicate temples before anything is uploaded.

Checks run against the whole population, in order: (name, city) pair,
then email or phone. The first conflict found is reported.
"""

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import or_

from app.exceptions import Conflict
from app.models.temple import Temple
from app.services.temple_repository import TempleRepository


class ConflictKind(str, Enum):
    NAME_CITY = "name_city"
    EMAIL = "email"
    PHONE = "phone"


_MESSAGES = {
    ConflictKind.NAME_CITY: "A temple with this name already exists in the specified city.",
    ConflictKind.EMAIL: "A temple with this email address already exists.",
    ConflictKind.PHONE: "A temple with this phone number already exists.",
}

_FIELDS = {
    ConflictKind.NAME_CITY: "templeName",
    ConflictKind.EMAIL: "contactDetails.email",
    ConflictKind.PHONE: "contactDetails.phone",
}


@dataclass(frozen=True)
class UniquenessViolation:
    kind: ConflictKind
    value: str
    existing_id: uuid.UUID

    @property
    def field(self) -> str:
        return _FIELDS[self.kind]

    @property
    def message(self) -> str:
        return _MESSAGES[self.kind]

    def to_error(self) -> Conflict:
        return Conflict(self.message, field=self.field)


class UniquenessGuard:
    """Read-only duplicate detection for temple identity and contact fields."""

    def __init__(self, repo: TempleRepository):
        self.repo = repo

    async def check_create_conflicts(
        self,
        temple_name: str,
        city: str,
        email: str,
        phone: str,
    ) -> Optional[UniquenessViolation]:
        return await self._check(temple_name, city, email, phone)

    async def check_update_conflicts(
        self,
        temple: Temple,
        temple_name: str,
        city: str,
        email: str,
        phone: str,
    ) -> Optional[UniquenessViolation]:
        """Same checks for a patched temple, ignoring unchanged values and itself."""
        name_changed = temple_name != temple.temple_name or city != temple.location_city
        return await self._check(
            temple_name if name_changed else None,
            city,
            email if email != temple.contact_email else None,
            phone if phone != temple.contact_phone else None,
            exclude_id=temple.id,
        )

    async def _check(
        self,
        temple_name: Optional[str],
        city: str,
        email: Optional[str],
        phone: Optional[str],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> Optional[UniquenessViolation]:
        excluded = [Temple.id != exclude_id] if exclude_id is not None else []

        if temple_name is not None:
            existing = await self.repo.find_one(
                Temple.temple_name == temple_name,
                Temple.location_city == city,
                *excluded,
            )
            if existing:
                return UniquenessViolation(ConflictKind.NAME_CITY, temple_name, existing.id)

        contact_criteria = []
        if email is not None:
            contact_criteria.append(Temple.contact_email == email)
        if phone is not None:
            contact_criteria.append(Temple.contact_phone == phone)
        if not contact_criteria:
            return None

        existing = await self.repo.find_one(or_(*contact_criteria), *excluded)
        if existing is None:
            return None
        if email is not None and existing.contact_email == email:
            return UniquenessViolation(ConflictKind.EMAIL, email, existing.id)
        return UniquenessViolation(ConflictKind.PHONE, phone, existing.id)
