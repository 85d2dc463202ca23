"""
Temple Model - registered places of worship with their nested details,
ordered sub-collections, media and verification state.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class Temple(Base):
    """
    One row per registered temple.

    Nested objects (location, darshan timings, contact details) are
    flattened into columns so they can be filtered and constrained.
    Sub-collections live in JSON columns and are always reassigned as new
    lists, never mutated in place.
    """

    __tablename__ = "temples"
    __table_args__ = (
        UniqueConstraint("temple_name", "location_city", name="uq_temples_name_city"),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    temple_name: Mapped[str] = mapped_column(String(200), nullable=False)

    # Location
    location_address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    location_city: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    location_state: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    location_country: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Content
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    history: Mapped[str] = mapped_column(Text, nullable=False, default="")
    activities_and_services: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Darshan timings
    darshan_morning: Mapped[str] = mapped_column(String(100), nullable=False)
    darshan_evening: Mapped[str] = mapped_column(String(100), nullable=False)

    # Contact details (email and phone are globally unique)
    contact_email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    contact_phone: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    contact_facebook: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    contact_instagram: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    contact_website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Media; public ids are the Cloudinary handles used for deletion
    cover_image: Mapped[str] = mapped_column(String(500), nullable=False)
    cover_image_public_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    # [{"url": ..., "public_id": ...}]
    photo_gallery: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # [{"name": ..., "dateTime": iso}]
    special_ceremonies: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # [{"title": ..., "description": ..., "eventDate": iso}]
    upcoming_events: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    # Verification
    is_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    verified_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    verification_remarks: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Provenance
    registered_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    # Optimistic lock counter
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return f"<Temple {self.temple_name} ({self.location_city})>"

    @property
    def gallery_urls(self) -> List[str]:
        return [entry["url"] for entry in (self.photo_gallery or [])]

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the camelCase document returned by the API."""
        return {
            "id": str(self.id),
            "templeName": self.temple_name,
            "slug": self.slug,
            "location": {
                "address": self.location_address,
                "city": self.location_city,
                "state": self.location_state,
                "country": self.location_country,
            },
            "description": self.description,
            "history": self.history,
            "darshanTimings": {
                "morning": self.darshan_morning,
                "evening": self.darshan_evening,
            },
            "activitiesAndServices": self.activities_and_services,
            "contactDetails": {
                "email": self.contact_email,
                "phone": self.contact_phone,
                "facebook": self.contact_facebook,
                "instagram": self.contact_instagram,
                "website": self.contact_website,
            },
            "coverImage": self.cover_image,
            "photoGallery": self.gallery_urls,
            "specialCeremonies": list(self.special_ceremonies or []),
            "upcomingEvents": list(self.upcoming_events or []),
            "isVerified": bool(self.is_verified),
            "verifiedBy": str(self.verified_by) if self.verified_by else None,
            "verificationRemarks": self.verification_remarks or "",
            "registeredBy": str(self.registered_by),
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
