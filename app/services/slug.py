"""
Slug generation for public temple URLs.

Slugs are readable lookup keys, not identifiers: two temples may share
one, so nothing should treat a slug as a primary key.
"""

import re
import unicodedata
from typing import Optional

FALLBACK_SLUG = "temple"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, ASCII-fold and hyphenate text. Idempotent."""
    folded = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", folded.lower()).strip("-")
    return slug or FALLBACK_SLUG


def temple_slug(temple_name: str, city: Optional[str] = None) -> str:
    """
    Slug for a temple.

    New temples use the name alone ("Shiva Mandir" -> "shiva-mandir");
    once the name or city is edited the city is folded in as well.
    """
    if city:
        return slugify(f"{temple_name}-{city}")
    return slugify(temple_name)
