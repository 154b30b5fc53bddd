"""
Redaction of premium location fields for free and anonymous users.

``redact_location`` works on the serialized representation only and always
returns a new dict; the stored record is never touched. List and detail
endpoints share it and differ only in the description limit.
"""

from __future__ import annotations

from typing import Any

LIST_DESCRIPTION_LIMIT = 80
DETAIL_DESCRIPTION_LIMIT = 120

CONTACT_SENTINEL = "Upgrade to Premium for contact details"
WEBSITE_SENTINEL = "Upgrade to Premium to access website"
DESCRIPTION_SUFFIX = "... Upgrade to Premium for full details"
DESCRIPTION_SENTINEL = (
    "Upgrade to Premium for complete facility information and contact details"
)

CONTACT_FIELDS = ("phone", "email")
AMENITY_PREFIX = "has_"


def redact_location(
    data: dict[str, Any],
    *,
    is_premium: bool,
    description_limit: int = LIST_DESCRIPTION_LIMIT,
) -> dict[str, Any]:
    if is_premium:
        return dict(data)

    redacted = dict(data)
    for field in CONTACT_FIELDS:
        if field in redacted:
            redacted[field] = CONTACT_SENTINEL

    # Only stub a website that exists.
    if redacted.get("website"):
        redacted["website"] = WEBSITE_SENTINEL

    description = redacted.get("description")
    if description:
        redacted["description"] = description[:description_limit] + DESCRIPTION_SUFFIX
    else:
        redacted["description"] = DESCRIPTION_SENTINEL

    for field, value in redacted.items():
        if field.startswith(AMENITY_PREFIX) and isinstance(value, bool):
            redacted[field] = False

    return redacted
