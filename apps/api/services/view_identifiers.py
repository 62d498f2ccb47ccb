"""Query-parameter validation for the public view endpoints."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

from services.view_errors import InvalidIdentifier, MissingIdentifier

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ViewIdentifiers:
    qr_id: Optional[str] = None
    ad_id: Optional[str] = None


def is_uuid(value: str) -> bool:
    return bool(UUID_PATTERN.match(value or ""))


def _clean(param: str, value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    if not text:
        return None
    if not is_uuid(text):
        raise InvalidIdentifier(param, text)
    return text.lower()


def validate_view_identifiers(qr: Optional[str], ad: Optional[str]) -> ViewIdentifiers:
    """Validate raw ``qr``/``ad`` parameters before any lookup is issued.

    Raises InvalidIdentifier for a present but malformed value and
    MissingIdentifier when neither parameter is supplied.
    """
    qr_id = _clean("qr", qr)
    ad_id = _clean("ad", ad)
    if qr_id is None and ad_id is None:
        raise MissingIdentifier()
    return ViewIdentifiers(qr_id=qr_id, ad_id=ad_id)
