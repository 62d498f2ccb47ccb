"""Error taxonomy for view/QR resolution."""

from __future__ import annotations

from typing import Optional


class ViewResolutionError(Exception):
    """Base class for resolution failures."""


class InvalidIdentifier(ViewResolutionError):
    """A supplied qr/ad parameter is not a canonical UUID."""

    def __init__(self, param: str, value: str):
        self.param = param
        self.value = value
        super().__init__(f"Invalid {param} identifier")


class MissingIdentifier(ViewResolutionError):
    """Neither qr nor ad was supplied."""

    def __init__(self) -> None:
        super().__init__("Missing QR code or ad space ID")


class NotFound(ViewResolutionError):
    """A lookup returned no row. Internal signal only, never shown to viewers."""

    def __init__(self, entity: str, identifier: Optional[str] = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(f"{entity} not found: {identifier}")


class MediaUnreachable(ViewResolutionError):
    """A creative URL could not be fetched by the readiness probe."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        super().__init__(f"Media unreachable ({reason or 'unknown'}): {url}")


class AnalyticsWriteFailed(ViewResolutionError):
    """A counter increment or scan log insert failed."""
