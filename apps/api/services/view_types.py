"""Typed content models and resolution results for the public view endpoints."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from config import storage_public_url

CreativeKind = Literal["none", "image", "video"]
DesignSource = Literal["by_ad_space", "by_id", "by_owner"]

UNSAFE_REDIRECT_SCHEMES = {"javascript", "data", "blob", "vbscript", "file"}


class _JsonContent(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @field_validator("*", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
            return value or None
        return value

    @classmethod
    def parse(cls, raw: Any):
        """Validate a JSON column value, degrading to an empty model."""
        if not isinstance(raw, dict):
            return cls()
        try:
            return cls.model_validate(raw)
        except ValidationError:
            return cls()


class AdSpaceContent(_JsonContent):
    url: Optional[str] = None
    headline: Optional[str] = None
    subheadline: Optional[str] = None


class AdDesignContent(_JsonContent):
    redirectUrl: Optional[str] = None
    mediaType: Optional[Literal["image", "video"]] = None
    headline: Optional[str] = None
    subheadline: Optional[str] = None

    @field_validator("mediaType", mode="before")
    @classmethod
    def _normalize_media_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower()
            return value if value in {"image", "video"} else None
        return None


class AdSpaceTheme(_JsonContent):
    backgroundColor: Optional[str] = None
    textColor: Optional[str] = None


@dataclass(frozen=True)
class Creative:
    kind: CreativeKind = "none"
    url: Optional[str] = None


NO_CREATIVE = Creative()


@dataclass
class ResolvedAd:
    creative: Creative = NO_CREATIVE
    redirect_url: Optional[str] = None
    display_title: str = "Advertisement"
    display_subheading: Optional[str] = None
    theme: AdSpaceTheme = field(default_factory=AdSpaceTheme)
    qr_code_id: Optional[str] = None
    ad_space_id: Optional[str] = None
    ad_space_found: bool = False
    design_id: Optional[str] = None
    design_source: Optional[DesignSource] = None

    @property
    def has_content(self) -> bool:
        return self.creative.kind != "none" or bool(self.redirect_url)


def usable_media_url(value: Optional[str]) -> Optional[str]:
    """Return a renderable creative URL or None.

    ``blob:`` object URLs belong to a stale browser session and are never
    reachable, so they count as absent. Bare storage paths are expanded to
    their public object-store URL.
    """
    text = (value or "").strip()
    if not text:
        return None
    scheme = urlsplit(text).scheme.lower()
    if scheme in {"http", "https"}:
        return text
    if scheme:
        return None
    try:
        return storage_public_url(text)
    except ValueError:
        return None


def normalize_redirect_url(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    if not text:
        return None
    parts = urlsplit(text)
    scheme = parts.scheme.lower()
    if scheme in UNSAFE_REDIRECT_SCHEMES:
        return None
    # "shop.example.com:8080/deal" parses with the host as its scheme.
    if not scheme or "." in scheme or scheme == "localhost":
        return f"https://{text.lstrip('/')}"
    return text
