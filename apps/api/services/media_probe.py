"""Media readiness probing for resolved creatives."""

from __future__ import annotations

import ipaddress
import logging
import re
import time
from dataclasses import dataclass
from typing import Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from config import settings
from services.view_errors import MediaUnreachable

logger = logging.getLogger(__name__)

LOCAL_HOST_SUFFIXES = (".localhost", ".local", ".internal")
MOBILE_UA_PATTERN = re.compile(r"Android|webOS|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE)
SLOW_EFFECTIVE_TYPES = {"slow-2g", "2g", "3g"}


@dataclass(frozen=True)
class NetworkProfile:
    constrained: bool
    reason: str = "default"


@dataclass(frozen=True)
class MediaStatus:
    url: str
    ready: bool
    attempts: int = 1
    status_code: Optional[int] = None
    error: Optional[str] = None


def classify_network(headers: Mapping[str, str]) -> NetworkProfile:
    """Classify the viewer's connection from client hints and user-agent."""
    if (headers.get("save-data") or "").strip().lower() == "on":
        return NetworkProfile(constrained=True, reason="save-data")
    effective_type = (headers.get("ect") or "").strip().lower()
    if effective_type in SLOW_EFFECTIVE_TYPES:
        return NetworkProfile(constrained=True, reason=f"ect:{effective_type}")
    if MOBILE_UA_PATTERN.search(headers.get("user-agent") or ""):
        return NetworkProfile(constrained=True, reason="mobile-user-agent")
    return NetworkProfile(constrained=False)


def _storage_host() -> str:
    base = (settings.STORAGE_PUBLIC_BASE_URL or "").strip()
    return (urlsplit(base).hostname or "").lower() if base else ""


def probe_allowed(url: str) -> bool:
    """Whether the server may fetch ``url`` on a viewer's behalf.

    The storage host and ``MEDIA_PROBE_ALLOWED_HOSTS`` are always allowed.
    With no allow-list configured any other public host is allowed too, but
    loopback, private, link-local and reserved addresses never are.
    """
    parts = urlsplit(url)
    host = (parts.hostname or "").lower().rstrip(".")
    if parts.scheme.lower() not in ("http", "https") or not host:
        return False
    allowed = {h.strip().lower() for h in settings.MEDIA_PROBE_ALLOWED_HOSTS if h.strip()}
    storage_host = _storage_host()
    if host == storage_host or host in allowed:
        return True
    if allowed:
        return False
    if host == "localhost" or host.endswith(LOCAL_HOST_SUFFIXES):
        return False
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        return "." in host
    return address.is_global


async def _guard_request(request: httpx.Request) -> None:
    # Runs for every hop, so redirects cannot reach a refused host either.
    if not probe_allowed(str(request.url)):
        raise MediaUnreachable(str(request.url), "host not allowed")


def build_probe_client(**kwargs) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.MEDIA_PROBE_TIMEOUT_SECONDS,
        follow_redirects=True,
        event_hooks={"request": [_guard_request]},
        **kwargs,
    )


def with_cache_bust(url: str, stamp: Optional[int] = None) -> str:
    parts = urlsplit(url)
    token = f"_cb={stamp if stamp is not None else int(time.time() * 1000)}"
    query = f"{parts.query}&{token}" if parts.query else token
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, parts.fragment))


async def _probe_once(client: httpx.AsyncClient, url: str, *, strict: bool) -> int:
    """Return the status code of a successful probe or raise MediaUnreachable."""
    try:
        if strict:
            response = await client.get(url, headers={"Range": "bytes=0-0"})
        else:
            response = await client.head(url)
            if response.status_code in (405, 501):
                response = await client.get(url, headers={"Range": "bytes=0-0"})
    except httpx.HTTPError as exc:
        raise MediaUnreachable(url, type(exc).__name__) from exc

    if not 200 <= response.status_code < 300:
        raise MediaUnreachable(url, f"status {response.status_code}")
    if strict:
        content_type = (response.headers.get("content-type") or "").lower()
        if not content_type.startswith("image/"):
            raise MediaUnreachable(url, f"content-type {content_type or 'missing'}")
    return response.status_code


async def probe_image(
    url: str,
    *,
    constrained: bool,
    cache_bust: bool = False,
    client: Optional[httpx.AsyncClient] = None,
    retries: Optional[int] = None,
    retry_delay: Optional[float] = None,
) -> MediaStatus:
    """Check that an image URL is fetchable before declaring it ready.

    Constrained networks get a stricter check (a one-byte ranged GET that must
    come back as an image) and a few retries. Failures are reported, never
    raised.
    """
    if not probe_allowed(url):
        logger.warning("Refusing to probe %s: host not allowed", url)
        return MediaStatus(url=url, ready=False, attempts=0, error="host not allowed")

    target = with_cache_bust(url) if cache_bust else url
    extra = settings.MEDIA_PROBE_RETRIES if retries is None else retries
    attempts = 1 + max(int(extra), 0) if constrained else 1
    delay = settings.MEDIA_PROBE_RETRY_DELAY_SECONDS if retry_delay is None else retry_delay

    owns_client = client is None
    if owns_client:
        client = build_probe_client()
    used = 0
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(max(float(delay), 0.0)),
            retry=retry_if_exception_type(MediaUnreachable),
            reraise=True,
        ):
            with attempt:
                used = attempt.retry_state.attempt_number
                status_code = await _probe_once(client, target, strict=constrained)
        return MediaStatus(url=url, ready=True, attempts=used, status_code=status_code)
    except MediaUnreachable as exc:
        logger.warning("%s after %s attempt(s)", exc, used)
        return MediaStatus(url=url, ready=False, attempts=used, error=exc.reason)
    finally:
        if owns_client:
            await client.aclose()
