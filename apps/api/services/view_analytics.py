"""Best-effort scan/view analytics for the public view endpoints."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from services import view_store
from services.view_errors import AnalyticsWriteFailed
from services.view_types import ResolvedAd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanContext:
    ip: str = "unknown"
    user_agent: str = "unknown"
    location: Dict[str, Any] = field(default_factory=lambda: {"country": "unknown"})


def client_ip(headers: Mapping[str, str], client_host: Optional[str]) -> str:
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if client_host:
        return client_host
    return "unknown"


def build_scan_context(headers: Mapping[str, str], client_host: Optional[str]) -> ScanContext:
    """Capture requester ip, user-agent and coarse (country-level) location."""
    return ScanContext(
        ip=client_ip(headers, client_host),
        user_agent=(headers.get("user-agent") or "").strip() or "unknown",
        location={"country": (headers.get("cf-ipcountry") or "").strip() or "unknown"},
    )


async def record_scan_event(qr_id: str, ad_space_id: Optional[str], scan: ScanContext) -> None:
    try:
        await view_store.record_qr_scan(
            qr_id,
            ad_space_id,
            ip_address=scan.ip,
            user_agent=scan.user_agent,
            location=dict(scan.location),
        )
    except Exception as exc:
        failure = AnalyticsWriteFailed(f"scan increment for qr {qr_id}: {exc}")
        logger.warning("%s", failure)


async def record_view_event(ad_space_id: str) -> None:
    try:
        await view_store.increment_ad_space_views(ad_space_id)
    except Exception as exc:
        failure = AnalyticsWriteFailed(f"view increment for ad space {ad_space_id}: {exc}")
        logger.warning("%s", failure)


def schedule_view_analytics(resolved: ResolvedAd, scan: ScanContext, defer: Callable[..., Any]) -> int:
    """Defer the scan and view increments for a finished resolution.

    The scan row is tagged with the working ad space id, which may differ from
    the QR code's stored link when the caller pinned ``ad`` explicitly.
    Returns the number of writes scheduled.
    """
    scheduled = 0
    if resolved.qr_code_id:
        defer(record_scan_event, resolved.qr_code_id, resolved.ad_space_id, scan)
        scheduled += 1
    if resolved.ad_space_id and resolved.ad_space_found:
        defer(record_view_event, resolved.ad_space_id)
        scheduled += 1
    return scheduled
