"""
QR code / ad space resolution.

Turns validated ``qr``/``ad`` identifiers into a ResolvedAd: the creative to
show and the destination to redirect to. Every lookup is allowed to miss or
fail; each miss falls through to the next, cheaper-to-skip strategy instead of
aborting the request.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from config import settings
from models.ad_design import AdDesign
from models.ad_space import AdSpace
from services.view_errors import NotFound
from services.view_identifiers import ViewIdentifiers
from services.view_store import ViewStore, link_design_to_ad_space
from services.view_types import (
    NO_CREATIVE,
    AdDesignContent,
    AdSpaceContent,
    AdSpaceTheme,
    Creative,
    DesignSource,
    ResolvedAd,
    normalize_redirect_url,
    usable_media_url,
)

logger = logging.getLogger(__name__)

DeferFn = Callable[..., Any]


async def repair_design_link(design_id: str, ad_space_id: str) -> None:
    """Best-effort background fix for a design found by a fallback strategy."""
    try:
        await link_design_to_ad_space(design_id, ad_space_id)
    except Exception as exc:
        logger.warning("Repair link for design %s -> ad space %s failed: %s", design_id, ad_space_id, exc)


async def _attempt(label: str, lookup: Callable[[], Awaitable[Any]]) -> Any:
    try:
        return await lookup()
    except Exception as exc:
        logger.warning("%s lookup failed: %s", label, exc)
        return None


async def find_ad_design(
    store: ViewStore,
    ad_space_id: str,
    *,
    ad_space: Optional[AdSpace],
    defer: DeferFn,
) -> tuple[Optional[AdDesign], Optional[DesignSource]]:
    """Locate the most relevant design for ``ad_space_id``.

    Order, first hit wins:
      1. latest design whose ad_space_id matches;
      2. design whose primary key equals the ad space id (legacy rows);
      3. latest design owned by the ad space's owner.
    Hits from 2 and 3 schedule a repair write linking the design so later
    requests resolve at step 1.
    """
    design = await _attempt(
        "Design by ad_space_id", lambda: store.get_latest_design_for_ad_space(ad_space_id)
    )
    if design is not None:
        logger.info("Design %s found by ad_space_id", design.id)
        return design, "by_ad_space"

    design = await _attempt("Design by id", lambda: store.get_design(ad_space_id))
    if design is not None:
        logger.info("Design %s found by direct id match; scheduling repair", design.id)
        defer(repair_design_link, design.id, ad_space_id)
        return design, "by_id"

    owner_id = ad_space.user_id if ad_space is not None else None
    if owner_id:
        design = await _attempt("Design by owner", lambda: store.get_latest_design_for_user(owner_id))
        if design is not None:
            logger.info("Design %s found by owner %s; scheduling repair", design.id, owner_id)
            defer(repair_design_link, design.id, ad_space_id)
            return design, "by_owner"

    logger.info("%s", NotFound("Ad design for ad space", ad_space_id))
    return None, None


def _creative_for(design: AdDesign, content: AdDesignContent) -> Creative:
    image_url = usable_media_url(design.image_url)
    video_url = usable_media_url(design.video_url)
    if design.image_url and not image_url:
        logger.info("Discarded unusable image_url on design %s", design.id)
    if design.video_url and not video_url:
        logger.info("Discarded unusable video_url on design %s", design.id)

    if video_url and (content.mediaType == "video" or not image_url):
        return Creative(kind="video", url=video_url)
    if image_url:
        return Creative(kind="image", url=image_url)
    return NO_CREATIVE


async def resolve_view(
    *,
    identifiers: ViewIdentifiers,
    store: ViewStore,
    defer: DeferFn,
) -> ResolvedAd:
    """Resolve identifiers into a creative and redirect target.

    Redirect precedence, lowest to highest: QR code url, ad space
    ``content.url``, design ``content.redirectUrl``.
    """
    resolved = ResolvedAd()
    working_ad_id = identifiers.ad_id

    if identifiers.qr_id:
        try:
            qr_code = await store.get_qr_code(identifiers.qr_id)
        except Exception as exc:
            # Still counted as a scan; the analytics write may fail on its own.
            logger.warning("QR code lookup failed for %s: %s", identifiers.qr_id, exc)
            resolved.qr_code_id = identifiers.qr_id
        else:
            if qr_code is None:
                logger.info("%s", NotFound("QR code", identifiers.qr_id))
            else:
                resolved.qr_code_id = qr_code.id
                resolved.redirect_url = normalize_redirect_url(qr_code.url)
                if not working_ad_id and qr_code.ad_space_id:
                    working_ad_id = qr_code.ad_space_id

    resolved.ad_space_id = working_ad_id
    if not working_ad_id:
        return resolved

    ad_space = await _attempt("Ad space", lambda: store.get_ad_space(working_ad_id))
    if ad_space is None:
        logger.info("%s", NotFound("Ad space", working_ad_id))
    else:
        resolved.ad_space_found = True
        space_content = AdSpaceContent.parse(ad_space.content)
        space_redirect = normalize_redirect_url(space_content.url)
        if space_redirect:
            resolved.redirect_url = space_redirect
        resolved.display_title = (ad_space.title or "").strip() or space_content.headline or "Advertisement"
        resolved.display_subheading = (ad_space.description or "").strip() or space_content.subheadline
        resolved.theme = AdSpaceTheme.parse(ad_space.theme)

    design, source = await find_ad_design(store, working_ad_id, ad_space=ad_space, defer=defer)
    if design is None:
        return resolved

    design_content = AdDesignContent.parse(design.content)
    resolved.design_id = design.id
    resolved.design_source = source
    resolved.creative = _creative_for(design, design_content)
    design_redirect = normalize_redirect_url(design_content.redirectUrl)
    if design_redirect:
        resolved.redirect_url = design_redirect
    if not resolved.ad_space_found:
        resolved.display_title = design_content.headline or resolved.display_title
        resolved.display_subheading = design_content.subheadline or resolved.display_subheading
    return resolved


async def resolve_view_with_retry(
    *,
    identifiers: ViewIdentifiers,
    store: ViewStore,
    defer: DeferFn,
    constrained: bool,
    max_retries: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> ResolvedAd:
    """Resolve, re-running a bounded number of times on constrained networks.

    A design created moments before the scan may not be visible yet, so when
    the viewer is on a constrained connection and no design was found the
    whole resolution is retried with a fixed delay.
    """
    if not constrained:
        return await resolve_view(identifiers=identifiers, store=store, defer=defer)

    retries = settings.RESOLUTION_MAX_RETRIES if max_retries is None else max_retries
    delay = settings.RESOLUTION_RETRY_DELAY_SECONDS if delay_seconds is None else delay_seconds
    if retries <= 0:
        return await resolve_view(identifiers=identifiers, store=store, defer=defer)

    def _needs_retry(result: ResolvedAd) -> bool:
        return bool(result.ad_space_id) and result.design_id is None

    resolved = ResolvedAd()
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(retries + 1),
        wait=wait_fixed(max(float(delay), 0.0)),
        retry=retry_if_result(_needs_retry),
        retry_error_callback=lambda state: state.outcome.result(),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.info(
                    "Retrying resolution (attempt %s of %s)",
                    attempt.retry_state.attempt_number,
                    retries + 1,
                )
            resolved = await resolve_view(identifiers=identifiers, store=store, defer=defer)
        if not attempt.retry_state.outcome.failed:
            attempt.retry_state.set_result(resolved)
    return resolved
