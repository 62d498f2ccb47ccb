"""
Public view page for scanned QR codes and ad space links.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from routers.rate_limit import rate_limit
from services.diagnostics import diagnostics_buffer, request_id_var
from services.media_probe import classify_network, probe_image
from services.view_analytics import build_scan_context, schedule_view_analytics
from services.view_errors import InvalidIdentifier, MissingIdentifier
from services.view_identifiers import validate_view_identifiers
from services.view_resolution import resolve_view_with_retry
from services.view_store import ViewStore
from services.view_types import ResolvedAd

router = APIRouter()
logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

DEFAULT_BACKGROUND = "#f9fafb"
DEFAULT_TEXT = "#111827"
CSS_COLOR_PATTERN = re.compile(r"^(#[0-9a-fA-F]{3,8}|[a-zA-Z]{3,20}|rgba?\([0-9.,%\s]+\))$")


def _css_color(value: Optional[str], default: str) -> str:
    text = (value or "").strip()
    return text if CSS_COLOR_PATTERN.match(text) else default


def _page_context(
    resolved: Optional[ResolvedAd],
    *,
    state: str,
    debug: bool,
    **extra: Any,
) -> Dict[str, Any]:
    theme = resolved.theme if resolved else None
    context = {
        "state": state,
        "title": resolved.display_title if resolved else "Advertisement",
        "subheading": resolved.display_subheading if resolved else None,
        "background": _css_color(theme.backgroundColor if theme else None, DEFAULT_BACKGROUND),
        "text_color": _css_color(theme.textColor if theme else None, DEFAULT_TEXT),
        "creative": resolved.creative if resolved else None,
        "redirect_url": resolved.redirect_url if resolved else None,
        "countdown": max(int(settings.REDIRECT_COUNTDOWN_SECONDS), 0),
        "debug": debug,
        "debug_entries": [],
        "debug_summary": {},
        "error_message": None,
        "image_ready": False,
        "retry_url": None,
    }
    context.update(extra)
    if debug:
        context["debug_entries"] = diagnostics_buffer.entries(request_id=request_id_var.get())
        if resolved is not None:
            context["debug_summary"] = {
                "qr_code_id": resolved.qr_code_id,
                "ad_space_id": resolved.ad_space_id,
                "ad_space_found": resolved.ad_space_found,
                "design_id": resolved.design_id,
                "design_source": resolved.design_source,
                "creative": resolved.creative.kind,
                "redirect_url": resolved.redirect_url,
            }
    return context


def _render(request: Request, context: Dict[str, Any], status_code: int = 200) -> HTMLResponse:
    return templates.TemplateResponse(request, "view.html", context, status_code=status_code)


def _retry_url(request: Request) -> str:
    params = dict(request.query_params)
    params["reprobe"] = "1"
    return str(request.url.replace_query_params(**params))


@router.get("/view", response_class=HTMLResponse)
async def view_ad(
    request: Request,
    background_tasks: BackgroundTasks,
    qr: Optional[str] = None,
    ad: Optional[str] = None,
    debug: Optional[str] = None,
    reprobe: Optional[str] = None,
    _rate_limit: None = Depends(rate_limit("view", limit=settings.VIEW_RATE_LIMIT_PER_MINUTE, window_seconds=60)),
    db: AsyncSession = Depends(get_db),
):
    """Render the creative or redirect card for a scanned QR code / ad link."""
    debug_enabled = debug == "true"
    try:
        identifiers = validate_view_identifiers(qr, ad)
    except (InvalidIdentifier, MissingIdentifier) as exc:
        logger.info("Rejected view request: %s", exc)
        return _render(
            request,
            _page_context(None, state="error", debug=debug_enabled, error_message=str(exc)),
            status_code=400,
        )

    network = classify_network(request.headers)
    resolved: Optional[ResolvedAd] = None
    try:
        resolved = await resolve_view_with_retry(
            identifiers=identifiers,
            store=ViewStore(db),
            defer=background_tasks.add_task,
            constrained=network.constrained,
        )
        host = request.client.host if request.client else None
        schedule_view_analytics(resolved, build_scan_context(request.headers, host), background_tasks.add_task)

        creative = resolved.creative
        image_ready = True
        if creative.kind == "image":
            status = await probe_image(
                creative.url,
                constrained=network.constrained,
                cache_bust=reprobe == "1",
            )
            image_ready = status.ready

        if resolved.redirect_url:
            state = "redirect"
        elif not image_ready:
            state = "image_missing"
        elif creative.kind in ("image", "video"):
            state = creative.kind
        else:
            state = "empty"
        return _render(
            request,
            _page_context(
                resolved,
                state=state,
                debug=debug_enabled,
                image_ready=image_ready,
                retry_url=_retry_url(request) if network.constrained and not image_ready else None,
            ),
        )
    except Exception:
        logger.exception("Failed to render view for qr=%s ad=%s", qr, ad)
        return _render(
            request,
            _page_context(
                resolved,
                state="error",
                debug=debug_enabled,
                error_message="Something went wrong while loading this ad.",
            ),
            status_code=500,
        )
