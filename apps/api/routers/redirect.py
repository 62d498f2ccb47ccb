"""
Direct 302 redirect for scanned QR codes (no HTML page).
"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from database import get_db
from routers.rate_limit import rate_limit
from services.view_analytics import build_scan_context, schedule_view_analytics
from services.view_errors import InvalidIdentifier, MissingIdentifier
from services.view_identifiers import validate_view_identifiers
from services.view_resolution import resolve_view
from services.view_store import ViewStore

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/qr-redirect")
async def qr_redirect(
    request: Request,
    background_tasks: BackgroundTasks,
    qr: Optional[str] = None,
    ad: Optional[str] = None,
    _rate_limit: None = Depends(rate_limit("qr_redirect", limit=settings.VIEW_RATE_LIMIT_PER_MINUTE, window_seconds=60)),
    db: AsyncSession = Depends(get_db),
):
    """Resolve like /view but answer with a Location header."""
    try:
        identifiers = validate_view_identifiers(qr, ad)
    except MissingIdentifier:
        return JSONResponse(status_code=400, content={"error": "QR code ID or Ad Space ID is required"})
    except InvalidIdentifier as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    try:
        resolved = await resolve_view(
            identifiers=identifiers,
            store=ViewStore(db),
            defer=background_tasks.add_task,
        )
    except Exception:
        logger.exception("QR redirect failed for qr=%s ad=%s", qr, ad)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    host = request.client.host if request.client else None
    schedule_view_analytics(resolved, build_scan_context(request.headers, host), background_tasks.add_task)

    if not resolved.redirect_url:
        return JSONResponse(status_code=404, content={"error": "No redirect URL found"})
    return RedirectResponse(url=resolved.redirect_url, status_code=302)
