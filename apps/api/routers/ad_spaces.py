"""
Public read access to a single ad space and its designs.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models.ad_design import AdDesign
from models.ad_space import AdSpace
from services.view_analytics import record_view_event
from services.view_errors import NotFound
from services.view_identifiers import is_uuid
from services.view_store import ViewStore
from services.view_types import AdDesignContent, AdSpaceContent, AdSpaceTheme, usable_media_url

router = APIRouter()
logger = logging.getLogger(__name__)


def _serialize_design(design: AdDesign) -> Dict[str, Any]:
    return {
        "id": design.id,
        "ad_space_id": design.ad_space_id,
        "name": design.name,
        "image_url": usable_media_url(design.image_url),
        "video_url": usable_media_url(design.video_url),
        "content": AdDesignContent.parse(design.content).model_dump(exclude_none=True),
        "created_at": design.created_at.isoformat() if design.created_at else None,
    }


def _serialize_ad_space(ad_space: AdSpace, designs: list[AdDesign]) -> Dict[str, Any]:
    return {
        "id": ad_space.id,
        "user_id": ad_space.user_id,
        "title": ad_space.title,
        "description": ad_space.description,
        "content": AdSpaceContent.parse(ad_space.content).model_dump(exclude_none=True),
        "theme": AdSpaceTheme.parse(ad_space.theme).model_dump(exclude_none=True),
        "views": int(ad_space.views or 0),
        "created_at": ad_space.created_at.isoformat() if ad_space.created_at else None,
        "ad_designs": [_serialize_design(design) for design in designs],
    }


@router.get("/ad-space")
async def get_ad_space(
    background_tasks: BackgroundTasks,
    id: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Return an ad space with its linked designs and count the view."""
    ad_space_id = (id or "").strip().lower()
    if not ad_space_id:
        raise HTTPException(status_code=400, detail="Ad space ID is required")
    if not is_uuid(ad_space_id):
        raise HTTPException(status_code=400, detail="Invalid ad space ID")

    store = ViewStore(db)
    try:
        ad_space = await store.get_ad_space(ad_space_id)
        if ad_space is None:
            raise NotFound("Ad space", ad_space_id)
        designs = await store.list_designs_for_ad_space(ad_space_id)
    except NotFound as exc:
        logger.info("%s", exc)
        raise HTTPException(status_code=404, detail="Ad space not found")
    except Exception:
        logger.exception("Failed to load ad space %s", ad_space_id)
        raise HTTPException(status_code=500, detail="Failed to load ad space.")

    background_tasks.add_task(record_view_event, ad_space_id)
    return _serialize_ad_space(ad_space, designs)
