"""Datastore access for view resolution.

Reads go through a request-scoped session. Writes (repair links, counters,
scan log rows) run after the response is sent, so each opens its own session
from ``async_session_maker``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from database import async_session_maker
from models.ad_design import AdDesign
from models.ad_space import AdSpace
from models.qr_code import QrCode
from models.qr_code_scan import QrCodeScan

logger = logging.getLogger(__name__)


class ViewStore:
    """Read-side queries used by the resolution chain."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_qr_code(self, qr_id: str) -> Optional[QrCode]:
        result = await self.db.execute(select(QrCode).where(QrCode.id == qr_id))
        return result.scalar_one_or_none()

    async def get_ad_space(self, ad_space_id: str) -> Optional[AdSpace]:
        result = await self.db.execute(select(AdSpace).where(AdSpace.id == ad_space_id))
        return result.scalar_one_or_none()

    async def get_latest_design_for_ad_space(self, ad_space_id: str) -> Optional[AdDesign]:
        result = await self.db.execute(
            select(AdDesign)
            .where(AdDesign.ad_space_id == ad_space_id)
            .order_by(AdDesign.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def get_design(self, design_id: str) -> Optional[AdDesign]:
        result = await self.db.execute(select(AdDesign).where(AdDesign.id == design_id))
        return result.scalar_one_or_none()

    async def get_latest_design_for_user(self, user_id: str) -> Optional[AdDesign]:
        result = await self.db.execute(
            select(AdDesign)
            .where(AdDesign.user_id == user_id)
            .order_by(AdDesign.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_designs_for_ad_space(self, ad_space_id: str, limit: int = 20) -> list[AdDesign]:
        result = await self.db.execute(
            select(AdDesign)
            .where(AdDesign.ad_space_id == ad_space_id)
            .order_by(AdDesign.created_at.desc())
            .limit(max(1, int(limit)))
        )
        return list(result.scalars().all())


async def link_design_to_ad_space(design_id: str, ad_space_id: str) -> None:
    """Set ``ad_designs.ad_space_id`` so the next lookup hits the direct link."""
    async with async_session_maker() as db:
        await db.execute(
            update(AdDesign)
            .where(AdDesign.id == design_id)
            .values(ad_space_id=ad_space_id)
        )
        await db.commit()
    logger.info("Linked ad design %s to ad space %s", design_id, ad_space_id)


async def record_qr_scan(
    qr_id: str,
    ad_space_id: Optional[str],
    *,
    ip_address: Optional[str],
    user_agent: Optional[str],
    location: Optional[Dict[str, Any]],
) -> None:
    """Append a scan log row and bump the QR code's scan counter atomically."""
    async with async_session_maker() as db:
        db.add(
            QrCodeScan(
                qr_code_id=qr_id,
                ad_space_id=ad_space_id,
                ip_address=ip_address,
                user_agent=user_agent,
                location=location or {},
            )
        )
        await db.execute(
            update(QrCode)
            .where(QrCode.id == qr_id)
            .values(scans=QrCode.scans + 1)
        )
        await db.commit()


async def increment_ad_space_views(ad_space_id: str) -> None:
    async with async_session_maker() as db:
        await db.execute(
            update(AdSpace)
            .where(AdSpace.id == ad_space_id)
            .values(views=AdSpace.views + 1)
        )
        await db.commit()
