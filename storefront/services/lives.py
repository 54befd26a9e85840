"""Live-selling sessions: slugs, saving, and product links"""

import re
import time
import logging
from typing import Optional

from ..gateway import GatewayClient
from ..models.live import Live, LiveForm, LiveStatus
from .catalog import CatalogService
from .errors import CatalogError
from .uploads import UploadedFile, file_extension

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def generate_slug(title: str) -> str:
    """'Holiday Gold Sale!' -> 'holiday-gold-sale'"""
    return _NON_ALNUM.sub("-", title.lower()).strip("-")


class LiveService:
    """Creates and edits live-selling sessions"""

    def __init__(self, gateway: GatewayClient, catalog: CatalogService):
        self.gateway = gateway
        self.catalog = catalog

    async def save_live(
        self,
        form: LiveForm,
        token: str,
        live_id: Optional[str] = None,
        cover: Optional[UploadedFile] = None,
    ) -> Live:
        """
        Insert or update a live session and replace its product links.

        Links are deleted and re-inserted one at a time; the backend offers no
        transaction, so a failure part-way leaves a partial product list.
        """
        if form.status != LiveStatus.UPCOMING and not form.facebook_link:
            raise CatalogError("A Facebook Live link is required once a live has started", code="facebook_link")

        slug = generate_slug(form.title)
        if not slug:
            raise CatalogError("Title must contain letters or digits", code="slug")

        cover_url = form.cover_image
        if cover:
            name = f"live-{int(time.time() * 1000)}.{file_extension(cover.filename)}"
            cover_url = await self.catalog.upload_image(cover, token, name=name)

        live_data = {
            "title": form.title,
            "slug": slug,
            "cover_image": cover_url or None,
            "scheduled_at": form.scheduled_at.isoformat(),
            "facebook_link": form.facebook_link or None,
            "status": form.status.value,
        }

        if live_id:
            result = await self.gateway.update("lives", live_data, {"id": live_id}, token)
        else:
            result = await self.gateway.insert("lives", live_data, token)

        if not result.ok or not result.data:
            message = result.error.message if result.error else "Live not found"
            raise CatalogError(message, code=result.error.code if result.error else "not_found")

        live = Live.model_validate(result.data)

        if live_id:
            cleared = await self.gateway.delete("live_products", {"live_id": live.id}, token)
            if not cleared.ok:
                raise CatalogError(cleared.error.message, code=cleared.error.code)

        for product_id in form.product_ids:
            link = await self.gateway.insert("live_products", {"live_id": live.id, "product_id": product_id}, token)
            if not link.ok:
                logger.warning(f"Failed to link product {product_id} to live {live.id}: {link.error.message}")

        logger.info(f"{'Updated' if live_id else 'Created'} live {live.id} ({slug}) with {len(form.product_ids)} products")
        return live

    async def set_status(self, live_id: str, status: LiveStatus, token: str) -> Live:
        result = await self.gateway.update("lives", {"status": status.value}, {"id": live_id}, token)
        if not result.ok or not result.data:
            message = result.error.message if result.error else "Live not found"
            raise CatalogError(message, code=result.error.code if result.error else "not_found")
        return Live.model_validate(result.data)
