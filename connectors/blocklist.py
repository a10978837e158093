from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Dict, List, Optional

import httpx

from connectors.base import BaseConnector, SyncResult
from connectors.models import BlockListResponse, PageRequest, to_block_record
from connectors.state_store import load_checkpoint
from core.config import settings
from core.errors import DecodeError, TransportError
from core.logging import log_event
from core.storage.block_store import BlockRecord, BlockStore

logger = logging.getLogger(__name__)

BASE_PARAMS: Dict[str, str] = {
    "action": "query",
    "format": "json",
    "list": "blocks",
    "bkdir": "newer",
    "bklimit": "max",
    "bkprop": "id|timestamp|expiry|range",
}


class BlocklistClient:
    """Reads pages of the MediaWiki ``list=blocks`` feed."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.blocklist_request_timeout,
            headers={"User-Agent": settings.blocklist_user_agent},
        )
        self._url = settings.blocklist_api_url

    @staticmethod
    def build_params(request: PageRequest) -> Dict[str, str]:
        params = {**BASE_PARAMS, "bkstart": request.cursor}
        if request.page_token is not None:
            params["bkcontinue"] = request.page_token
        return params

    async def fetch_page(self, request: PageRequest) -> BlockListResponse:
        try:
            response = await self._client.get(self._url, params=self.build_params(request))
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise TransportError(f"block list request failed: {exc}") from exc
        if logger.isEnabledFor(logging.DEBUG):
            log_event(logger, "feed.response", level=logging.DEBUG, status=response.status_code, body=response.text)
        try:
            return BlockListResponse.model_validate(response.json())
        except ValueError as exc:
            # JSONDecodeError, UnicodeDecodeError and pydantic ValidationError
            raise DecodeError(f"unexpected block list response: {exc}") from exc

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()


@dataclass
class SyncSummary:
    checkpoint: str
    pages: int = 0
    received: int = 0
    accepted: int = 0


class BlocklistConnector(BaseConnector):
    name = "wikipedia_blocklist"

    def __init__(self, store: BlockStore, client: Optional[BlocklistClient] = None) -> None:
        self._store = store
        self._client = client or BlocklistClient()

    async def checkpoint(self) -> str:
        return await load_checkpoint(self._store)

    async def sync(self) -> AsyncIterator[SyncResult]:  # type: ignore[override]
        request = PageRequest(cursor=await self.checkpoint())
        page = 0
        while True:
            response = await self._client.fetch_page(request)
            page += 1
            records: List[BlockRecord] = []
            for block in response.query.blocks:
                record = to_block_record(block)
                if record is not None:
                    records.append(record)
            inserted = await asyncio.to_thread(self._store.insert_many, records)
            next_token = response.next_token
            log_event(
                logger,
                "sync.page",
                page=page,
                continuation=request.page_token,
                received=len(response.query.blocks),
                accepted=len(records),
                inserted=inserted,
            )
            yield SyncResult(
                {
                    "page": page,
                    "cursor": request.cursor,
                    "continuation": request.page_token,
                    "received": len(response.query.blocks),
                    "accepted": len(records),
                    "inserted": inserted,
                    "next": next_token,
                }
            )
            if next_token is None:
                break
            request = request.next_page(next_token)

    async def run(self) -> SyncSummary:
        summary = SyncSummary(checkpoint="")
        async for result in self.sync():
            summary.checkpoint = result["cursor"]
            summary.pages += 1
            summary.received += result["received"]
            summary.accepted += result["accepted"]
        log_event(
            logger,
            "sync.done",
            checkpoint=summary.checkpoint,
            pages=summary.pages,
            received=summary.received,
            accepted=summary.accepted,
        )
        return summary

    async def close(self) -> None:
        await self._client.close()
