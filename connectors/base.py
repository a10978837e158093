from __future__ import annotations

import abc
from typing import Any, AsyncIterator, Dict


class SyncResult(Dict[str, Any]):
    """Per-page report yielded while a sync run progresses."""


class BaseConnector(abc.ABC):
    name: str

    @abc.abstractmethod
    async def sync(self) -> AsyncIterator[SyncResult]:
        """Fetch and persist the feed, yielding one SyncResult per page."""

    @abc.abstractmethod
    async def checkpoint(self) -> str:
        """Return the resume point the next sync run starts from."""
