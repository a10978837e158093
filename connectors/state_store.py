from __future__ import annotations

import asyncio
import logging

from core.logging import log_event
from core.storage.block_store import BlockStore

logger = logging.getLogger(__name__)

# Lower bound used when nothing has been mirrored yet: fetch the whole feed.
EPOCH_CHECKPOINT = "1970-01-01T00:00:00Z"


def resolve_checkpoint(store: BlockStore) -> str:
    """Start timestamp for the next run: the newest stored timestamp, inclusive.

    The feed may redeliver the record sitting exactly at the checkpoint; the
    store ignores it on insert.
    """
    checkpoint = store.max_timestamp() or EPOCH_CHECKPOINT
    log_event(logger, "sync.checkpoint", checkpoint=checkpoint)
    return checkpoint


async def load_checkpoint(store: BlockStore) -> str:
    return await asyncio.to_thread(resolve_checkpoint, store)
