from .base import BaseConnector, SyncResult
from .blocklist import BlocklistClient, BlocklistConnector, SyncSummary
from .state_store import EPOCH_CHECKPOINT, resolve_checkpoint

__all__ = [
    "BaseConnector",
    "SyncResult",
    "BlocklistClient",
    "BlocklistConnector",
    "SyncSummary",
    "EPOCH_CHECKPOINT",
    "resolve_checkpoint",
]
