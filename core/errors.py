from __future__ import annotations


class BlocklistSyncError(RuntimeError):
    """Base class for every failure that aborts a sync run."""


class StoreError(BlocklistSyncError):
    """The local block store could not be opened, queried or written."""


class TransportError(BlocklistSyncError):
    """The remote feed could not be reached or answered with a non-success status."""


class DecodeError(BlocklistSyncError):
    """The remote feed answered with a body that does not match the expected schema."""
