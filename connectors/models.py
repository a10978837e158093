from __future__ import annotations

from dataclasses import dataclass
from ipaddress import IPv4Address, IPv6Address
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt

from core.addresses import ZERO_IPV4, encode_address
from core.storage.block_store import SQLITE_MAX_INT, BlockRecord


class RemoteBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    # sqlite integer primary keys are signed 64-bit
    id: StrictInt = Field(..., ge=0, le=SQLITE_MAX_INT)
    timestamp: str
    expiry: str
    rangestart: Optional[Union[IPv4Address, IPv6Address]] = None
    rangeend: Optional[Union[IPv4Address, IPv6Address]] = None


class BlockQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    blocks: List[RemoteBlock]


class BlockContinue(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bkcontinue: str


class BlockListResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    continue_: Optional[BlockContinue] = Field(default=None, alias="continue")
    query: BlockQuery

    @property
    def next_token(self) -> Optional[str]:
        if self.continue_ is None:
            return None
        return self.continue_.bkcontinue


@dataclass(frozen=True)
class PageRequest:
    cursor: str
    page_token: Optional[str] = None

    def next_page(self, page_token: str) -> "PageRequest":
        return PageRequest(cursor=self.cursor, page_token=page_token)


def to_block_record(block: RemoteBlock) -> Optional[BlockRecord]:
    """Map a feed entry to a storable row, or None when it is out of scope.

    Single-address blocks (no range) and ranges starting at 0.0.0.0 are dropped.
    """
    if block.rangestart is None or block.rangeend is None:
        return None
    range_start = encode_address(block.rangestart)
    if range_start == ZERO_IPV4:
        return None
    return BlockRecord(
        id=block.id,
        timestamp=block.timestamp,
        expiry=block.expiry,
        range_start=range_start,
        range_end=encode_address(block.rangeend),
    )
