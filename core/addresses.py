from __future__ import annotations

import binascii
from ipaddress import IPv4Address, IPv6Address
from typing import Union

IPAddress = Union[IPv4Address, IPv6Address]

# Known degenerate upstream range start; only the 4-byte family is filtered.
ZERO_IPV4 = "00000000"


def encode_address(address: IPAddress) -> str:
    """Render an address as fixed-width uppercase hex (8 chars for IPv4, 32 for IPv6).

    Sorting the encoded strings sorts addresses within one family; values from
    different families are not comparable.
    """
    return address.packed.hex().upper()


def decode_address(encoded: str) -> IPAddress:
    try:
        raw = binascii.unhexlify(encoded)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"not a hex encoded address: {encoded!r}") from exc
    if len(raw) == 4:
        return IPv4Address(raw)
    if len(raw) == 16:
        return IPv6Address(raw)
    raise ValueError(f"unexpected address width {len(raw)} bytes: {encoded!r}")
