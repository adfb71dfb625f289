"""Fixed-length proposal identifiers.

Proposal names are stored as 32-byte values, the same layout the original
contract deployment used (ethers ``formatBytes32String``): UTF-8 text,
right-padded with NUL bytes, always NUL-terminated.
"""

from __future__ import annotations

from typing import Union

BYTES32_LENGTH = 32

ProposalName = Union[str, bytes]


def format_bytes32_string(text: str) -> bytes:
    """Encode text as a NUL-padded bytes32.

    At most 31 bytes of UTF-8 fit: the last byte is reserved for the
    terminator.
    """
    raw = text.encode("utf-8")
    if len(raw) > BYTES32_LENGTH - 1:
        raise ValueError(
            f"bytes32 string must be less than {BYTES32_LENGTH} bytes: {text!r}"
        )
    return raw.ljust(BYTES32_LENGTH, b"\x00")


def parse_bytes32_string(data: bytes) -> str:
    """Decode a bytes32 back to text, stopping at the first NUL."""
    if len(data) != BYTES32_LENGTH:
        raise ValueError(f"invalid bytes32 - not {BYTES32_LENGTH} bytes long")
    if data[BYTES32_LENGTH - 1] != 0:
        raise ValueError("invalid bytes32 string - no null terminator")
    return data.split(b"\x00", 1)[0].decode("utf-8")


def to_bytes32(name: ProposalName) -> bytes:
    """Normalize a proposal name to its stored bytes32 form."""
    if isinstance(name, str):
        return format_bytes32_string(name)
    if isinstance(name, (bytes, bytearray)):
        if len(name) != BYTES32_LENGTH:
            raise ValueError(
                f"Proposal name must be exactly {BYTES32_LENGTH} bytes, got {len(name)}"
            )
        # Must decode as a label: NUL-terminated UTF-8.
        parse_bytes32_string(bytes(name))
        return bytes(name)
    raise TypeError(f"Proposal name must be str or bytes, got {type(name).__name__}")
