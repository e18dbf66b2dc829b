"""HMAC-MD5 in the variant used by NTLMv2 authentication."""

from __future__ import annotations

import hashlib

_BLOCK = 64


def _md5(data: bytes) -> bytes:
    return hashlib.md5(data, usedforsecurity=False).digest()


def hmac_md5(key: bytes, msg: bytes) -> bytes:
    """Return the 16-byte HMAC-MD5 of msg under key.

    Keys longer than one block are truncated to 64 bytes rather than
    hashed, as the NTLMv2 implementations expect.
    """
    padded = bytes(key)[:_BLOCK].ljust(_BLOCK, b"\x00")
    outer = bytes(0x5C ^ b for b in padded)
    inner = bytes(0x36 ^ b for b in padded)
    return _md5(outer + _md5(inner + bytes(msg)))