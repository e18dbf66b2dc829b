"""NetBIOS name types and first-level name encoding."""

from __future__ import annotations

from enum import IntEnum

NAME_LENGTH = 15
"""Number of name characters carried by a NetBIOS name (the 16th is the type)."""

ENCODED_LENGTH = 32
"""Length of a first-level encoded name."""

_BASE = ord("A")


class NameType(IntEnum):
    """Suffix byte identifying the service behind a NetBIOS name."""

    WORKSTATION = 0x00
    MESSENGER = 0x03
    FILESERVER = 0x20
    DOMAINMASTER = 0x1B


def _as_bytes(value: str | bytes | bytearray) -> bytes:
    if isinstance(value, str):
        return value.encode("latin-1")
    return bytes(value)


def _encode_byte(value: int) -> str:
    if 0x61 <= value <= 0x7A:
        value -= 0x20
    return chr((value >> 4) + _BASE) + chr((value & 0x0F) + _BASE)


def _decode_pair(high: int, low: int) -> int:
    for nibble in (high, low):
        if not _BASE <= nibble < _BASE + 16:
            raise ValueError(f"invalid encoded name character {chr(nibble)!r}")
    return ((high - _BASE) << 4) | (low - _BASE)


def encode_name_level1(name: str | bytes, name_type: int) -> str:
    """Encode a name and its type as the 32 letters of first-level encoding.

    Names longer than 15 characters are truncated, shorter ones are padded
    with spaces. Letters are upper-cased before encoding.
    """
    if not 0 <= int(name_type) <= 0xFF:
        raise ValueError(f"name type out of range: {name_type!r}")
    raw = _as_bytes(name)[:NAME_LENGTH].ljust(NAME_LENGTH, b" ")
    return "".join(_encode_byte(b) for b in raw) + _encode_byte(int(name_type))


def decode_name_level1(encoded: str | bytes) -> str:
    """Decode the 15 name characters of a 32-letter encoded name.

    The type suffix is not part of the result and padding is kept.
    """
    raw = _as_bytes(encoded)
    if len(raw) != ENCODED_LENGTH:
        raise ValueError(
            f"encoded name must be {ENCODED_LENGTH} characters, got {len(raw)}"
        )
    pairs = zip(raw[0 : 2 * NAME_LENGTH : 2], raw[1 : 2 * NAME_LENGTH : 2])
    return bytes(_decode_pair(h, l) for h, l in pairs).decode("latin-1")


def encode_name(name: str | bytes, name_type: int) -> bytes:
    """Encode a name in wire form: length byte, 32 letters, NUL terminator."""
    level1 = encode_name_level1(name, name_type).encode("ascii")
    return bytes([ENCODED_LENGTH]) + level1 + b"\x00"


def decode_name(encoded: str | bytes) -> str:
    """Decode a wire-form name produced by :func:`encode_name`.

    Everything from the first NUL byte on is ignored; what remains must be
    the length byte followed by 32 encoded letters.
    """
    raw = _as_bytes(encoded).split(b"\x00", 1)[0]
    if len(raw) != ENCODED_LENGTH + 1:
        raise ValueError(
            f"wire name must be {ENCODED_LENGTH + 1} bytes, got {len(raw)}"
        )
    return decode_name_level1(raw[1:])