"""Building NetBIOS name service packets."""

from __future__ import annotations

import struct

FLAG_RESPONSE = 0x8000
FLAG_AUTHORITATIVE = 0x0400
FLAG_TRUNCATED = 0x0200
FLAG_RECURSIVE = 0x0100
FLAG_RECURSION_AVAILABLE = 0x0080
FLAG_BROADCAST = 0x0010

OP_NAME_QUERY = 0x00

HEADER = struct.Struct("!6H")
"""Packet header: transaction id, flags and four record counts."""


class NameQuery:
    """A name service packet with a fixed-capacity payload."""

    def __init__(self, payload_size: int, is_query: bool, opcode: int) -> None:
        if payload_size < 0:
            raise ValueError("payload size must not be negative")
        self.payload_size = payload_size
        self.cursor = 0
        self._payload = bytearray(payload_size)
        self.trn_id = 0
        self.queries = 0
        self.answers = 0
        self.ns_count = 0
        self.ar_count = 0
        self.flags = (opcode << 11) & 0xFFFF
        self.set_flag(FLAG_RESPONSE, not is_query)

    def set_flag(self, flag: int, value: bool) -> None:
        """Set or clear the given flag bits."""
        if value:
            self.flags = (self.flags | flag) & 0xFFFF
        else:
            self.flags &= ~flag & 0xFFFF

    def append(self, data: bytes) -> None:
        """Append data to the payload; raise ValueError if it does not fit."""
        data = bytes(data)
        if self.payload_size - self.cursor < len(data):
            raise ValueError(
                f"{len(data)} bytes do not fit in the "
                f"{self.payload_size - self.cursor} bytes left"
            )
        self._payload[self.cursor : self.cursor + len(data)] = data
        self.cursor += len(data)

    @property
    def payload(self) -> bytes:
        """The bytes appended so far."""
        return bytes(self._payload[: self.cursor])

    def to_bytes(self) -> bytes:
        """The packet as it goes on the wire: header then written payload."""
        header = HEADER.pack(
            self.trn_id & 0xFFFF,
            self.flags,
            self.queries & 0xFFFF,
            self.answers & 0xFFFF,
            self.ns_count & 0xFFFF,
            self.ar_count & 0xFFFF,
        )
        return header + self.payload

    def dump(self) -> str:
        """A human-readable hex dump of the packet."""
        lines = [
            "--- netbios_query dump :",
            f"payload = {self.payload_size}, cursor = {self.cursor}.",
            f"Transaction id = {self.trn_id}.",
            "-------------------------",
        ]
        data = self.to_bytes()
        rows = [
            "0x" + "".join(f"{b:02X} " for b in data[start : start + 8])
            for start in range(0, len(data), 8)
        ]
        lines.append("\n".join(rows))
        lines.append("-------------------------")
        return "\n".join(lines) + "\n"