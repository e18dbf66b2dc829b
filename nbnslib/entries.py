"""Name service replies and the table of hosts they describe."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from .names import ENCODED_LENGTH, NAME_LENGTH, NameType

HEADER_SIZE = 12
"""Size of a name service packet header."""

NAME_FLAG_GROUP = 0x8000
"""Flag marking a group name in a node status reply."""

NODE_NAME_SIZE = 18
"""Size of one name record in a node status reply."""

QUERY_TYPE_NB = b"\x00\x20"
QUERY_TYPE_NBSTAT = b"\x00\x21"
QUERY_CLASS_IN = b"\x00\x01"

_U16 = struct.Struct("!H")


class QueryKind(Enum):
    """What a received name service reply answers."""

    INVALID = 0
    NB = 1
    NBSTAT = 2


@dataclass
class NameReply:
    """The useful content of a name service reply."""

    kind: QueryKind
    ip: str | None = None
    name: str | None = None
    group: str | None = None
    name_type: int = 0


def copy_name(raw: str | bytes) -> str:
    """Return the name held in a 15-byte NetBIOS name field.

    Trailing space padding is removed, but the first character is always
    kept. Anything from a NUL byte on is dropped.
    """
    if isinstance(raw, str):
        raw = raw.encode("latin-1")
    buf = bytes(raw)[:NAME_LENGTH]
    buf = buf[:1] + buf[1:].rstrip(b" ")
    return buf.split(b"\x00", 1)[0].decode("latin-1")


def _parse_node_status(data: bytes, recv_ip: str | None) -> NameReply:
    if len(data) < 1:
        raise ValueError("node status reply without a name count")
    count = data[0]
    if len(data) < count * NODE_NAME_SIZE:
        raise ValueError("node status reply shorter than its name count")
    names = data[1:].ljust(count * NODE_NAME_SIZE, b"\x00")
    records = [
        names[start : start + NODE_NAME_SIZE]
        for start in range(0, count * NODE_NAME_SIZE, NODE_NAME_SIZE)
    ]

    def is_group(record: bytes) -> bool:
        return bool(_U16.unpack_from(record, 16)[0] & NAME_FLAG_GROUP)

    group = next((r for r in records if is_group(r)), None)
    name = next(
        (
            r
            for r in records
            if not is_group(r) and r[NAME_LENGTH] == NameType.FILESERVER
        ),
        None,
    )
    if name is None:
        return NameReply(QueryKind.INVALID, ip=recv_ip)
    return NameReply(
        QueryKind.NBSTAT,
        ip=recv_ip,
        name=copy_name(name[:NAME_LENGTH]),
        group=copy_name(group[:NAME_LENGTH]) if group is not None else None,
        name_type=NameType.FILESERVER,
    )


def parse_reply(
    data: bytes, expected_trn_id: int | None, recv_ip: str | None
) -> NameReply:
    """Parse a received name service packet.

    If expected_trn_id is not None the packet's transaction id must match
    it. Raises ValueError for packets that are malformed or answer another
    transaction. A well-formed packet that answers neither a name query nor
    a node status query with a file server name gives a reply of kind
    INVALID.
    """
    data = bytes(data)
    if len(data) < HEADER_SIZE:
        raise ValueError("packet shorter than a header")
    trn_id = _U16.unpack_from(data, 0)[0]
    if expected_trn_id is not None and trn_id != expected_trn_id:
        raise ValueError(
            f"unexpected transaction id {trn_id}, wanted {expected_trn_id}"
        )

    payload = data[HEADER_SIZE:]
    if len(payload) < 1:
        raise ValueError("packet without a name")
    name_size = payload[0]
    if name_size != ENCODED_LENGTH:
        raise ValueError(f"unexpected name size {name_size}")
    if len(payload) < name_size + 12:
        raise ValueError("packet too short for its resource record")
    rr_type = payload[name_size + 2 : name_size + 4]
    data_length = _U16.unpack_from(payload, name_size + 10)[0]
    if len(payload) < name_size + 12 + data_length:
        raise ValueError("packet shorter than its data length")
    rdata = payload[name_size + 12 : name_size + 12 + data_length]

    if rr_type == QUERY_TYPE_NB:
        return NameReply(QueryKind.NB, ip=recv_ip)
    if rr_type == QUERY_TYPE_NBSTAT:
        return _parse_node_status(rdata, recv_ip)
    return NameReply(QueryKind.INVALID, ip=recv_ip)


@dataclass(eq=False)
class NsEntry:
    """A host seen on the network: its address and, once known, its names."""

    ip: str
    name: str = ""
    group: str = ""
    name_type: int = 0
    has_ip: bool = True
    has_name: bool = False
    last_time_seen: float = 0.0

    def set_name(
        self, name: str | bytes | None, group: str | bytes | None, name_type: int
    ) -> None:
        """Record the host's name, group and name type."""
        if name is not None:
            self.name = copy_name(name)
        if group is not None:
            self.group = copy_name(group)
        self.name_type = int(name_type)
        self.has_name = True


class EntryTable:
    """Known hosts, most recently added first."""

    def __init__(self) -> None:
        self._entries: list[NsEntry] = []

    def add(self, ip: str) -> NsEntry:
        """Create an entry for ip, put it first and return it."""
        entry = NsEntry(ip=ip)
        self._entries.insert(0, entry)
        return entry

    def find_by_name(self, name: str) -> NsEntry | None:
        """Return the first named entry whose name matches, or None.

        Only the first 15 characters are compared.
        """
        wanted = name[:NAME_LENGTH]
        return next(
            (
                e
                for e in self._entries
                if e.has_name and e.name[:NAME_LENGTH] == wanted
            ),
            None,
        )

    def find_by_ip(self, ip: str) -> NsEntry | None:
        """Return the first entry with this address, or None."""
        return next((e for e in self._entries if e.has_ip and e.ip == ip), None)

    def remove(self, entry: NsEntry) -> None:
        """Forget an entry; raise ValueError if it is not in the table."""
        for index, candidate in enumerate(self._entries):
            if candidate is entry:
                del self._entries[index]
                return
        raise ValueError("entry not in table")

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()

    def __iter__(self) -> Iterator[NsEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)