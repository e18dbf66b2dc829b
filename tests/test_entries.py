import struct

import pytest

from nbnslib.entries import (
    EntryTable,
    NameReply,
    NsEntry,
    QueryKind,
    copy_name,
    parse_reply,
)
from nbnslib.names import NameType, encode_name


def _record(name, name_type, flags):
    return name.encode("latin-1").ljust(15, b" ") + bytes([name_type]) + struct.pack("!H", flags)


def _packet(trn_id, rr_type, rdata, data_length=None):
    header = struct.pack("!6H", trn_id, 0x8500, 0, 1, 0, 0)
    if data_length is None:
        data_length = len(rdata)
    body = (
        encode_name("*", NameType.WORKSTATION)
        + rr_type
        + b"\x00\x01"
        + b"\x00\x00\x00\x00"
        + struct.pack("!H", data_length)
        + rdata
    )
    return header + body


def _nbstat(records):
    return bytes([len(records)]) + b"".join(records)


def test_copy_name_strips_padding():
    assert copy_name(b"SERVER         ") == "SERVER"


def test_copy_name_keeps_first_character():
    assert copy_name(b" " * 15) == " "


def test_copy_name_truncates_and_stops_at_nul():
    assert copy_name("ABCDEFGHIJKLMNOPQ") == "ABCDEFGHIJKLMNO"
    assert copy_name(b"AB\x00CD          ") == "AB"


def test_copy_name_keeps_inner_spaces():
    assert copy_name(b"MY HOST        ") == "MY HOST"


def test_parse_nb_reply():
    data = _packet(7, b"\x00\x20", b"\x00\x00\xc0\xa8\x01\x02")
    reply = parse_reply(data, 7, "192.168.1.2")
    assert reply == NameReply(QueryKind.NB, ip="192.168.1.2")


def test_transaction_id_mismatch_rejected():
    data = _packet(7, b"\x00\x20", b"")
    with pytest.raises(ValueError):
        parse_reply(data, 8, "10.0.0.1")


def test_transaction_id_ignored_when_not_expected():
    data = _packet(7, b"\x00\x20", b"")
    assert parse_reply(data, None, "10.0.0.1").kind is QueryKind.NB


def test_short_packet_rejected():
    with pytest.raises(ValueError):
        parse_reply(b"\x00" * 11, None, "10.0.0.1")


def test_bad_name_size_rejected():
    data = bytearray(_packet(1, b"\x00\x20", b""))
    data[12] = 0x10
    with pytest.raises(ValueError):
        parse_reply(bytes(data), None, "10.0.0.1")


def test_declared_length_beyond_packet_rejected():
    data = _packet(1, b"\x00\x20", b"\x00\x00", data_length=50)
    with pytest.raises(ValueError):
        parse_reply(data, None, "10.0.0.1")


def test_parse_node_status_reply():
    records = [
        _record("SERVER", NameType.WORKSTATION, 0x0400),
        _record("WORKGROUP", NameType.WORKSTATION, 0x8400),
        _record("SERVER", NameType.FILESERVER, 0x0400),
    ]
    data = _packet(3, b"\x00\x21", _nbstat(records))
    reply = parse_reply(data, 3, "10.0.0.5")
    assert reply.kind is QueryKind.NBSTAT
    assert reply.name == "SERVER"
    assert reply.group == "WORKGROUP"
    assert reply.name_type == NameType.FILESERVER
    assert reply.ip == "10.0.0.5"


def test_node_status_group_name_is_never_the_server():
    records = [
        _record("GROUPSRV", NameType.FILESERVER, 0x8000),
        _record("REALSRV", NameType.FILESERVER, 0x0000),
    ]
    reply = parse_reply(_packet(1, b"\x00\x21", _nbstat(records)), None, "10.0.0.9")
    assert reply.name == "REALSRV"
    assert reply.group == "GROUPSRV"


def test_node_status_without_file_server_is_invalid():
    records = [_record("DESKTOP", NameType.WORKSTATION, 0)]
    reply = parse_reply(_packet(1, b"\x00\x21", _nbstat(records)), None, "10.0.0.6")
    assert reply.kind is QueryKind.INVALID
    assert reply.name is None


def test_node_status_short_name_list_rejected():
    rdata = bytes([3]) + _record("X", NameType.FILESERVER, 0)
    with pytest.raises(ValueError):
        parse_reply(_packet(1, b"\x00\x21", rdata), None, "10.0.0.6")


def test_unknown_record_type_is_invalid():
    reply = parse_reply(_packet(1, b"\x00\x05", b""), None, "10.0.0.6")
    assert reply.kind is QueryKind.INVALID


def test_set_name_marks_entry_named():
    entry = NsEntry(ip="10.0.0.1")
    assert not entry.has_name
    entry.set_name(b"HOST           ", "GROUP", NameType.FILESERVER)
    assert entry.has_name
    assert (entry.name, entry.group, entry.name_type) == ("HOST", "GROUP", 0x20)


def test_set_name_keeps_missing_parts():
    entry = NsEntry(ip="10.0.0.1", group="OLD")
    entry.set_name("HOST", None, NameType.FILESERVER)
    assert entry.group == "OLD"
    assert entry.name == "HOST"


def test_table_adds_at_head():
    table = EntryTable()
    first = table.add("10.0.0.1")
    second = table.add("10.0.0.2")
    assert list(table) == [second, first]
    assert len(table) == 2


def test_find_by_ip():
    table = EntryTable()
    entry = table.add("10.0.0.1")
    table.add("10.0.0.2")
    assert table.find_by_ip("10.0.0.1") is entry
    assert table.find_by_ip("10.0.0.3") is None


def test_find_by_name_needs_a_name():
    table = EntryTable()
    entry = table.add("10.0.0.1")
    assert table.find_by_name("HOST") is None
    entry.set_name("HOST", "GROUP", NameType.FILESERVER)
    assert table.find_by_name("HOST") is entry
    assert table.find_by_name("OTHER") is None


def test_find_by_name_compares_fifteen_characters():
    table = EntryTable()
    entry = table.add("10.0.0.1")
    entry.set_name("ABCDEFGHIJKLMNO", None, NameType.FILESERVER)
    assert table.find_by_name("ABCDEFGHIJKLMNOXYZ") is entry


def test_remove_and_clear():
    table = EntryTable()
    first = table.add("10.0.0.1")
    second = table.add("10.0.0.2")
    table.remove(first)
    assert list(table) == [second]
    with pytest.raises(ValueError):
        table.remove(first)
    table.clear()
    assert len(table) == 0


def test_remove_while_iterating():
    table = EntryTable()
    for last in range(1, 5):
        table.add(f"10.0.0.{last}")
    for entry in table:
        table.remove(entry)
    assert len(table) == 0