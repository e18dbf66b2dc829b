# nbnslib

Building blocks for talking NetBIOS on a local network, written against the
Python standard library alone. The package covers:

- NetBIOS name encoding and decoding
- building name service packets
- parsing name service replies and keeping a table of the hosts they describe
- NetBIOS session framing over TCP
- the HMAC-MD5 variant that NTLMv2 uses
- book-keeping of the shares and files open in an SMB session

## Installation

```
pip install .
```

## Modules

### `nbnslib.names`

`NameType` lists the name suffixes: `WORKSTATION`, `MESSENGER`, `FILESERVER`
and `DOMAINMASTER`.

`encode_name(name, name_type)` gives the wire form of a name: a length byte,
the 32 encoded letters and a NUL byte. Names longer than 15 characters are
cut off. Shorter names are padded with spaces. Letters are upper-cased.
`decode_name` reverses this and returns the 15 name characters with their
padding kept. `encode_name_level1` and `decode_name_level1` work on the bare
32 letters. The decoders raise `ValueError` on input that is malformed.

```python
from nbnslib.names import NameType, encode_name, decode_name

wire = encode_name("myserver", NameType.FILESERVER)
assert len(wire) == 34
assert decode_name(wire).rstrip() == "MYSERVER"
```

### `nbnslib.query`

`NameQuery(payload_size, is_query, opcode)` builds a name service packet.
Its payload has a fixed size, and `append` raises `ValueError` when data
will not fit. The `trn_id`, `flags` and record count attributes can be set
directly, or through `set_flag(flag, value)` with the `FLAG_*` constants.
`to_bytes()` returns the 12-byte header followed by the payload written so
far. `dump()` returns a hex dump as text.

```python
from nbnslib.names import NameType, encode_name
from nbnslib.query import NameQuery, OP_NAME_QUERY, FLAG_BROADCAST

q = NameQuery(38, True, OP_NAME_QUERY)
q.set_flag(FLAG_BROADCAST, True)
q.append(encode_name("MYSERVER", NameType.FILESERVER))
q.append(b"\x00\x20\x00\x01")
q.queries = 1
q.trn_id = 1234
packet = q.to_bytes()
```

### `nbnslib.entries`

`parse_reply(data, expected_trn_id, recv_ip)` reads a received name service
packet and returns a `NameReply`. The reply's `kind` is a `QueryKind`:

- `NB` for an answer to a name query.
- `NBSTAT` for a node status answer, with the file server `name` and its
  `group`.
- `INVALID` for anything else.

It raises `ValueError` if the packet is malformed. It also raises
`ValueError` when the transaction id does not match `expected_trn_id`
(pass `None` to skip this check).

`EntryTable` holds `NsEntry` objects, most recently added first. Its
methods are `add(ip)`, `find_by_name(name)`, `find_by_ip(ip)`,
`remove(entry)` and `clear()`. The table can be iterated and supports
`len()`. `NsEntry.set_name` records a host's name, group and type.
`copy_name` strips the space padding from a 15-byte name field.

### `nbnslib.session`

`NetbiosSession(buf_size)` is a TCP connection that carries NetBIOS
session packets.

`connect(ip, name, direct_tcp)` works in one of two ways:

- With `direct_tcp` true, it tries ports 445 and then 139.
- Otherwise, it connects to port 139 and sends a session request for
  `name`.

It raises `SessionError` if it cannot connect or the session is refused.

The other methods are:

- `packet_init()`, which starts a new packet.
- `packet_append(data)`, which adds data to it.
- `packet_send()`, which sends it.
- `packet_recv()`, which returns the payload of the next packet that is not
  a keep-alive.

The session is a context manager and closes its socket on exit.

```python
from nbnslib.session import NetbiosSession, SessionError

with NetbiosSession(8192) as s:
    try:
        s.connect("192.0.2.10", "MYSERVER", direct_tcp=True)
    except SessionError as exc:
        print("no session:", exc)
```

### `nbnslib.hmac_md5`

`hmac_md5(key, msg)` returns a 16-byte HMAC-MD5. Keys longer than 64 bytes
are truncated, not hashed, which is the behaviour NTLMv2 expects. For keys
of 64 bytes or fewer the result is the same as standard HMAC-MD5.

### `nbnslib.registry`

`make_fd(tid, fid)`, `fd_tid(fd)` and `fd_fid(fd)` pack a tree id and a
file id into one 32-bit descriptor and split them out again.

`ShareRegistry` keeps `SmbShare` objects and the `SmbFile` objects open on
them. It has these methods:

- `add_share`
- `get_share`
- `remove_share`
- `clear`
- `add_file`, which raises `KeyError` for an unknown tree id
- `get_file`
- `remove_file`

## What this package does not do

This package does not include a network name service client. It cannot
resolve a name by broadcast, look up a host's name from its address, or
discover machines on the LAN in the background. It provides no
command-line tools. It has no SMB client either: there is no
authentication, no share listing and no file access. The modules above
give you the encoding, packet and framing pieces for building such tools.

## Running the tests

```
pip install ".[test]"
pytest
```