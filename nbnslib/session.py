"""NetBIOS session service: framed packets over a TCP connection."""

from __future__ import annotations

import socket
import struct
from enum import IntEnum

from .names import NameType, encode_name

PORT_SESSION = 139
PORT_DIRECT = 445
PORT_DIRECT_SECONDARY = 139

OP_SESSION_MSG = 0x00
OP_SESSION_REQ = 0x81
OP_SESSION_REQ_OK = 0x82
OP_SESSION_REQ_NOK = 0x83
OP_SESSION_RETARGET = 0x84
OP_SESSION_KEEPALIVE = 0x85

CALLING_NAME = "NBNSLIB"
"""Name this side announces itself with in a session request."""

HEADER = struct.Struct("!BBH")
"""Session packet header: opcode, flags, 16-bit length."""


class SessionState(IntEnum):
    """State of a NetBIOS session."""

    NEW = 0
    CONNECTING = 1
    CONNECTED = 2
    ERROR = -1
    REFUSED = -2


class SessionError(Exception):
    """A NetBIOS session could not be established or used."""


class NetbiosSession:
    """A NetBIOS session with one remote host."""

    def __init__(self, buf_size: int) -> None:
        if buf_size < 0:
            raise ValueError("buffer size must not be negative")
        self.buf_size = buf_size
        self.state = SessionState.NEW
        self.remote_addr: tuple[str, int] | None = None
        self.timeout: float | None = None
        self.session_ports: tuple[int, ...] = (PORT_SESSION,)
        self.direct_ports: tuple[int, ...] = (PORT_DIRECT, PORT_DIRECT_SECONDARY)
        self.opcode = OP_SESSION_MSG
        self.flags = 0
        self._payload = bytearray()
        self._socket: socket.socket | None = None

    @property
    def payload(self) -> bytes:
        """The payload of the packet being built or last received."""
        return bytes(self._payload)

    def _open(self, ip: str, port: int) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.settimeout(self.timeout)
            sock.connect((ip, port))
        except OSError:
            sock.close()
            raise
        self._socket = sock
        self.remote_addr = (ip, port)

    def connect(self, ip: str, name: str, direct_tcp: bool) -> None:
        """Connect to ip and, unless direct_tcp, request a session with name.

        Raises SessionError if no port accepts the connection, the exchange
        fails, or the remote host refuses the session.
        """
        ip = str(ip)
        ports = self.direct_ports if direct_tcp else self.session_ports
        last_error: OSError | None = None
        for port in ports:
            try:
                self._open(ip, port)
                break
            except OSError as exc:
                last_error = exc
        else:
            self.state = SessionState.ERROR
            raise SessionError(f"unable to connect to {ip}") from last_error

        if not direct_tcp:
            self.packet_init()
            self.opcode = OP_SESSION_REQ
            self.packet_append(encode_name(name, NameType.FILESERVER))
            self.packet_append(encode_name(CALLING_NAME, NameType.WORKSTATION))
            self.state = SessionState.CONNECTING
            try:
                self.packet_send()
                self.packet_recv()
            except SessionError:
                self.state = SessionState.ERROR
                raise
            if self.opcode != OP_SESSION_REQ_OK:
                self.state = SessionState.REFUSED
                raise SessionError(f"session refused by {ip} (opcode 0x{self.opcode:02X})")

        self.state = SessionState.CONNECTED

    def packet_init(self) -> None:
        """Start a new, empty session message."""
        self._payload = bytearray()
        self.flags = 0
        self.opcode = OP_SESSION_MSG

    def packet_append(self, data: bytes) -> None:
        """Append data to the packet being built."""
        self._payload += data
        self.buf_size = max(self.buf_size, len(self._payload))

    def _require_active(self) -> socket.socket:
        if self._socket is None or self.state <= SessionState.NEW:
            raise SessionError("session is not connected")
        return self._socket

    def packet_send(self) -> int:
        """Send the packet being built and return the number of bytes sent."""
        sock = self._require_active()
        data = HEADER.pack(self.opcode, self.flags, len(self._payload) & 0xFFFF)
        data += self._payload
        try:
            sock.sendall(data)
        except OSError as exc:
            raise SessionError("unable to send packet") from exc
        return len(data)

    def _recv_exact(self, sock: socket.socket, size: int) -> bytes:
        chunks = bytearray()
        while len(chunks) < size:
            try:
                chunk = sock.recv(size - len(chunks))
            except OSError as exc:
                raise SessionError("unable to receive packet") from exc
            if not chunk:
                raise SessionError("connection closed by remote host")
            chunks += chunk
        return bytes(chunks)

    def _next_packet(self) -> bytes:
        sock = self._require_active()
        opcode, flags, length = HEADER.unpack(self._recv_exact(sock, HEADER.size))
        total = length | ((flags & 0x01) << 16)
        payload = self._recv_exact(sock, total)
        self.opcode = opcode
        self.flags = flags
        self._payload = bytearray(payload)
        self.buf_size = max(self.buf_size, total + HEADER.size)
        return payload

    def packet_recv(self) -> bytes:
        """Receive the next packet, skipping keep-alives, and return its payload."""
        while True:
            payload = self._next_packet()
            if self.opcode != OP_SESSION_KEEPALIVE:
                return payload

    def close(self) -> None:
        """Close the connection, if any."""
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> NetbiosSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()