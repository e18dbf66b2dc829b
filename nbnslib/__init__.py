"""NetBIOS name encoding, name service packets and replies, session framing and helpers."""

__version__ = "0.1.0"
__all__ = [
    "entries",
    "hmac_md5",
    "names",
    "query",
    "registry",
    "session",
]