"""Extraction of the Server Name Indication from a TLS ClientHello.

Only as much of the handshake is parsed as is needed to reach the
``server_name`` extension; nothing is validated beyond what that requires.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

__all__ = [
    "TlsParseError",
    "IncompleteRequestError",
    "NoHostnameError",
    "InvalidClientHelloError",
    "Protocol",
    "TLS_PROTOCOL",
    "parse_tls_header",
    "parse_extensions",
    "parse_server_name_extension",
]

log = logging.getLogger(__name__)

TLS_HEADER_LEN = 5
TLS_HANDSHAKE_CONTENT_TYPE = 0x16
TLS_HANDSHAKE_TYPE_CLIENT_HELLO = 0x01
SERVER_NAME_EXTENSION = 0x0000
HOST_NAME_TYPE = 0x00


class TlsParseError(ValueError):
    """Base class for failures to obtain a server name from TLS data."""


class IncompleteRequestError(TlsParseError):
    """More data is needed before the record can be parsed."""


class NoHostnameError(TlsParseError):
    """The handshake is well formed but carries no host name."""


class InvalidClientHelloError(TlsParseError):
    """The data is not a valid TLS ClientHello."""


@dataclass(frozen=True)
class Protocol:
    """A sniffable protocol: its default port and its packet parser."""

    default_port: int
    parse_packet: Callable[[bytes], str]


def _u16(data: bytes, pos: int) -> int:
    return int.from_bytes(data[pos:pos + 2], "big")


def _signed(byte: int) -> int:
    return byte - 0x100 if byte & 0x80 else byte


def parse_tls_header(data: bytes) -> str:
    """Return the first host name found in the ClientHello held in *data*.

    Raises IncompleteRequestError when more bytes are needed,
    NoHostnameError when the request carries no host name and
    InvalidClientHelloError when the data is not a ClientHello.
    """
    data = bytes(data)
    data_len = len(data)

    if data_len < TLS_HEADER_LEN:
        raise IncompleteRequestError("shorter than a TLS record header")

    # SSL 2.0 compatible ClientHello: high bit of the length, type 1.
    if data[0] & 0x80 and data[2] == 1:
        log.debug("Received SSL 2.0 Client Hello which can not support SNI.")
        raise NoHostnameError("SSL 2.0 ClientHello carries no SNI")

    if data[0] != TLS_HANDSHAKE_CONTENT_TYPE:
        log.debug("Request did not begin with TLS handshake.")
        raise InvalidClientHelloError("not a TLS handshake record")

    major = _signed(data[1])
    minor = _signed(data[2])
    if major < 3:
        log.debug(
            "Received SSL %d.%d handshake which can not support SNI.", major, minor
        )
        raise NoHostnameError(f"SSL {major}.{minor} handshake carries no SNI")

    record_len = _u16(data, 3) + TLS_HEADER_LEN
    if data_len < record_len:
        raise IncompleteRequestError("TLS record not fully received")
    data_len = record_len
    data = data[:data_len]

    pos = TLS_HEADER_LEN
    if pos + 1 > data_len:
        raise InvalidClientHelloError("missing handshake type")
    if data[pos] != TLS_HANDSHAKE_TYPE_CLIENT_HELLO:
        log.debug("Not a client hello")
        raise InvalidClientHelloError("handshake is not a ClientHello")

    # Handshake type, length, version and random.
    pos += 38

    if pos + 1 > data_len:
        raise InvalidClientHelloError("truncated session id")
    pos += 1 + data[pos]

    if pos + 2 > data_len:
        raise InvalidClientHelloError("truncated cipher suites")
    pos += 2 + _u16(data, pos)

    if pos + 1 > data_len:
        raise InvalidClientHelloError("truncated compression methods")
    pos += 1 + data[pos]

    if pos == data_len and major == 3 and minor == 0:
        log.debug("Received SSL 3.0 handshake without extensions")
        raise NoHostnameError("SSL 3.0 handshake without extensions")

    if pos + 2 > data_len:
        raise InvalidClientHelloError("truncated extensions length")
    ext_len = _u16(data, pos)
    pos += 2

    if pos + ext_len > data_len:
        raise InvalidClientHelloError("extensions overrun the record")
    return parse_extensions(data[pos:pos + ext_len])


def parse_extensions(data: bytes) -> str:
    """Walk a ClientHello extension block and parse its server_name entry."""
    data = bytes(data)
    data_len = len(data)
    pos = 0
    while pos + 4 <= data_len:
        length = _u16(data, pos + 2)
        if _u16(data, pos) == SERVER_NAME_EXTENSION:
            if pos + 4 + length > data_len:
                raise InvalidClientHelloError("server_name extension overruns block")
            return parse_server_name_extension(data[pos + 4:pos + 4 + length])
        pos += 4 + length
    if pos != data_len:
        raise InvalidClientHelloError("extension block is misaligned")
    raise NoHostnameError("no server_name extension present")


def parse_server_name_extension(data: bytes) -> str:
    """Return the first host_name entry of a server_name extension body."""
    data = bytes(data)
    data_len = len(data)
    pos = 2  # server name list length
    while pos + 3 < data_len:
        length = _u16(data, pos + 1)
        if pos + 3 + length > data_len:
            raise InvalidClientHelloError("server name entry overruns extension")
        name_type = data[pos]
        if name_type == HOST_NAME_TYPE:
            raw = data[pos + 3:pos + 3 + length]
            return raw.split(b"\x00", 1)[0].decode("latin-1")
        log.debug("Unknown server name extension name type: %d", _signed(name_type))
        pos += 3 + length
    if pos != data_len:
        raise InvalidClientHelloError("server name list is misaligned")
    raise NoHostnameError("server_name extension holds no host name")


TLS_PROTOCOL = Protocol(default_port=443, parse_packet=parse_tls_header)