"""
statter - UDP transport

Fire-and-forget datagrams: the socket is not connected, so ICMP port
unreachable replies from a missing collector never show up as send errors.

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging
import socket
from typing import Optional

from statter.config import parse_address
from statter.errors import InvalidConfigurationError, TransportError

LOG = logging.getLogger(__name__)


def pick_address(addrinfo):
    """First IPv4 result if there is one, otherwise the first result"""
    for entry in addrinfo:
        if entry[0] == socket.AF_INET:
            return entry
    return addrinfo[0]


class UdpTransport:
    def __init__(self, sock: socket.socket, dest_addr):
        self._socket: Optional[socket.socket] = sock
        self._dest_addr = dest_addr

    @classmethod
    def open(cls, address: str) -> "UdpTransport":
        try:
            host, port = parse_address(address)
        except ValueError as ex:
            raise InvalidConfigurationError(str(ex)) from ex
        try:
            addrinfo = socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM)
        except (socket.gaierror, UnicodeError) as ex:
            raise InvalidConfigurationError("Unable to resolve statsd address {!r}: {}".format(address, ex)) from ex
        family, socktype, proto, _, dest_addr = pick_address(addrinfo)
        try:
            sock = socket.socket(family, socktype, proto)
        except OSError as ex:
            raise InvalidConfigurationError("Unable to create socket for {!r}: {}".format(address, ex)) from ex
        LOG.debug("Sending stats to %r resolved as %r", address, dest_addr)
        return cls(sock, dest_addr)

    @property
    def dest_addr(self):
        return self._dest_addr

    @property
    def closed(self) -> bool:
        return self._socket is None

    def send(self, data: bytes) -> None:
        sock = self._socket
        if sock is None:
            raise TransportError("Transport is closed")
        try:
            sock.sendto(data, self._dest_addr)
        except OSError as ex:
            raise TransportError("Sending {} bytes to {!r} failed: {}".format(len(data), self._dest_addr, ex)) from ex

    def close(self) -> None:
        sock, self._socket = self._socket, None
        if sock is not None:
            sock.close()
