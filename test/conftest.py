"""
statter: fixtures for tests

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""
import selectors
import socket
from types import TracebackType
from typing import Iterator, List, Type

import pytest

from statter import logutil

logutil.configure_logging()


class UdpServer:
    def __init__(self, host: str = "127.0.0.1") -> None:
        self.host = host
        self.port = 0
        self.socket = socket.socket(family=socket.AF_INET, type=socket.SOCK_DGRAM)

    def __enter__(self) -> "UdpServer":
        self.socket.bind((self.host, 0))
        self.port = self.socket.getsockname()[1]
        return self

    def __exit__(self, exc_type: Type, exc_val: BaseException, exc_tb: TracebackType) -> None:
        self.socket.close()

    @property
    def address(self) -> str:
        return "{}:{}".format(self.host, self.port)

    def has_message(self, timeout: float = 0.1) -> bool:
        selector = selectors.DefaultSelector()
        selector.register(self.socket, selectors.EVENT_READ)
        try:
            return len(selector.select(timeout=timeout)) > 0
        finally:
            selector.unregister(self.socket)
            selector.close()

    def get_message(self, timeout: float = 2.0) -> str:
        self.socket.settimeout(timeout)
        return self.socket.recv(2048).decode()

    def get_messages(self, count: int, timeout: float = 2.0) -> List[str]:
        return [self.get_message(timeout) for _ in range(count)]


@pytest.fixture(name="udp_server")
def fixture_udp_server() -> Iterator[UdpServer]:
    with UdpServer() as udp_server:
        yield udp_server
