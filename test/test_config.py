"""
statter - configuration tests

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import logging

import pytest

from statter import (
    NULL_STATTER, ClientConfig, ClientState, InvalidConfigurationError, StatsClient, Tag, TagFormat, client_or_null,
    new_client, new_client_with_config
)
from statter.config import config_dict, load_config, parse_address

from .conftest import UdpServer


@pytest.mark.parametrize(
    "address,expected", [
        ("127.0.0.1:8125", ("127.0.0.1", 8125)),
        ("localhost:1", ("localhost", 1)),
        ("stats.example.com:65535", ("stats.example.com", 65535)),
        ("[::1]:8125", ("::1", 8125)),
    ]
)
def test_parse_address(address: str, expected) -> None:
    assert parse_address(address) == expected


@pytest.mark.parametrize(
    "address", [
        "",
        "localhost",
        ":8125",
        "localhost:",
        "localhost:port",
        "localhost:0",
        "localhost:65536",
        "localhost:-1",
        "::1:8125",
        "[not-ipv6]:8125",
    ]
)
def test_parse_invalid_address(address: str) -> None:
    with pytest.raises(ValueError):
        parse_address(address)


def test_config_defaults() -> None:
    config = ClientConfig(address="127.0.0.1:8125")
    assert config.prefix == ""
    assert config.tag_format == TagFormat.SuffixOctothorpe
    assert config.tags == ()
    assert config.sampler is None


def test_config_from_dict() -> None:
    config = load_config({
        "address": "127.0.0.1:8125",
        "prefix": "app",
        "tag_format": "graphite",
        "tags": [["region", "eu"], ("flag", None)],
    })
    assert config.tag_format == TagFormat.InfixSemicolon
    assert config.tags == (Tag("region", "eu"), Tag("flag", None))
    assert config_dict(config) == {
        "address": "127.0.0.1:8125",
        "prefix": "app",
        "tag_format": "graphite",
        "tags": [["region", "eu"], ["flag", None]],
    }


def test_config_is_immutable() -> None:
    config = ClientConfig(address="127.0.0.1:8125")
    with pytest.raises(Exception):
        config.prefix = "changed"
    assert load_config(config) is config


@pytest.mark.parametrize(
    "config", [
        {},
        {"prefix": "app"},
        {"address": "nonsense"},
        {"address": "127.0.0.1:8125", "tag_format": "influx"},
        {"address": "127.0.0.1:8125", "prefx": "typo"},
        {"address": "127.0.0.1:8125", "sampler": "always"},
        {"address": "127.0.0.1:8125", "tags": 5},
        {"address": "127.0.0.1:8125", "tags": [1]},
        {"address": "127.0.0.1:8125", "tags": ["ab"]},
        {"address": "127.0.0.1:8125", "tags": "ab"},
        {"address": "127.0.0.1:8125", "tags": [("a", "b", "c")]},
        "127.0.0.1:8125",
        None,
    ]
)
def test_invalid_config(config) -> None:
    with pytest.raises(InvalidConfigurationError):
        load_config(config)
    with pytest.raises(InvalidConfigurationError):
        new_client_with_config(config)


@pytest.mark.parametrize("address", ["not-an-address", "localhost:99999", "not-resolvable.invalid:8125"])
def test_new_client_invalid_address(address: str) -> None:
    with pytest.raises(InvalidConfigurationError):
        new_client(address, "test")


def test_unreachable_destination_is_not_an_error(udp_server: UdpServer) -> None:
    # nothing listens on the port once the server is closed
    address = udp_server.address
    udp_server.socket.close()
    client = new_client(address, "test")
    for _ in range(3):
        client.inc("count", 1)
    client.close()


def test_client_or_null(udp_server: UdpServer, caplog) -> None:
    client = client_or_null({"address": udp_server.address, "prefix": "test"})
    assert isinstance(client, StatsClient)
    assert client.state == ClientState.Active
    client.close()

    with caplog.at_level(logging.WARNING, logger="statter.client"):
        statter = client_or_null({"address": "not-resolvable.invalid:8125", "prefix": "test"})
    assert statter is NULL_STATTER
    assert "stats are disabled" in caplog.text
    statter.inc("stat1", 42, 1.0)
    statter.close()
    assert not udp_server.has_message()


@pytest.mark.parametrize("tags", [5, [1], ["ab"]])
def test_client_or_null_with_malformed_tags(udp_server: UdpServer, tags) -> None:
    statter = client_or_null({"address": udp_server.address, "tags": tags})
    assert statter is NULL_STATTER
    statter.inc("count", 1)
    assert not udp_server.has_message()
