"""
statter - client configuration validation

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import ipaddress
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from statter.common import TagFormat, Tags, normalize_tags
from statter.errors import InvalidConfigurationError


def parse_address(address: str) -> Tuple[str, int]:
    """Split "host:port" (or "[ipv6]:port") into its parts"""
    host, sep, port_text = address.rpartition(":")
    if not sep or not host:
        raise ValueError("Address {!r} is not in host:port format".format(address))
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
        try:
            ipaddress.IPv6Address(host)
        except ValueError as ex:
            raise ValueError("Address {!r} has an invalid IPv6 host".format(address)) from ex
    elif ":" in host:
        raise ValueError("IPv6 address {!r} must be written as [host]:port".format(address))
    if not port_text.isdigit():
        raise ValueError("Address {!r} has an invalid port".format(address))
    port = int(port_text)
    if not 0 < port < 65536:
        raise ValueError("Address {!r} has a port out of range".format(address))
    return host, port


class ClientConfig(BaseModel):
    model_config = ConfigDict(
        # Extra values should be errors, as they are most likely typos
        extra="forbid",
        frozen=True,
    )

    address: str
    prefix: str = ""
    tag_format: TagFormat = TagFormat.SuffixOctothorpe
    tags: Tags = ()
    sampler: Optional[Callable[[float], bool]] = None

    @field_validator("address")
    @classmethod
    def check_address(cls, value: str) -> str:
        parse_address(value)
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def check_tags(cls, value: Any) -> Tags:
        return normalize_tags(value)


def load_config(config: Union[ClientConfig, Mapping[str, Any]]) -> ClientConfig:
    if isinstance(config, ClientConfig):
        return config
    if not isinstance(config, Mapping):
        raise InvalidConfigurationError("Client configuration must be a mapping, got {!r}".format(type(config).__name__))
    try:
        return ClientConfig(**config)
    except ValidationError as ex:
        raise InvalidConfigurationError(str(ex)) from ex


def config_dict(config: ClientConfig) -> Dict[str, Any]:
    """Configuration as plain values, suitable for logging"""
    return {
        "address": config.address,
        "prefix": config.prefix,
        "tag_format": str(config.tag_format),
        "tags": [list(tag) for tag in config.tags],
    }
