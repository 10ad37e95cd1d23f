"""
statter - StatsD client

One stat per datagram, sent to a single collector. Tags are encoded with one
of three dialects chosen at construction, see statter.encoder.

Calling code is expected to keep a Statter around and call it without
checking whether stats are actually enabled:

    statter = client_or_null({"address": "127.0.0.1:8125", "prefix": "myapp"})
    statter.inc("requests", 1)
    statter.close()

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import datetime
import enum
import logging
import random
from typing import Any, Callable, Mapping, Optional, Union

from statter import encoder
from statter.common import MetricKind, StrEnum, TagsArg, merge_tags, normalize_tags
from statter.config import ClientConfig, config_dict, load_config
from statter.errors import InvalidConfigurationError, TransportError
from statter.transport import UdpTransport

LOG = logging.getLogger(__name__)


@enum.unique
class ClientState(StrEnum):
    Absent = "absent"
    Active = "active"
    Closed = "closed"


class Statter:
    """Interface for StatsD clients; every operation is a no-op unless overridden"""
    @property
    def state(self) -> ClientState:
        return ClientState.Absent

    def gauge(self, stat: str, value: float, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def gauge_delta(self, stat: str, value: int, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def gauge_float_delta(self, stat: str, value: float, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def inc(self, stat: str, value: int = 1, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def dec(self, stat: str, value: int = 1, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def timing(self, stat: str, value: int, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def timing_duration(self, stat: str, value: datetime.timedelta, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def set(self, stat: str, value: str, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def set_int(self, stat: str, value: int, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def set_float(self, stat: str, value: float, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def histogram(self, stat: str, value: float, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def raw(self, stat: str, value: str, rate: float = 1.0, tags: TagsArg = None) -> None:
        pass

    def unexpected_exception(self, ex: Exception, where: str, tags: TagsArg = None) -> None:
        pass

    def new_sub_statter(self, sub_prefix: str) -> "Statter":
        return self

    def close(self) -> None:
        pass

    def __enter__(self) -> "Statter":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()


class NullStatter(Statter):
    """Stand-in for a client that could not be created, sends nothing and never raises"""


NULL_STATTER = NullStatter()


def random_sampler(rate: float) -> bool:
    return random.random() < rate


def _negated_integer(value) -> int:
    return -encoder.require_integer(value)


class StatsClient(Statter):
    def __init__(
        self,
        config: Union[ClientConfig, Mapping[str, Any]],
        transport: Optional[UdpTransport] = None,
        *,
        parent: Optional["StatsClient"] = None
    ):
        self.config = load_config(config)
        self._transport = transport if transport is not None else UdpTransport.open(self.config.address)
        self._parent = parent
        self._closed = False
        self._prefix = self.config.prefix
        self._tag_format = self.config.tag_format
        self._tags = self.config.tags
        self._sampler = self.config.sampler

    @property
    def state(self) -> ClientState:
        if self._closed:
            return ClientState.Closed
        if self._parent is not None and self._parent.state != ClientState.Active:
            return ClientState.Closed
        return ClientState.Active

    def full_name(self, stat: str) -> str:
        if self._prefix:
            return "{}.{}".format(self._prefix, stat)
        return stat

    def gauge(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Gauge, value, rate, tags, encoder.require_number)

    def gauge_delta(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.GaugeDelta, value, rate, tags, encoder.require_integer)

    def gauge_float_delta(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.GaugeDelta, value, rate, tags, encoder.require_number)

    def inc(self, stat, value=1, rate=1.0, tags=None):
        self._send(stat, MetricKind.Counter, value, rate, tags, encoder.require_integer)

    def dec(self, stat, value=1, rate=1.0, tags=None):
        self._send(stat, MetricKind.Counter, value, rate, tags, _negated_integer)

    def timing(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Timing, value, rate, tags, encoder.require_integer)

    def timing_duration(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Timing, value, rate, tags, encoder.require_duration)

    def set(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Set, value, rate, tags, encoder.require_string)

    def set_int(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Set, value, rate, tags, encoder.require_integer)

    def set_float(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Set, value, rate, tags, encoder.require_number)

    def histogram(self, stat, value, rate=1.0, tags=None):
        self._send(stat, MetricKind.Histogram, value, rate, tags, encoder.require_number)

    def raw(self, stat, value, rate=1.0, tags=None):
        if self.state != ClientState.Active:
            return
        data = encoder.encode_raw(self.full_name(stat), value, rate, self._merged_tags(tags), self._tag_format)
        self._write(data, rate)

    def unexpected_exception(self, ex, where, tags=None):
        all_tags = merge_tags(
            normalize_tags({
                "exception": ex.__class__.__name__,
                "where": where,
            }),
            encoder.encodable_tags(tags),
        )
        self.inc("exception", tags=all_tags)

    def new_sub_statter(self, sub_prefix: str) -> Statter:
        """Client sharing this client's socket, with sub_prefix appended to the prefix"""
        if self.state != ClientState.Active:
            return NULL_STATTER
        prefix = self.full_name(sub_prefix) if sub_prefix else self._prefix
        return StatsClient(self.config.model_copy(update={"prefix": prefix}), self._transport, parent=self)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        # sub-statters share the root client's socket
        if self._parent is None:
            LOG.debug("Closing statsd client for %r", self.config.address)
            self._transport.close()

    def _merged_tags(self, tags: TagsArg):
        return merge_tags(self._tags, encoder.encodable_tags(tags))

    def _send(self, stat: str, kind: MetricKind, value, rate: float, tags: TagsArg, check: Callable) -> None:
        if self.state != ClientState.Active:
            return
        data = encoder.encode(self.full_name(stat), kind, check(value), rate, self._merged_tags(tags), self._tag_format)
        self._write(data, rate)

    def _write(self, data: bytes, rate: float) -> None:
        if self._sampler is not None and rate < encoder.NO_SAMPLING and not self._sampler(rate):
            return
        try:
            self._transport.send(data)
        except TransportError:
            if self.state != ClientState.Active:
                # closed while sending
                return
            raise


def new_client(address: str, prefix: str = "") -> StatsClient:
    return new_client_with_config({"address": address, "prefix": prefix})


def new_client_with_config(config: Union[ClientConfig, Mapping[str, Any]]) -> StatsClient:
    config = load_config(config)
    client = StatsClient(config)
    LOG.debug("Initialized statsd client: %r", config_dict(config))
    return client


def client_or_null(config: Union[ClientConfig, Mapping[str, Any]]) -> Statter:
    """Create a client, falling back to NULL_STATTER if the configuration is unusable"""
    try:
        return new_client_with_config(config)
    except InvalidConfigurationError as ex:
        LOG.warning("Unable to initialize statsd client, stats are disabled: %s", ex)
        return NULL_STATTER
