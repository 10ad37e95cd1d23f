"""
statter - StatsD packet encoding

Turns a single metric observation into the bytes of one UDP datagram:

  <name>:<value>|<type>[|@<rate>]

Tags are embedded according to the configured dialect:

  datadog:  metric.name:value|type|@sample_rate|#tag1:value,tag2
            http://docs.datadoghq.com/guides/dogstatsd/#datagram-format
  telegraf: metric.name,tag1=value,tag2=value:value|type|@sample_rate
            https://github.com/influxdata/telegraf/tree/master/plugins/inputs/statsd
  graphite: metric.name;tag1=value;tag2=value:value|type|@sample_rate
            https://graphite.readthedocs.io/en/latest/tags.html

Nothing here does I/O or keeps state.

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import datetime
import decimal
import math
import numbers
from typing import Callable, Dict, Union

from statter.common import MetricKind, TagFormat, Tags, TagsArg, normalize_tags
from statter.errors import EncodingError

NO_SAMPLING = 1.0

Value = Union[int, float, str, datetime.timedelta]

_MILLISECOND = datetime.timedelta(milliseconds=1)


def require_integer(value) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise EncodingError("Expected an integer value, got {!r}".format(value))
    return int(value)


def require_number(value) -> Union[int, float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise EncodingError("Expected a numeric value, got {!r}".format(value))
    if isinstance(value, numbers.Integral):
        return int(value)
    value = float(value)
    if not math.isfinite(value):
        raise EncodingError("Can't send non-finite value {!r}".format(value))
    return value


def require_duration(value) -> datetime.timedelta:
    if not isinstance(value, datetime.timedelta):
        raise EncodingError("Expected a timedelta value, got {!r}".format(value))
    return value


def require_string(value) -> str:
    if not isinstance(value, str):
        raise EncodingError("Expected a string value, got {!r}".format(value))
    return value


def format_number(value: Union[int, float]) -> str:
    """Shortest representation that round-trips, never in exponent notation"""
    if isinstance(value, int):
        return str(value)
    text = format(decimal.Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_signed_number(value: Union[int, float]) -> str:
    text = format_number(value)
    if text.startswith("-"):
        return text
    return "+" + text


def format_duration(value: datetime.timedelta) -> str:
    return format_number(value / _MILLISECOND)


def format_value(kind: MetricKind, value: Value) -> str:
    if kind == MetricKind.Counter:
        return format_number(require_integer(value))
    if kind == MetricKind.GaugeDelta:
        return format_signed_number(require_number(value))
    if kind == MetricKind.Timing:
        if isinstance(value, datetime.timedelta):
            return format_duration(value)
        return format_number(require_integer(value))
    if kind == MetricKind.Set:
        if isinstance(value, str):
            return value
        return format_number(require_number(value))
    # Gauge, Histogram
    return format_number(require_number(value))


def encodable_tags(tags: TagsArg) -> Tags:
    try:
        return normalize_tags(tags)
    except ValueError as ex:
        raise EncodingError(str(ex)) from ex


def format_rate(rate: float) -> str:
    if isinstance(rate, bool) or not isinstance(rate, numbers.Real):
        raise EncodingError("Sample rate must be a number, got {!r}".format(rate))
    if rate == NO_SAMPLING:
        return ""
    if not 0 < rate < NO_SAMPLING:
        raise EncodingError("Sample rate must be within (0, 1], got {!r}".format(rate))
    return "|@" + format_number(float(rate))


def suffix_octothorpe_line(name: str, body: str, tags: Tags) -> str:
    if not tags:
        return "{}:{}".format(name, body)
    tag_text = ",".join(tag.key if tag.value is None else "{}:{}".format(tag.key, tag.value) for tag in tags)
    return "{}:{}|#{}".format(name, body, tag_text)


def _infix_line(separator: str, name: str, body: str, tags: Tags) -> str:
    missing = [tag.key for tag in tags if tag.value is None]
    if missing:
        raise EncodingError("Tags without values are not supported in this format: {!r}".format(missing))
    parts = [name]
    parts.extend("{}={}".format(tag.key, tag.value) for tag in tags)
    return "{}:{}".format(separator.join(parts), body)


def infix_comma_line(name: str, body: str, tags: Tags) -> str:
    return _infix_line(",", name, body, tags)


def infix_semicolon_line(name: str, body: str, tags: Tags) -> str:
    return _infix_line(";", name, body, tags)


LINE_FORMATTERS: Dict[TagFormat, Callable[[str, str, Tags], str]] = {
    TagFormat.SuffixOctothorpe: suffix_octothorpe_line,
    TagFormat.InfixComma: infix_comma_line,
    TagFormat.InfixSemicolon: infix_semicolon_line,
}


def encode_raw(
    full_name: str,
    value: str,
    rate: float = NO_SAMPLING,
    tags: TagsArg = None,
    tag_format: TagFormat = TagFormat.SuffixOctothorpe
) -> bytes:
    """Build a packet from an already rendered value such as "12|c" """
    body = require_string(value) + format_rate(rate)
    line = LINE_FORMATTERS[TagFormat(tag_format)](full_name, body, encodable_tags(tags))
    return line.encode("utf-8")


def encode(
    full_name: str,
    kind: MetricKind,
    value: Value,
    rate: float = NO_SAMPLING,
    tags: TagsArg = None,
    tag_format: TagFormat = TagFormat.SuffixOctothorpe
) -> bytes:
    kind = MetricKind(kind)
    return encode_raw(full_name, "{}|{}".format(format_value(kind, value), kind.suffix), rate, tags, tag_format)
