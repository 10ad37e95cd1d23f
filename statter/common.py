"""
statter - common types and utility functions

Copyright (c) 2016 Ohmu Ltd
See LICENSE for details
"""
import enum
from typing import Iterable, Mapping, NamedTuple, Optional, Tuple, Union


class StrEnum(str, enum.Enum):
    def __str__(self):
        return str(self.value)


@enum.unique
class TagFormat(StrEnum):
    # datadog format: metric.name:value|type|@sample_rate|#tag1:value,tag2
    SuffixOctothorpe = "datadog"
    # telegraf format: "user.logins,service=payroll,region=us-west:1|c"
    InfixComma = "telegraf"
    # graphite format: "user.logins;service=payroll;region=us-west:1|c"
    InfixSemicolon = "graphite"


@enum.unique
class MetricKind(StrEnum):
    Counter = "counter"
    Gauge = "gauge"
    GaugeDelta = "gauge_delta"
    Timing = "timing"
    Set = "set"
    Histogram = "histogram"

    @property
    def suffix(self) -> str:
        return METRIC_SUFFIXES[self]


METRIC_SUFFIXES = {
    MetricKind.Counter: "c",
    MetricKind.Gauge: "g",
    MetricKind.GaugeDelta: "g",
    MetricKind.Timing: "ms",
    MetricKind.Set: "s",
    MetricKind.Histogram: "h",
}


class Tag(NamedTuple):
    key: str
    value: Optional[str]


Tags = Tuple[Tag, ...]
TagsArg = Optional[Union[Mapping[str, Optional[str]], Iterable[Tuple[str, Optional[str]]]]]


def normalize_tags(tags: TagsArg) -> Tags:
    """Turn a mapping or an iterable of pairs into a tuple of Tags, keeping the given order"""
    if not tags:
        return ()
    if isinstance(tags, Mapping):
        items = list(tags.items())
    elif isinstance(tags, (str, bytes)) or not isinstance(tags, Iterable):
        raise ValueError("Tags must be a mapping or a sequence of (key, value) pairs, got {!r}".format(tags))
    else:
        items = list(tags)
    for item in items:
        if isinstance(item, (str, bytes)) or not isinstance(item, (tuple, list)) or len(item) != 2:
            raise ValueError("Tag must be a (key, value) pair, got {!r}".format(item))
    return tuple(Tag(str(key), None if value is None else str(value)) for key, value in items)


def merge_tags(default_tags: Tags, tags: Tags) -> Tags:
    """Default tags go first unless overridden by a tag of the same key, call tags follow in order"""
    if not default_tags:
        return tags
    if not tags:
        return default_tags
    overridden = {tag.key for tag in tags}
    return tuple(tag for tag in default_tags if tag.key not in overridden) + tags
