from .client import (
    NULL_STATTER, ClientState, NullStatter, Statter, StatsClient, client_or_null, new_client, new_client_with_config,
    random_sampler
)
from .common import MetricKind, Tag, TagFormat
from .config import ClientConfig
from .errors import EncodingError, Error, InvalidConfigurationError, TransportError
from .version import __version__
