"""
statter - exception classes

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""


class Error(Exception):
    """Generic statter exception"""


class InvalidConfigurationError(Error):
    """Invalid configuration"""


class EncodingError(Error, ValueError):
    """Value can't be encoded as the requested metric type"""


class TransportError(Error):
    """Sending a packet failed"""
