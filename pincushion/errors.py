"""Exception hierarchy shared by every pin-cushion module."""

from __future__ import annotations


class PinCushionError(Exception):
    """Base class for all pin-cushion errors."""

    kind = "error"


class FetchError(PinCushionError):
    """The feed could not be retrieved (unreachable or non-success status)."""

    kind = "fetch"


class ParseError(PinCushionError):
    """The feed body was not a readable item list."""

    kind = "parse"


class MissingContentError(PinCushionError):
    """A feed item carries no description at all."""

    kind = "missing-content"


class TransportError(PinCushionError):
    """A request failed at the network level after the asset was located."""

    kind = "transport"


class StorageError(PinCushionError):
    """Reading or writing local files failed."""

    kind = "storage"


class ConfigError(PinCushionError):
    kind = "config"


class NotInitializedError(ConfigError):
    """No configuration file exists yet; `pin-cushion init` has not been run."""

    kind = "uninitialized"
