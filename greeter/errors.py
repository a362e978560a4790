"""Error types raised while handling a greeting request."""


class GreeterError(Exception):
    """Base class for errors that end a request or the process."""


class ConfigError(GreeterError):
    """Required configuration is missing, e.g. the weather API key."""


class UpstreamError(GreeterError):
    """A third-party API failed or returned a body we could not use."""


class TransportError(GreeterError):
    """The server could not bind its listening socket."""
