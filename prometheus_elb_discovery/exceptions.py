"""Custom exception hierarchy for the ELB discovery job."""


class DiscoveryError(Exception):
    """Base exception for all discovery errors."""

    kind = "discovery"


class ConfigError(DiscoveryError):
    """Invalid or missing configuration."""

    kind = "config"


class LookupFailedError(DiscoveryError):
    """A load-balancer or inventory lookup failed."""

    kind = "lookup"

    def __init__(self, message: str, operation: str | None = None):
        super().__init__(message)
        self.operation = operation


class EncodeError(DiscoveryError):
    """The target group document could not be encoded."""

    kind = "encode"


class PublishError(DiscoveryError):
    """The target group document could not be written to its destination."""

    kind = "publish"

    def __init__(self, message: str, dest: str | None = None):
        super().__init__(message)
        self.dest = dest
