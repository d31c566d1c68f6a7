"""Error taxonomy for a publication run."""
from __future__ import annotations

from typing import Any, Mapping


class PublisherError(Exception):
    """Base class for every error raised by the publisher."""

    def __init__(self, message: str, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = type(self).__name__
        self.details: dict[str, Any] = dict(details or {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"{self.error_code}: {self.message}"


# Environment-level errors: fatal, raised before any network activity.


class ConfigurationError(PublisherError):
    """Missing or unusable credentials / endpoint settings."""


class DirectoryUnavailable(PublisherError):
    """The resource directory is missing or cannot be listed."""


class NoResourcesFound(PublisherError):
    """The directory holds neither condition nor policy files."""


# Per-resource errors: recorded in the run summary, never abort the batch.
# The publisher reports the first three as classification codes
# (PublishResult.error_code) instead of raising them.


class TransportFailure(PublisherError):
    """Classification code: timeout, refused connection, DNS failure."""


class RemoteRejection(PublisherError):
    """Classification code: the API answered with a status other than 200/201."""


class IdentifierMissing(PublisherError):
    """Classification code: a condition was accepted but carries no identifier."""


class UnresolvedDependency(PublisherError):
    """No identifier is known for the condition a policy depends on."""


class ResourceUnreadable(PublisherError):
    """A resource file could not be read or decoded."""


class MalformedResource(PublisherError):
    """A policy document cannot receive a condition identifier."""
