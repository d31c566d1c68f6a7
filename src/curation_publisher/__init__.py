from .config import PublisherSettings
from .domain_types import (
    CorrelationMap,
    EndpointKind,
    PhaseTally,
    PublishResult,
    ResourceFailure,
    ResourceFile,
    ResourceRole,
    ResourceSet,
    RunStatus,
    RunSummary,
)
from .errors import (
    ConfigurationError,
    DirectoryUnavailable,
    IdentifierMissing,
    MalformedResource,
    NoResourcesFound,
    PublisherError,
    RemoteRejection,
    ResourceUnreadable,
    TransportFailure,
    UnresolvedDependency,
)
from .http_publisher_client import HttpPublisherClient
from .identifier_resolver import IdentifierResolver
from .orchestrator import PublicationOrchestrator
from .publisher_client import FakePublisherClient, PublisherClient
from .resource_locator import ResourceLocator

__all__ = [
    "ConfigurationError",
    "CorrelationMap",
    "DirectoryUnavailable",
    "EndpointKind",
    "FakePublisherClient",
    "HttpPublisherClient",
    "IdentifierMissing",
    "IdentifierResolver",
    "MalformedResource",
    "NoResourcesFound",
    "PhaseTally",
    "PublicationOrchestrator",
    "PublishResult",
    "PublisherClient",
    "PublisherError",
    "PublisherSettings",
    "RemoteRejection",
    "ResourceFailure",
    "ResourceFile",
    "ResourceLocator",
    "ResourceRole",
    "ResourceSet",
    "ResourceUnreadable",
    "RunStatus",
    "RunSummary",
    "TransportFailure",
    "UnresolvedDependency",
]
