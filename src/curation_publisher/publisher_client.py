from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from typing import Protocol

from .domain_types import EndpointKind, PublishResult, ResourceFile
from .identifier_resolver import read_identifier


class PublisherClient(Protocol):
    def submit(
        self,
        content: str,
        endpoint_kind: EndpointKind,
        *,
        resource: ResourceFile | None = None,
    ) -> PublishResult: ...


@dataclass
class FakePublisherClient:
    """Accepts everything without network I/O and hands out synthetic ids."""

    id_prefix: str = "dry-run"
    submissions: list[tuple[EndpointKind, str]] = field(default_factory=list)
    _counter: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def submit(
        self,
        content: str,
        endpoint_kind: EndpointKind,
        *,
        resource: ResourceFile | None = None,
    ) -> PublishResult:
        with self._lock:
            self.submissions.append((endpoint_kind, content))
            seq = next(self._counter)
        if endpoint_kind is not EndpointKind.CONDITION:
            return PublishResult(success=True, status_code=201, resource=resource)
        # Client-supplied ids are echoed back like the real API does
        assigned = read_identifier(content) or f"{self.id_prefix}-{seq}"
        return PublishResult(success=True, status_code=201, resource=resource, assigned_id=assigned)
