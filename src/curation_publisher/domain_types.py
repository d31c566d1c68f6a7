from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterator, Sequence

import structlog

from .errors import UnresolvedDependency

logger = structlog.get_logger(__name__)


class ResourceRole(str, Enum):
    CONDITION = "condition"
    POLICY = "policy"


class EndpointKind(str, Enum):
    CONDITION = "condition"
    POLICY = "policy"


class RunStatus(str, Enum):
    SUCCEEDED = "succeeded"
    DEGRADED = "degraded"
    EMPTY = "empty"


@dataclass(frozen=True)
class ResourceFile:
    path: Path
    role: ResourceRole
    base_name: str

    @property
    def name(self) -> str:
        return self.path.name

    def read_text(self) -> str:
        return self.path.read_text(encoding="utf-8")


@dataclass(frozen=True)
class ResourceSet:
    conditions: Sequence[ResourceFile]
    policies: Sequence[ResourceFile]

    @property
    def is_empty(self) -> bool:
        return not self.conditions and not self.policies


@dataclass(frozen=True)
class PublishResult:
    success: bool
    status_code: int | None
    resource: ResourceFile | None = None
    assigned_id: str | None = None
    error_code: str | None = None
    error_detail: str | None = None


@dataclass(frozen=True)
class ResourceFailure:
    resource: ResourceFile
    cause: str
    detail: str
    status_code: int | None = None


class CorrelationMap:
    """base_name -> condition id, written during phase one only.

    Writes are serialized so concurrent condition publications can record
    their identifiers. Once frozen the map is read-only.
    """

    def __init__(self) -> None:
        self._ids: dict[str, str] = {}
        self._lock = threading.Lock()
        self._frozen = False

    def record(self, base_name: str, assigned_id: str) -> None:
        with self._lock:
            if self._frozen:
                raise RuntimeError("CorrelationMap is frozen; phase one has ended")
            previous = self._ids.get(base_name)
            if previous is not None and previous != assigned_id:
                logger.warning(
                    "condition id overwritten",
                    base_name=base_name,
                    previous_id=previous,
                    assigned_id=assigned_id,
                )
            self._ids[base_name] = assigned_id

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, base_name: str) -> str | None:
        return self._ids.get(base_name)

    def __contains__(self, base_name: object) -> bool:
        return base_name in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))


@dataclass
class PhaseTally:
    attempted: int = 0
    succeeded: list[PublishResult] = field(default_factory=list)
    failed: list[ResourceFailure] = field(default_factory=list)

    @property
    def success_count(self) -> int:
        return len(self.succeeded)

    @property
    def failure_count(self) -> int:
        return len(self.failed)


@dataclass
class RunSummary:
    directory: Path
    conditions: PhaseTally = field(default_factory=PhaseTally)
    policies: PhaseTally = field(default_factory=PhaseTally)
    correlated_names: tuple[str, ...] = ()
    empty: bool = False

    @property
    def unresolved(self) -> list[ResourceFailure]:
        return [f for f in self.policies.failed if f.cause == UnresolvedDependency.__name__]

    @property
    def failures(self) -> list[ResourceFailure]:
        return [*self.conditions.failed, *self.policies.failed]

    @property
    def status(self) -> RunStatus:
        if self.empty:
            return RunStatus.EMPTY
        if self.failures:
            return RunStatus.DEGRADED
        return RunStatus.SUCCEEDED
