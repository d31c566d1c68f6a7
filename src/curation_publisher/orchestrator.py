"""Two-phase publication: conditions first, then policies with resolved ids."""
from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Sequence, TypeVar

import structlog

from .domain_types import (
    CorrelationMap,
    EndpointKind,
    PhaseTally,
    PublishResult,
    ResourceFailure,
    ResourceFile,
    ResourceSet,
    RunSummary,
)
from .errors import (
    IdentifierMissing,
    NoResourcesFound,
    PublisherError,
    RemoteRejection,
    ResourceUnreadable,
)
from .identifier_resolver import IdentifierResolver
from .publisher_client import PublisherClient
from .resource_locator import ResourceLocator

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class PublicationOrchestrator:
    def __init__(
        self,
        client: PublisherClient,
        *,
        locator: ResourceLocator | None = None,
        resolver: IdentifierResolver | None = None,
        max_workers: int = 1,
    ) -> None:
        self.client = client
        self.locator = locator or ResourceLocator()
        self.resolver = resolver or IdentifierResolver()
        self.max_workers = max(1, max_workers)

    def plan(self, directory: str | os.PathLike[str]) -> ResourceSet:
        return self.locator.locate(directory)

    def run(self, directory: str | os.PathLike[str]) -> RunSummary:
        """
        Publish every condition, then every policy whose condition got an id.

        DirectoryUnavailable propagates; every per-resource error is recorded
        in the returned summary instead.
        """
        summary = RunSummary(directory=Path(directory))
        try:
            resources = self.plan(directory)
        except NoResourcesFound as exc:
            logger.warning("nothing to publish", reason=exc.message)
            summary.empty = True
            return summary

        correlation_map = CorrelationMap()

        logger.info("phase one: posting conditions", count=len(resources.conditions))
        self._run_phase(
            resources.conditions,
            self._publish_condition,
            summary.conditions,
            on_success=lambda resource, result: correlation_map.record(resource.base_name, result.assigned_id),
        )
        # Barrier: every condition submission has completed at this point
        correlation_map.freeze()
        summary.correlated_names = tuple(correlation_map)
        if summary.conditions.failure_count:
            logger.warning("phase one completed with errors", errors=summary.conditions.failure_count)
        else:
            logger.info("phase one completed", published=summary.conditions.success_count)

        logger.info("phase two: resolving and posting policies", count=len(resources.policies))
        self._run_phase(
            resources.policies,
            lambda resource: self._publish_policy(resource, correlation_map),
            summary.policies,
        )

        logger.info(
            "run finished",
            status=summary.status.value,
            conditions_ok=summary.conditions.success_count,
            conditions_failed=summary.conditions.failure_count,
            policies_ok=summary.policies.success_count,
            policies_failed=summary.policies.failure_count,
        )
        return summary

    def _run_phase(
        self,
        resources: Sequence[ResourceFile],
        work: Callable[[ResourceFile], PublishResult | ResourceFailure],
        tally: PhaseTally,
        on_success: Callable[[ResourceFile, PublishResult], None] | None = None,
    ) -> None:
        # Outcomes are walked in discovery order on this thread, so with
        # duplicate base names the last discovered file wins regardless of
        # which submission finished first.
        outcomes = self._map(work, resources)
        for resource, outcome in zip(resources, outcomes):
            tally.attempted += 1
            if isinstance(outcome, ResourceFailure):
                tally.failed.append(outcome)
                continue
            tally.succeeded.append(outcome)
            if on_success is not None:
                on_success(resource, outcome)

    def _map(self, work: Callable[[ResourceFile], T], resources: Sequence[ResourceFile]) -> list[T]:
        if self.max_workers == 1 or len(resources) < 2:
            return [work(resource) for resource in resources]
        # Executor.map yields in submission order and returns only once every
        # submission has finished.
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(pool.map(work, resources))

    def _publish_condition(self, resource: ResourceFile) -> PublishResult | ResourceFailure:
        log = logger.bind(condition=str(resource.path))
        try:
            content = resource.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            log.error("cannot read condition", error=str(exc))
            return ResourceFailure(resource=resource, cause=ResourceUnreadable.__name__, detail=str(exc))

        result = self.client.submit(content, EndpointKind.CONDITION, resource=resource)
        if not result.success or result.assigned_id is None:
            failure = _failure_from(resource, result)
            log.error("failed to post condition", cause=failure.cause, status_code=failure.status_code, detail=failure.detail)
            return failure

        log.info("condition posted", status_code=result.status_code, condition_id=result.assigned_id)
        return result

    def _publish_policy(
        self, resource: ResourceFile, correlation_map: CorrelationMap
    ) -> PublishResult | ResourceFailure:
        log = logger.bind(policy=str(resource.path))
        try:
            content = self.resolver.resolve(resource, correlation_map)
        except PublisherError as exc:
            log.error(
                "cannot resolve policy",
                cause=exc.error_code,
                detail=exc.message,
                available=exc.details.get("available"),
            )
            return ResourceFailure(resource=resource, cause=exc.error_code, detail=exc.message)

        result = self.client.submit(content, EndpointKind.POLICY, resource=resource)
        if not result.success:
            failure = _failure_from(resource, result)
            log.error("failed to post policy", cause=failure.cause, status_code=failure.status_code, detail=failure.detail)
            return failure

        log.info("policy posted", status_code=result.status_code)
        return result


def _failure_from(resource: ResourceFile, result: PublishResult) -> ResourceFailure:
    # An accepted condition without an id is still unusable for correlation
    default_cause = IdentifierMissing if result.success else RemoteRejection
    return ResourceFailure(
        resource=resource,
        cause=result.error_code or default_cause.__name__,
        detail=result.error_detail or "",
        status_code=result.status_code,
    )
