from __future__ import annotations

from typing import Mapping, Optional

import httpx
import structlog

from .domain_types import EndpointKind, PublishResult, ResourceFile
from .errors import IdentifierMissing, RemoteRejection, TransportFailure
from .identifier_resolver import read_identifier

logger = structlog.get_logger(__name__)

ACCEPTED_STATUSES = frozenset({200, 201})

DEFAULT_ENDPOINTS: Mapping[EndpointKind, str] = {
    EndpointKind.CONDITION: "/xray/api/v1/curation/conditions",
    EndpointKind.POLICY: "/xray/api/v1/curation/policies",
}


class HttpPublisherClient:
    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout_secs: float = 30.0,
        endpoints: Mapping[EndpointKind, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout_secs
        self.endpoints = dict(endpoints or DEFAULT_ENDPOINTS)
        self.headers = {"Content-Type": "application/json"}
        if self.token:
            self.headers["Authorization"] = f"Bearer {self.token}"

    def url_for(self, endpoint_kind: EndpointKind) -> str:
        return f"{self.base_url}{self.endpoints[endpoint_kind]}"

    def submit(
        self,
        content: str,
        endpoint_kind: EndpointKind,
        *,
        resource: ResourceFile | None = None,
    ) -> PublishResult:
        """
        POST one resource document. Never raises for per-resource failures.

        Args:
            content: Serialized JSON document sent verbatim as the body
            endpoint_kind: Which curation endpoint receives the document
            resource: File the content came from, carried into the result

        Returns:
            PublishResult; condition successes carry the assigned id.
        """
        url = self.url_for(endpoint_kind)
        log = logger.bind(endpoint=endpoint_kind.value, resource=resource.name if resource else None)
        log.debug("submitting resource", url=url, size=len(content))

        try:
            with httpx.Client(timeout=self.timeout) as client:
                resp = client.post(url, content=content.encode("utf-8"), headers=self.headers)
        except httpx.TransportError as exc:
            log.error("transport failure", error=str(exc))
            return PublishResult(
                success=False,
                status_code=None,
                resource=resource,
                error_code=TransportFailure.__name__,
                error_detail=f"{type(exc).__name__}: {exc}",
            )

        body = resp.text or ""
        log.info("response received", status_code=resp.status_code)
        log.debug("response body", body=body)

        if resp.status_code not in ACCEPTED_STATUSES:
            return PublishResult(
                success=False,
                status_code=resp.status_code,
                resource=resource,
                error_code=RemoteRejection.__name__,
                error_detail=body or f"HTTP {resp.status_code}",
            )

        if endpoint_kind is not EndpointKind.CONDITION:
            return PublishResult(success=True, status_code=resp.status_code, resource=resource)

        assigned_id = read_identifier(body)
        if assigned_id is None:
            # Some deployments echo a client-supplied id instead of generating one
            assigned_id = read_identifier(content)
            if assigned_id is not None:
                log.debug("using id from submitted document", assigned_id=assigned_id)
        if assigned_id is None:
            return PublishResult(
                success=False,
                status_code=resp.status_code,
                resource=resource,
                error_code=IdentifierMissing.__name__,
                error_detail="Neither the response nor the document carries an id",
            )
        return PublishResult(
            success=True,
            status_code=resp.status_code,
            resource=resource,
            assigned_id=assigned_id,
        )
