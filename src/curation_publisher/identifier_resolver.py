"""Injects resolved condition identifiers into policy documents."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any

import structlog

from .domain_types import CorrelationMap, ResourceFile
from .errors import MalformedResource, ResourceUnreadable, UnresolvedDependency

logger = structlog.get_logger(__name__)

CONDITION_ID_FIELD = "condition_id"

_ID_PATTERN = re.compile(r'"id"\s*:\s*"([^"]*)"')
_CONDITION_ID_PATTERN = re.compile(r'("condition_id"\s*:\s*)"[^"]*"')


def _coerce_identifier(value: Any) -> str | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str) and value:
        return value
    return None


def read_identifier(text: str | None) -> str | None:
    """Return the top-level ``id`` of a JSON document, if any.

    Falls back to a pattern match only when the text is not valid JSON.
    """
    if not text or not text.strip():
        return None
    try:
        document = json.loads(text)
    except json.JSONDecodeError:
        match = _ID_PATTERN.search(text)
        if match is None:
            return None
        return match.group(1) or None
    except (ValueError, RecursionError):
        # Valid JSON the decoder refuses: oversized integers, deep nesting
        return None
    if not isinstance(document, dict):
        return None
    return _coerce_identifier(document.get("id"))


def inject_structured(content: str, condition_id: str) -> str:
    document = json.loads(content)
    if not isinstance(document, dict):
        raise MalformedResource(
            "Policy document is not a JSON object",
            details={"type": type(document).__name__},
        )
    document[CONDITION_ID_FIELD] = condition_id
    return json.dumps(document, indent=2)


def inject_by_substitution(content: str, condition_id: str) -> str:
    matches = _CONDITION_ID_PATTERN.findall(content)
    if len(matches) != 1:
        raise MalformedResource(
            f"Expected exactly one {CONDITION_ID_FIELD} field, found {len(matches)}",
            details={"occurrences": len(matches)},
        )
    replacement = json.dumps(condition_id)
    return _CONDITION_ID_PATTERN.sub(lambda m: m.group(1) + replacement, content, count=1)


@dataclass(frozen=True)
class IdentifierResolver:
    def resolve(self, policy: ResourceFile, correlation_map: CorrelationMap) -> str:
        condition_id = correlation_map.get(policy.base_name)
        if condition_id is None:
            raise UnresolvedDependency(
                f"No published condition matches policy '{policy.name}'",
                details={"base_name": policy.base_name, "available": list(correlation_map)},
            )

        try:
            content = policy.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            raise ResourceUnreadable(
                f"Cannot read policy '{policy.path}': {exc}",
                details={"path": str(policy.path)},
            ) from exc

        try:
            resolved = inject_structured(content, condition_id)
        except json.JSONDecodeError:
            logger.warning(
                "policy is not valid JSON, falling back to text substitution",
                path=str(policy.path),
            )
            resolved = inject_by_substitution(content, condition_id)
        except (ValueError, RecursionError) as exc:
            raise MalformedResource(
                f"Policy '{policy.name}' cannot be decoded: {type(exc).__name__}",
                details={"path": str(policy.path), "error": str(exc)},
            ) from exc

        logger.debug(
            "policy resolved",
            path=str(policy.path),
            base_name=policy.base_name,
            condition_id=condition_id,
        )
        return resolved
