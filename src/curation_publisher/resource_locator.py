from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import structlog

from .domain_types import ResourceFile, ResourceRole, ResourceSet
from .errors import DirectoryUnavailable, NoResourcesFound

logger = structlog.get_logger(__name__)

CONDITION_SUFFIX = "-condition.json"
POLICY_SUFFIX = "-policy.json"


@dataclass(frozen=True)
class ResourceLocator:
    """Discovers condition and policy files below a directory."""

    condition_suffix: str = CONDITION_SUFFIX
    policy_suffix: str = POLICY_SUFFIX

    def classify(self, path: Path) -> ResourceFile | None:
        name = path.name
        for role, suffix in (
            (ResourceRole.CONDITION, self.condition_suffix),
            (ResourceRole.POLICY, self.policy_suffix),
        ):
            if name.endswith(suffix) and len(name) > len(suffix):
                return ResourceFile(path=path, role=role, base_name=name[: -len(suffix)])
        return None

    def locate(self, directory: str | os.PathLike[str]) -> ResourceSet:
        root = Path(directory)
        if not root.is_dir():
            raise DirectoryUnavailable(
                f"Directory '{root}' does not exist",
                details={"directory": str(root)},
            )

        conditions: list[ResourceFile] = []
        policies: list[ResourceFile] = []
        for path in self._walk(root):
            resource = self.classify(path)
            if resource is None:
                continue
            if resource.role is ResourceRole.CONDITION:
                conditions.append(resource)
            else:
                policies.append(resource)

        if not conditions and not policies:
            raise NoResourcesFound(
                f"No condition or policy files found in '{root}'",
                details={"directory": str(root)},
            )

        self._warn_on_collisions(conditions)
        self._warn_on_collisions(policies)
        logger.info(
            "resources located",
            directory=str(root),
            conditions=len(conditions),
            policies=len(policies),
        )
        return ResourceSet(conditions=tuple(conditions), policies=tuple(policies))

    def _walk(self, root: Path) -> list[Path]:
        def on_error(exc: OSError) -> None:
            raise exc

        found: list[Path] = []
        try:
            for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
                dirnames.sort()
                for filename in filenames:
                    path = Path(dirpath) / filename
                    if path.is_file():
                        found.append(path)
        except OSError as exc:
            raise DirectoryUnavailable(
                f"Directory '{root}' cannot be read: {exc}",
                details={"directory": str(root)},
            ) from exc
        # Deterministic order for repeatable dry runs
        return sorted(found, key=lambda p: p.relative_to(root).as_posix())

    @staticmethod
    def _warn_on_collisions(resources: list[ResourceFile]) -> None:
        seen: dict[str, ResourceFile] = {}
        for resource in resources:
            earlier = seen.get(resource.base_name)
            if earlier is not None:
                logger.warning(
                    "duplicate base name, last match wins",
                    role=resource.role.value,
                    base_name=resource.base_name,
                    shadowed=str(earlier.path),
                    path=str(resource.path),
                )
            seen[resource.base_name] = resource
