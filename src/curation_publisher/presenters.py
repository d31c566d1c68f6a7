from __future__ import annotations

from typing import Iterable

from .domain_types import ResourceFailure, ResourceFile, ResourceSet, RunStatus, RunSummary


def _file_lines(title: str, files: Iterable[ResourceFile]) -> list[str]:
    files = list(files)
    if not files:
        return []
    return [f"  {title} ({len(files)}):", *(f"    - {f.name}" for f in files)]


def render_plan(resources: ResourceSet) -> str:
    lines = ["Files to be processed:"]
    lines.extend(_file_lines("Condition files", resources.conditions))
    lines.extend(_file_lines("Policy files", resources.policies))
    return "\n".join(lines)


def render_failure(failure: ResourceFailure) -> str:
    status = f" (HTTP {failure.status_code})" if failure.status_code is not None else ""
    detail = f": {failure.detail}" if failure.detail else ""
    return f"- {failure.resource.path} [{failure.cause}]{status}{detail}"


def render_summary(summary: RunSummary) -> str:
    if summary.status is RunStatus.EMPTY:
        return f"No condition or policy files found in '{summary.directory}'"

    conditions, policies = summary.conditions, summary.policies
    lines = [
        f"Conditions: {conditions.success_count} posted, {conditions.failure_count} failed",
        f"Policies:   {policies.success_count} posted, {policies.failure_count} failed "
        f"({len(summary.unresolved)} unresolved)",
    ]
    failures = summary.failures
    if failures:
        lines.append("Failed or unresolved resources:")
        lines.extend(render_failure(f) for f in failures)

    total = conditions.success_count + policies.success_count
    if summary.status is RunStatus.SUCCEEDED:
        lines.append(f"All files processed successfully! ({total} total)")
    else:
        lines.append(f"Processing completed with {len(failures)} errors ({total} successful)")
    return "\n".join(lines)
