"""Scope grouping and ordering of flat artifact collections."""

import logging
from typing import Dict, Iterable, List, Tuple

from .models import Artifact, ResolvedProject, Scope, REPORT_SCOPE_ORDER

logger = logging.getLogger(__name__)


def artifact_sort_key(artifact: Artifact) -> Tuple:
    """Sort key putting optional artifacts last, then natural coordinate order."""
    return (artifact.optional, artifact.coordinate_key())


def sort_artifacts(artifacts: Iterable[Artifact]) -> List[Artifact]:
    """Return a new list sorted with non-optional artifacts first, each group by coordinates."""
    return sorted(artifacts, key=artifact_sort_key)


def group_by_scope(artifacts: Iterable[Artifact]) -> Dict[Scope, List[Artifact]]:
    """
    Partition artifacts into scope buckets.

    Each bucket is sorted independently and empty buckets are omitted.
    The returned mapping iterates in report order: compile, runtime,
    test, provided, system.
    """
    buckets: Dict[Scope, List[Artifact]] = {scope: [] for scope in REPORT_SCOPE_ORDER}
    for artifact in artifacts:
        buckets[artifact.scope].append(artifact)

    grouped = {}
    for scope, bucket in buckets.items():
        if bucket:
            grouped[scope] = sort_artifacts(bucket)
            logger.debug(f"Scope {scope.value}: {len(bucket)} artifacts")
    return grouped


def dependencies_by_scope(project: ResolvedProject, transitive: bool) -> Dict[Scope, List[Artifact]]:
    """Group either the direct or the transitive dependencies of a project by scope."""
    artifacts = project.transitive if transitive else project.direct
    return group_by_scope(artifacts)


def has_classifier(artifacts: Iterable[Artifact]) -> bool:
    return any(artifact.classifier for artifact in artifacts)


def has_optional(artifacts: Iterable[Artifact]) -> bool:
    return any(artifact.optional for artifact in artifacts)
