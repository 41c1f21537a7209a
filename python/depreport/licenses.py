"""Grouping of dependency projects by declared license."""

import logging
from typing import Dict, Iterable, List, Tuple

from .exceptions import ProjectLookupError
from .messages import get_string
from .models import Artifact, Scope

logger = logging.getLogger(__name__)

NO_LICENSE_KEY = get_string("report.dependencies.graph.tables.unknown")


class LicenseGroups:
    """Explicit mapping of license name to the project names declaring it, in insertion order."""

    def __init__(self):
        self._groups: Dict[str, List[str]] = {}

    def add(self, license_name: str, project_name: str) -> None:
        """Append a project to a license bucket, creating the bucket if needed."""
        self._groups.setdefault(license_name, []).append(project_name)

    def get(self, license_name: str) -> List[str]:
        return list(self._groups.get(license_name, []))

    def keys(self) -> List[str]:
        return list(self._groups)

    def __contains__(self, license_name: str) -> bool:
        return license_name in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def sorted_items(self) -> List[Tuple[str, List[str]]]:
        """Return (license, projects) pairs with each project list sorted, duplicates kept."""
        return [(name, sorted(projects)) for name, projects in self._groups.items()]

    def as_dict(self) -> Dict[str, List[str]]:
        return dict(self.sorted_items())


class LicenseGrouper:
    """
    Builds license groups from the project metadata of each artifact.

    Args:
        project_lookup: Collaborator with a ``project_for(artifact)`` method
        no_license_key: Bucket receiving projects that declare no license
    """

    def __init__(self, project_lookup, no_license_key: str = NO_LICENSE_KEY):
        self.project_lookup = project_lookup
        self.no_license_key = no_license_key

    def group(self, artifacts: Iterable[Artifact]) -> LicenseGroups:
        groups = LicenseGroups()
        for artifact in artifacts:
            if artifact.scope == Scope.SYSTEM:
                continue
            try:
                project = self.project_lookup.project_for(artifact)
            except ProjectLookupError as e:
                logger.error(f"Skipping {artifact.id} in license listing: {e}")
                continue

            if not project.licenses:
                groups.add(self.no_license_key, project.name)
                continue
            for license_entry in project.licenses:
                groups.add(license_entry.name, project.name)

        logger.info(f"Grouped dependencies under {len(groups)} licenses")
        return groups


def license_display_name(license_name: str) -> str:
    """Human label for a license key; empty names become the unnamed label."""
    if not license_name:
        return get_string("report.dependencies.unamed")
    return license_name
