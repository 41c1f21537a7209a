"""Project metadata lookup for dependency artifacts."""

import logging
import threading
import xml.etree.ElementTree as ET
from typing import Dict, List, Optional, Tuple, Union

from .exceptions import ProjectLookupError
from .models import Artifact, License, ProjectMetadata, Repository
from .repo_client import pom_artifact

logger = logging.getLogger(__name__)

MAX_PARENT_DEPTH = 10


def _local_name(tag: str) -> str:
    return tag.split('}')[-1] if '}' in tag else tag


def get_child(parent: Optional[ET.Element], tag_name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local name, ignoring namespaces."""
    if parent is None:
        return None
    for child in parent:
        if _local_name(child.tag) == tag_name:
            return child
    return None


def get_children(parent: Optional[ET.Element], tag_name: str) -> List[ET.Element]:
    if parent is None:
        return []
    return [child for child in parent if _local_name(child.tag) == tag_name]


def get_element_text(parent: Optional[ET.Element], tag_name: str) -> Optional[str]:
    """Get stripped text content of a direct child element."""
    elem = get_child(parent, tag_name)
    if elem is not None and elem.text and elem.text.strip():
        return elem.text.strip()
    return None


def resolve_property(value: Optional[str], properties: Dict[str, str], max_iterations: int = 10) -> Optional[str]:
    """Resolve ${property} references, leaving unknown references untouched."""
    if not value or '${' not in value:
        return value

    resolved = value
    for _ in range(max_iterations):
        start_idx = resolved.find('${')
        end_idx = resolved.find('}', start_idx)
        if start_idx == -1 or end_idx == -1:
            break
        prop_name = resolved[start_idx + 2:end_idx]
        prop_value = properties.get(prop_name)
        if prop_value is None:
            break
        resolved = resolved[:start_idx] + prop_value + resolved[end_idx + 1:]
    return resolved


def _policy_enabled(repo_elem: ET.Element, policy: str) -> bool:
    enabled = get_element_text(get_child(repo_elem, policy), 'enabled')
    if enabled is None:
        return True
    return enabled.lower() != 'false'


def parse_repositories(root: ET.Element, properties: Dict[str, str]) -> List[Repository]:
    """Parse <repositories> of a POM."""
    repositories = []
    for repo_elem in get_children(get_child(root, 'repositories'), 'repository'):
        repo_id = get_element_text(repo_elem, 'id')
        url = resolve_property(get_element_text(repo_elem, 'url'), properties)
        if not repo_id or not url:
            continue
        repositories.append(Repository(
            id=repo_id,
            url=url,
            releases_enabled=_policy_enabled(repo_elem, 'releases'),
            snapshots_enabled=_policy_enabled(repo_elem, 'snapshots')
        ))
    return repositories


def parse_licenses(root: ET.Element, properties: Dict[str, str]) -> List[License]:
    licenses = []
    for license_elem in get_children(get_child(root, 'licenses'), 'license'):
        licenses.append(License(
            name=resolve_property(get_element_text(license_elem, 'name'), properties) or "",
            url=resolve_property(get_element_text(license_elem, 'url'), properties)
        ))
    return licenses


def parse_pom_properties(root: ET.Element, group_id: str, artifact_id: str, version: str) -> Dict[str, str]:
    properties = {}
    props_elem = get_child(root, 'properties')
    for prop in (list(props_elem) if props_elem is not None else []):
        if prop.text:
            properties[_local_name(prop.tag)] = prop.text.strip()
    for prefix in ('project', 'pom'):
        properties[f'{prefix}.groupId'] = group_id
        properties[f'{prefix}.artifactId'] = artifact_id
        properties[f'{prefix}.version'] = version
    return properties


def parse_parent_coordinates(root: ET.Element) -> Optional[Tuple[str, str, str]]:
    parent = get_child(root, 'parent')
    if parent is None:
        return None
    group_id = get_element_text(parent, 'groupId')
    artifact_id = get_element_text(parent, 'artifactId')
    version = get_element_text(parent, 'version')
    if group_id and artifact_id and version:
        return group_id, artifact_id, version
    return None


class PomProjectResolver:
    """
    Builds project metadata from POMs downloaded from remote repositories.

    Licenses and repositories missing from a POM are inherited from its
    parent chain.
    """

    def __init__(self, client, repositories: List[Repository]):
        self.client = client
        self.repositories = list(repositories)

    def project_for(self, artifact: Artifact) -> ProjectMetadata:
        root = self._load_pom(artifact.group_id, artifact.artifact_id, artifact.version)
        if root is None:
            raise ProjectLookupError(artifact.gav, "POM not found in any repository")
        return self._build(root, artifact.group_id, artifact.artifact_id, artifact.version, depth=0)

    def _load_pom(self, group_id: str, artifact_id: str, version: str) -> Optional[ET.Element]:
        pom = pom_artifact(Artifact(group_id=group_id, artifact_id=artifact_id, version=version))
        for repository in self.repositories:
            if repository.blacklisted or not repository.accepts(pom):
                continue
            content = self.client.fetch(repository, pom)
            if content is None:
                continue
            try:
                return ET.fromstring(content)
            except ET.ParseError as e:
                raise ProjectLookupError(pom.gav, f"invalid POM from '{repository.id}': {e}") from e
        return None

    def _build(self, root: ET.Element, group_id: str, artifact_id: str, version: str, depth: int) -> ProjectMetadata:
        properties = parse_pom_properties(root, group_id, artifact_id, version)
        project = ProjectMetadata(
            name=resolve_property(get_element_text(root, 'name'), properties) or artifact_id,
            description=resolve_property(get_element_text(root, 'description'), properties),
            url=resolve_property(get_element_text(root, 'url'), properties),
            licenses=parse_licenses(root, properties),
            repositories=parse_repositories(root, properties)
        )

        parent = parse_parent_coordinates(root)
        if parent and depth < MAX_PARENT_DEPTH and not (project.licenses and project.repositories):
            parent_root = self._load_pom(*parent)
            if parent_root is None:
                logger.debug(f"Parent POM {':'.join(parent)} of {group_id}:{artifact_id} not found")
            else:
                inherited = self._build(parent_root, *parent, depth=depth + 1)
                if not project.licenses:
                    project.licenses = inherited.licenses
                if not project.repositories:
                    project.repositories = inherited.repositories
        return project


class StaticProjectResolver:
    """Serves project metadata from a prepared mapping keyed by group:artifact:version."""

    def __init__(self, projects: Dict[str, ProjectMetadata]):
        self.projects = projects

    def project_for(self, artifact: Artifact) -> ProjectMetadata:
        project = self.projects.get(artifact.gav)
        if project is None:
            raise ProjectLookupError(artifact.gav, "no project metadata available")
        return project


class CachingProjectLookup:
    """
    Memoizes another project lookup, including its failures.

    Every report section asks for the same projects; a failure is raised
    again to each caller so that each section logs and skips on its own.
    """

    def __init__(self, delegate):
        self.delegate = delegate
        self._cache: Dict[str, Union[ProjectMetadata, ProjectLookupError]] = {}
        self._lock = threading.Lock()

    def project_for(self, artifact: Artifact) -> ProjectMetadata:
        with self._lock:
            cached = self._cache.get(artifact.gav)
        if cached is None:
            try:
                cached = self.delegate.project_for(artifact)
            except ProjectLookupError as e:
                cached = e
            with self._lock:
                self._cache[artifact.gav] = cached
        if isinstance(cached, ProjectLookupError):
            raise cached
        return cached
