"""Input parsers for resolved dependency data."""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

import requests
from packageurl import PackageURL

from .exceptions import InputFormatError
from .models import (
    Artifact, DependencyNode, License, ProjectMetadata, Repository, ResolvedProject
)

logger = logging.getLogger(__name__)

# "[INFO] |  +- group:artifact:jar:1.0:compile" once the [INFO] prefix is removed
TREE_CHILD_PATTERN = re.compile(r'^((?:[| ]  )*)([+\\]- )(\S.*)$')
LOG_PREFIX_PATTERN = re.compile(r'^\[(?:INFO|DEBUG)\]\s?', re.IGNORECASE)


def _is_url(path: str) -> bool:
    """Check if a path is an http(s) URL."""
    return urlparse(str(path)).scheme in ('http', 'https')


def _read_content(path: str) -> str:
    """
    Read content from either a file path or URL.

    Raises:
        OSError: If the file cannot be read
        requests.RequestException: If the URL fetch fails
    """
    if _is_url(path):
        logger.info(f"Fetching content from URL: {path}")
        response = requests.get(path, timeout=30)
        response.raise_for_status()
        return response.text
    logger.info(f"Reading content from file: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def detect_format(path: str) -> str:
    """Detect the input format from the file name: 'json' or 'tree'."""
    name_lower = Path(urlparse(str(path)).path).name.lower()
    if name_lower.endswith('.json'):
        return 'json'
    return 'tree'


def load_input(path: str) -> ResolvedProject:
    """Load resolved dependency data in the format matching the file name."""
    if detect_format(path) == 'json':
        return load_resolved_project(path)
    return parse_maven_tree_output(path)


# ----------------------------------------------------------------------
# JSON documents

def _parse_repository(data: Dict[str, Any]) -> Repository:
    if not data.get('id') or not data.get('url'):
        raise InputFormatError(f"Repository needs an id and a url: {data}")
    return Repository(
        id=data['id'],
        url=data['url'],
        releases_enabled=bool(data.get('releases', True)),
        snapshots_enabled=bool(data.get('snapshots', True)),
        blacklisted=bool(data.get('blacklisted', False))
    )


def _parse_artifact(data: Dict[str, Any], base_dir: Optional[Path] = None) -> Artifact:
    """Build an artifact from explicit coordinates or a Maven purl."""
    coordinates: Dict[str, Any] = {}
    if 'purl' in data:
        try:
            purl = PackageURL.from_string(data['purl'])
        except ValueError as e:
            raise InputFormatError(f"Invalid purl '{data['purl']}': {e}") from e
        if purl.type != 'maven':
            raise InputFormatError(f"Only maven purls are supported: {data['purl']}")
        qualifiers = purl.qualifiers or {}
        coordinates = {
            'group_id': purl.namespace or "",
            'artifact_id': purl.name,
            'version': purl.version or "",
            'type': qualifiers.get('type', 'jar'),
            'classifier': qualifiers.get('classifier', ''),
        }
    else:
        missing = [key for key in ('groupId', 'artifactId', 'version') if not data.get(key)]
        if missing:
            raise InputFormatError(f"Dependency is missing {', '.join(missing)}: {data}")
        coordinates = {
            'group_id': data['groupId'],
            'artifact_id': data['artifactId'],
            'version': data['version'],
            'type': data.get('type', 'jar'),
            'classifier': data.get('classifier', ''),
        }

    file_path = None
    if data.get('file'):
        file_path = Path(data['file'])
        if base_dir is not None and not file_path.is_absolute():
            file_path = base_dir / file_path

    try:
        return Artifact(
            scope=data.get('scope'),
            optional=bool(data.get('optional', False)),
            file=file_path,
            **coordinates
        )
    except ValueError as e:
        raise InputFormatError(str(e)) from e


def _parse_project_metadata(data: Dict[str, Any], default_name: str) -> ProjectMetadata:
    return ProjectMetadata(
        name=data.get('name') or default_name,
        description=data.get('description'),
        url=data.get('url'),
        licenses=[License(name=lic.get('name') or "", url=lic.get('url')) for lic in data.get('licenses', [])],
        repositories=[_parse_repository(repo) for repo in data.get('repositories', [])]
    )


def _parse_tree(data: Dict[str, Any], known: Dict[Artifact, Artifact], base_dir: Optional[Path]) -> DependencyNode:
    artifact = _parse_artifact(data, base_dir)
    # Reuse the flat list instance so scope, optional and file match
    node = DependencyNode(artifact=known.get(artifact, artifact))
    for child in data.get('children', []):
        node.add_child(_parse_tree(child, known, base_dir))
    return node


def parse_resolved_project(document: Dict[str, Any], base_dir: Optional[Path] = None) -> ResolvedProject:
    """
    Build a ResolvedProject from a JSON document.

    Example:
        {
          "project": {"groupId": "com.example", "artifactId": "app", "version": "1.0",
                      "repositories": [{"id": "central", "url": "https://repo.maven.apache.org/maven2"}]},
          "dependencies": [{"groupId": "org.slf4j", "artifactId": "slf4j-api", "version": "2.0.9",
                            "scope": "compile", "file": "libs/slf4j-api-2.0.9.jar", "direct": true}],
          "tree": {"groupId": "com.example", "artifactId": "app", "version": "1.0",
                   "children": [{"groupId": "org.slf4j", "artifactId": "slf4j-api", "version": "2.0.9"}]},
          "projects": {"org.slf4j:slf4j-api:2.0.9": {"name": "SLF4J API Module",
                       "licenses": [{"name": "MIT License"}]}}
        }
    """
    if not isinstance(document, dict) or 'project' not in document:
        raise InputFormatError("Input document needs a 'project' object")

    project_data = document['project']
    project_artifact = _parse_artifact(dict(project_data, type=project_data.get('type', 'pom')), base_dir)

    entries = document.get('dependencies', [])
    artifacts = [_parse_artifact(entry, base_dir) for entry in entries]
    known = {artifact: artifact for artifact in artifacts}

    tree = None
    if document.get('tree'):
        tree = _parse_tree(document['tree'], known, base_dir)

    if any('direct' in entry for entry in entries):
        direct = [artifact for artifact, entry in zip(artifacts, entries) if entry.get('direct')]
    elif tree is not None:
        direct = [child.artifact for child in tree.children]
    else:
        direct = list(artifacts)

    projects = {
        gav: _parse_project_metadata(data, default_name=gav.split(':')[1] if ':' in gav else gav)
        for gav, data in document.get('projects', {}).items()
    }

    project = ResolvedProject(
        artifact=project_artifact,
        direct=direct,
        all=artifacts,
        tree=tree,
        repositories=[_parse_repository(repo) for repo in project_data.get('repositories', [])],
        name=project_data.get('name'),
        projects=projects
    )
    logger.info(f"Loaded {len(artifacts)} dependencies ({len(direct)} direct) for {project_artifact.gav}")
    return project


def load_resolved_project(path: str) -> ResolvedProject:
    """Load a resolved project JSON document from a file or URL."""
    content = _read_content(path)
    try:
        document = json.loads(content)
    except json.JSONDecodeError as e:
        raise InputFormatError(f"Invalid JSON in {path}: {e}") from e
    base_dir = None if _is_url(path) else Path(path).absolute().parent
    return parse_resolved_project(document, base_dir)


# ----------------------------------------------------------------------
# mvn dependency:tree output

def parse_coordinates(text: str) -> Artifact:
    """
    Parse a dependency:tree coordinate string.

    Accepted forms:
        group:artifact:type:version
        group:artifact:type:version:scope
        group:artifact:type:classifier:version:scope
    followed optionally by " (optional)" or other parenthesized notes.
    """
    optional = '(optional)' in text
    coordinates = text.split()[0] if text.split() else ""
    parts = coordinates.split(':')

    if len(parts) == 4:
        group_id, artifact_id, type_, version = parts
        classifier, scope = "", None
    elif len(parts) == 5:
        group_id, artifact_id, type_, version, scope = parts
        classifier = ""
    elif len(parts) == 6:
        group_id, artifact_id, type_, classifier, version, scope = parts
    else:
        raise InputFormatError(f"Unrecognized dependency coordinates: {text}")

    try:
        return Artifact(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            type=type_,
            classifier=classifier,
            scope=scope,
            optional=optional
        )
    except ValueError as e:
        raise InputFormatError(str(e)) from e


def _tree_lines(content: str) -> List[str]:
    return [LOG_PREFIX_PATTERN.sub('', line.rstrip()) for line in content.splitlines()]


def parse_maven_tree_text(content: str) -> ResolvedProject:
    """Build a ResolvedProject from the text printed by mvn dependency:tree."""
    root: Optional[DependencyNode] = None
    stack: List[Tuple[int, DependencyNode]] = []

    for line_num, line in enumerate(_tree_lines(content), 1):
        if root is None:
            candidate = line.strip()
            if candidate and not candidate.startswith(('-', '[', 'Scanning', 'Building')) \
                    and len(candidate.split()[0].split(':')) == 4:
                root = DependencyNode(artifact=parse_coordinates(candidate))
                stack = [(0, root)]
                logger.debug(f"Line {line_num}: project {root.artifact.id}")
            continue

        match = TREE_CHILD_PATTERN.match(line)
        if not match:
            # First line after the tree ends it
            break

        depth = len(match.group(1)) // 3 + 1
        node = DependencyNode(artifact=parse_coordinates(match.group(3)))
        while stack and stack[-1][0] >= depth:
            stack.pop()
        if not stack:
            raise InputFormatError(f"Line {line_num}: dependency without parent: {line}")
        stack[-1][1].add_child(node)
        stack.append((depth, node))

    if root is None:
        raise InputFormatError("No dependency tree found in input")

    artifacts: List[Artifact] = []
    seen = set()
    for artifact in root.collect_all_artifacts()[1:]:
        if artifact not in seen:
            seen.add(artifact)
            artifacts.append(artifact)

    logger.info(f"Parsed {len(artifacts)} dependencies from dependency:tree output")
    return ResolvedProject(
        artifact=root.artifact,
        direct=[child.artifact for child in root.children],
        all=artifacts,
        tree=root
    )


def parse_maven_tree_output(path: str) -> ResolvedProject:
    """Parse a file (or URL) holding mvn dependency:tree output."""
    return parse_maven_tree_text(_read_content(path))
