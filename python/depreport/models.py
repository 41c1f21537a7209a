"""Core data models for depreport."""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from packageurl import PackageURL

# Timestamped snapshot versions as deployed to remote repositories, e.g. 1.0-20240102.101112-3
SNAPSHOT_TIMESTAMP_PATTERN = re.compile(r'^(.*)-(\d{8}\.\d{6})-(\d+)$')
SNAPSHOT_SUFFIX = "SNAPSHOT"


class Scope(str, Enum):
    """Declared usage context of a dependency."""

    COMPILE = "compile"
    RUNTIME = "runtime"
    TEST = "test"
    PROVIDED = "provided"
    SYSTEM = "system"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, value: Optional[str]) -> 'Scope':
        """Parse a scope name, defaulting to compile when missing."""
        if isinstance(value, Scope):
            return value
        if not value:
            return cls.COMPILE
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown dependency scope: {value}") from None


# Order used when rendering scope sections
REPORT_SCOPE_ORDER: Tuple[Scope, ...] = (
    Scope.COMPILE, Scope.RUNTIME, Scope.TEST, Scope.PROVIDED, Scope.SYSTEM
)

# Order used by the parenthetical breakdown of a totals cell
TOTALS_SCOPE_ORDER: Tuple[Scope, ...] = (
    Scope.COMPILE, Scope.TEST, Scope.RUNTIME, Scope.PROVIDED, Scope.SYSTEM
)


def _version_sort_key(version: str) -> Tuple:
    """Split a version into numeric and text runs so that 1.10 sorts after 1.9."""
    parts = []
    for token in re.findall(r'\d+|[^\d.\-_]+', version):
        if token.isdigit():
            parts.append((0, int(token), ''))
        else:
            parts.append((1, 0, token.lower()))
    return tuple(parts)


@dataclass(frozen=True)
class Artifact:
    """A resolved artifact. Identity and ordering are coordinate based."""

    group_id: str
    artifact_id: str
    version: str
    type: str = "jar"
    classifier: str = ""
    scope: Scope = field(default=Scope.COMPILE, compare=False)
    optional: bool = field(default=False, compare=False)
    file: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self):
        """Normalize scope, type and classifier."""
        object.__setattr__(self, 'scope', Scope.parse(self.scope))
        object.__setattr__(self, 'type', self.type or "jar")
        object.__setattr__(self, 'classifier', self.classifier or "")
        if self.file is not None and not isinstance(self.file, Path):
            object.__setattr__(self, 'file', Path(self.file))

    @property
    def id(self) -> str:
        """Return the artifact id in group:artifact:type[:classifier]:version format."""
        if self.classifier:
            return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.classifier}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}"

    @property
    def gav(self) -> str:
        """Return group:artifact:version, the key of the owning project."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def is_snapshot(self) -> bool:
        if self.version.endswith(SNAPSHOT_SUFFIX):
            return True
        return SNAPSHOT_TIMESTAMP_PATTERN.match(self.version) is not None

    @property
    def purl(self) -> str:
        """Return the Package URL of this artifact."""
        qualifiers: Dict[str, str] = {}
        if self.classifier:
            qualifiers['classifier'] = self.classifier
        if self.type != "jar":
            qualifiers['type'] = self.type
        return PackageURL(
            type='maven',
            namespace=self.group_id,
            name=self.artifact_id,
            version=self.version,
            qualifiers=qualifiers or None
        ).to_string()

    def coordinate_key(self) -> Tuple:
        """Natural coordinate ordering: group, artifact, type, classifier, version."""
        return (
            self.group_id,
            self.artifact_id,
            self.type,
            self.classifier,
            _version_sort_key(self.version),
            self.version,
        )

    def __lt__(self, other: 'Artifact') -> bool:
        if not isinstance(other, Artifact):
            return NotImplemented
        return self.coordinate_key() < other.coordinate_key()

    def __str__(self) -> str:
        return self.id


@dataclass
class DependencyNode:
    """A node of the resolved dependency tree."""

    artifact: Artifact
    children: List['DependencyNode'] = field(default_factory=list)

    def add_child(self, child: 'DependencyNode') -> None:
        self.children.append(child)

    def collect_all_artifacts(self) -> List[Artifact]:
        """Recursively collect all artifacts in this tree, root first."""
        artifacts = [self.artifact]
        for child in self.children:
            artifacts.extend(child.collect_all_artifacts())
        return artifacts


@dataclass
class Repository:
    """A remote repository. Only the blacklist flag changes, during the probe pass."""

    id: str
    url: str
    releases_enabled: bool = True
    snapshots_enabled: bool = True
    blacklisted: bool = False

    def accepts(self, artifact: Artifact) -> bool:
        """Check whether the repository policy covers the artifact's release/snapshot nature."""
        if artifact.is_snapshot:
            return self.snapshots_enabled
        return self.releases_enabled


@dataclass(frozen=True)
class License:
    """A license declared by a project. The name may be empty."""

    name: str = ""
    url: Optional[str] = None


@dataclass
class ProjectMetadata:
    """Project information owning an artifact."""

    name: str
    description: Optional[str] = None
    url: Optional[str] = None
    licenses: List[License] = field(default_factory=list)
    repositories: List[Repository] = field(default_factory=list)


@dataclass(frozen=True)
class JarMetadata:
    """Archive introspection result for a single artifact."""

    num_entries: int
    num_classes: int
    num_packages: int
    jdk_revision: Optional[str] = None
    debug_present: bool = False
    sealed: bool = False


@dataclass
class ResolvedProject:
    """
    The already resolved dependency data of a project.

    Attributes:
        artifact: The project's own artifact
        direct: Dependencies declared directly by the project
        all: The flat resolved dependency set (direct and transitive)
        tree: Dependency tree rooted at the project
        repositories: Remote repositories configured for the project
        name: Display name of the project
        projects: Known project metadata keyed by group:artifact:version
    """

    artifact: Artifact
    direct: List[Artifact] = field(default_factory=list)
    all: List[Artifact] = field(default_factory=list)
    tree: Optional[DependencyNode] = None
    repositories: List[Repository] = field(default_factory=list)
    name: Optional[str] = None
    projects: Dict[str, ProjectMetadata] = field(default_factory=dict)

    def has_dependencies(self) -> bool:
        return bool(self.all or self.direct)

    @property
    def transitive(self) -> List[Artifact]:
        """Resolved artifacts that are not direct dependencies."""
        direct = set(self.direct)
        return [artifact for artifact in self.all if artifact not in direct]
