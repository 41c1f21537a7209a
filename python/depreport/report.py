"""Assembly of the dependencies report sections."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .classifier import dependencies_by_scope, has_classifier, has_optional, sort_artifacts
from .exceptions import ProjectLookupError
from .file_details import FileDetailsAggregator, file_details_table
from .formatting import FormatConfig
from .licenses import LicenseGrouper
from .messages import get_string
from .models import Artifact, DependencyNode, ResolvedProject, Scope
from .project_resolver import CachingProjectLookup
from .repositories import RepositoryLocations, artifact_matrix_table, repository_summary_table
from .sections import Section, Table
from .tree import FilteredNode, IdSequence, filter_tree

logger = logging.getLogger(__name__)


@dataclass
class ReportConfiguration:
    """Switches and formatting of a report run."""

    dependency_details_enabled: bool = True
    dependency_locations_enabled: bool = True
    max_workers: int = 1
    format: FormatConfig = field(default_factory=FormatConfig)


class DependenciesReport:
    """
    Builds the ordered sections of the dependencies report.

    Args:
        project: Resolved dependency data of the project
        project_lookup: Collaborator with ``project_for(artifact) -> ProjectMetadata``
        inspector: Collaborator with ``inspect(artifact) -> JarMetadata``, needed for file details
        repository_client: Collaborator with ``reachable``, ``exists_in`` and ``url_for``,
            needed for repository locations
        configuration: Report switches, defaults to everything enabled
    """

    def __init__(
        self,
        project: ResolvedProject,
        project_lookup,
        inspector=None,
        repository_client=None,
        configuration: Optional[ReportConfiguration] = None
    ):
        self.project = project
        self.project_lookup = CachingProjectLookup(project_lookup)
        self.inspector = inspector
        self.repository_client = repository_client
        self.configuration = configuration or ReportConfiguration()
        self.ids = IdSequence()
        self._tree: Optional[FilteredNode] = None

    @property
    def fmt(self) -> FormatConfig:
        return self.configuration.format

    def build(self) -> List[Section]:
        """Run every enabled section to completion, in report order."""
        if not self.project.has_dependencies():
            logger.info("Project has no dependencies")
            return [Section(
                key="dependencies",
                title=get_string("report.dependencies.title"),
                paragraphs=[get_string("report.dependencies.nolist")]
            )]

        sections = [
            self.build_dependencies_section(),
            self.build_transitive_section(),
            self.build_graph_section(),
            self.build_licenses_section(),
        ]

        if self.configuration.dependency_details_enabled:
            if self.inspector is None:
                logger.warning("No archive inspector configured - skipping dependency file details")
            else:
                sections.append(self.build_file_details_section())

        if self.configuration.dependency_locations_enabled:
            if self.repository_client is None:
                logger.warning("No repository client configured - skipping dependency repository locations")
            else:
                sections.append(self.build_repository_locations_section())

        return sections

    # ------------------------------------------------------------------
    # Scope tables

    def build_dependencies_section(self) -> Section:
        section = Section(key="dependencies", title=get_string("report.dependencies.title"))
        section.subsections = self._scope_subsections("dependencies", transitive=False)
        return section

    def build_transitive_section(self) -> Section:
        section = Section(
            key="transitive-dependencies",
            title=get_string("report.transitivedependencies.title")
        )
        subsections = self._scope_subsections("transitive-dependencies", transitive=True)
        if subsections:
            section.paragraphs.append(get_string("report.transitivedependencies.intro"))
            section.subsections = subsections
        else:
            section.paragraphs.append(get_string("report.transitivedependencies.nolist"))
        return section

    def _scope_subsections(self, prefix: str, transitive: bool) -> List[Section]:
        subsections = []
        for scope, artifacts in dependencies_by_scope(self.project, transitive).items():
            subsections.append(Section(
                key=f"{prefix}.{scope.value}",
                title=scope.value,
                paragraphs=[get_string(f"report.dependencies.intro.{scope.value}")],
                tables=[self.dependency_table(artifacts)]
            ))
        return subsections

    def dependency_table(self, artifacts: List[Artifact]) -> Table:
        """Scope table; classifier and optional columns only appear when used."""
        with_classifier = has_classifier(artifacts)
        with_optional = has_optional(artifacts)

        header = [
            get_string("report.dependencies.column.groupId"),
            get_string("report.dependencies.column.artifactId"),
            get_string("report.dependencies.column.version"),
        ]
        if with_classifier:
            header.append(get_string("report.dependencies.column.classifier"))
        header.append(get_string("report.dependencies.column.type"))
        if with_optional:
            header.append(get_string("report.dependencies.column.optional"))

        table = Table(header=header)
        for artifact in artifacts:
            cells = [artifact.group_id, artifact.artifact_id, artifact.version]
            if with_classifier:
                cells.append(artifact.classifier)
            cells.append(artifact.type)
            if with_optional:
                cells.append(get_string("report.dependencies.column.isOptional" if artifact.optional
                                        else "report.dependencies.column.isNotOptional"))
            url = self._project_url(artifact)
            table.add_row(cells, {1: url} if url else None)
        return table

    def _project_url(self, artifact: Artifact) -> Optional[str]:
        if artifact.scope == Scope.SYSTEM:
            return None
        try:
            return self.project_lookup.project_for(artifact).url
        except ProjectLookupError as e:
            logger.debug(f"No project url for {artifact.id}: {e}")
            return None

    # ------------------------------------------------------------------
    # Dependency graph

    def _tree_root(self) -> DependencyNode:
        if self.project.tree is not None:
            return self.project.tree
        logger.debug("No dependency tree given - using direct dependencies as the tree")
        return DependencyNode(
            artifact=self.project.artifact,
            children=[DependencyNode(artifact=artifact) for artifact in self.project.direct]
        )

    def filtered_tree(self) -> FilteredNode:
        """The dependency tree pruned to the resolved artifacts, built once per run."""
        if self._tree is None:
            self._tree = filter_tree(self._tree_root(), self.project.all, self.ids)
        return self._tree

    def build_graph_section(self) -> Section:
        tree = self.filtered_tree()
        for node in tree.walk():
            node.details = self.node_details(node.artifact)

        tree_section = Section(
            key="dependency-tree",
            title=get_string("report.dependencies.graph.tree.title"),
            tree=tree
        )
        return Section(
            key="dependency-graph",
            title=get_string("report.dependencies.graph.title"),
            subsections=[tree_section]
        )

    def node_details(self, artifact: Artifact) -> Optional[Dict]:
        """Content of a tree node's detail panel, or None if the project cannot be built."""
        no_description = get_string("report.index.nodescription")
        if artifact.scope == Scope.SYSTEM:
            return {
                "name": artifact.id,
                "description": no_description,
                "url": str(artifact.file.absolute()) if artifact.file else None,
                "licenses": None,
            }

        try:
            project = self.project_lookup.project_for(artifact)
        except ProjectLookupError as e:
            logger.error(f"Project building error for {artifact.id}: {e}")
            return None

        licenses = [{"name": lic.name, "url": lic.url} for lic in project.licenses]
        if not licenses:
            licenses = [{"name": get_string("report.license.nolicense"), "url": None}]
        return {
            "name": project.name,
            "description": project.description or no_description,
            "url": project.url or None,
            "licenses": licenses,
        }

    # ------------------------------------------------------------------
    # Licenses

    def build_licenses_section(self) -> Section:
        artifacts = [node.artifact for node in self.filtered_tree().walk()]
        groups = LicenseGrouper(self.project_lookup).group(artifacts)
        return Section(
            key="licenses",
            title=get_string("report.dependencies.graph.tables.licenses"),
            license_groups=groups.as_dict()
        )

    # ------------------------------------------------------------------
    # File details

    def build_file_details_section(self) -> Section:
        aggregator = FileDetailsAggregator(self.inspector, max_workers=self.configuration.max_workers)
        details = aggregator.aggregate(sort_artifacts(self.project.all))
        return Section(
            key="file-details",
            title=get_string("report.dependencies.file.details.title"),
            tables=[file_details_table(details, self.fmt)]
        )

    # ------------------------------------------------------------------
    # Repository locations

    def build_repository_locations_section(self) -> Section:
        locations = RepositoryLocations(
            self.repository_client,
            self.project_lookup,
            max_workers=self.configuration.max_workers
        )
        matrix = locations.build(self.project.repositories, sort_artifacts(self.project.all))
        return Section(
            key="repository-locations",
            title=get_string("report.dependencies.repo.locations.title"),
            paragraphs=[get_string("report.dependencies.repo.locations.artifact.breakdown")],
            tables=[repository_summary_table(matrix), artifact_matrix_table(matrix, self.fmt)]
        )
