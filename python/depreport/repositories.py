"""Repository availability matrix for the resolved dependencies."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set

from .exceptions import ProjectLookupError, RepositoryUnreachableError
from .formatting import FormatConfig, DEFAULT_FORMAT
from .messages import get_string
from .models import Artifact, Repository, Scope
from .sections import Table
from .totals import TotalsAccumulator

logger = logging.getLogger(__name__)


def collect_repositories(
    project_repositories: Iterable[Repository],
    artifacts: Iterable[Artifact],
    project_lookup
) -> Dict[str, Repository]:
    """
    Union of the project's repositories and those declared by each dependency's project.

    Keyed by repository id; the first definition of an id wins, so the
    project's own configuration takes precedence.
    """
    repositories: Dict[str, Repository] = {}
    # Project repositories take precedence over ids redeclared by dependency POMs
    for repository in project_repositories:
        repositories.setdefault(repository.id, repository)

    for artifact in artifacts:
        if artifact.scope == Scope.SYSTEM:
            continue
        try:
            project = project_lookup.project_for(artifact)
        except ProjectLookupError as e:
            logger.warning(f"Unable to create project for {artifact.id} from repository: {e}")
            continue
        for repository in project.repositories:
            if repository.id not in repositories:
                logger.debug(f"Repository '{repository.id}' declared by {artifact.gav}")
                repositories[repository.id] = repository

    return repositories


class RepositoryProber:
    """
    Blacklists repositories whose URL cannot be opened.

    Each distinct URL is probed at most once per prober. Repositories that
    are already blacklisted are never probed again.
    """

    def __init__(self, probe, max_workers: int = 1):
        self.probe = probe
        self.max_workers = max(1, max_workers)
        self.blacklisted_urls: Set[str] = set()
        self.reachable_urls: Set[str] = set()

    def run(self, repositories: Iterable[Repository]) -> Set[str]:
        """Probe the repositories and return the set of blacklisted URLs."""
        repositories = list(repositories)
        for repository in repositories:
            if repository.blacklisted:
                self.blacklisted_urls.add(repository.url)

        pending: List[str] = []
        for repository in repositories:
            url = repository.url
            if repository.blacklisted or url in self.blacklisted_urls or url in self.reachable_urls:
                continue
            if url not in pending:
                pending.append(url)

        if self.max_workers > 1 and len(pending) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outcomes = list(executor.map(self._probe_url, pending))
        else:
            outcomes = [self._probe_url(url) for url in pending]

        for url, reachable in zip(pending, outcomes):
            if reachable:
                self.reachable_urls.add(url)
            else:
                self.blacklisted_urls.add(url)

        for repository in repositories:
            if not repository.blacklisted and repository.url in self.blacklisted_urls:
                logger.warning(f"Repository '{repository.id}' ({repository.url}) will be blacklisted.")
                repository.blacklisted = True

        return set(self.blacklisted_urls)

    def _probe_url(self, url: str) -> bool:
        try:
            if self.probe.reachable(url):
                return True
            logger.warning(f"The repository url '{url}' has no stream.")
            return False
        except RepositoryUnreachableError as e:
            logger.warning(f"The repository url '{url}' is invalid: {e.reason}")
            return False
        except (OSError, ValueError) as e:
            logger.warning(f"The repository url '{url}' is invalid: {e}")
            return False


@dataclass
class AvailabilityCell:
    found: bool = False
    url: str = ""


@dataclass
class AvailabilityRow:
    artifact: Artifact
    cells: List[AvailabilityCell] = field(default_factory=list)


@dataclass
class RepositoryMatrix:
    """Availability of every artifact in every repository."""

    repositories: List[Repository]
    rows: List[AvailabilityRow] = field(default_factory=list)
    found_counts: Dict[str, int] = field(default_factory=dict)
    dependency_totals: TotalsAccumulator = field(default_factory=TotalsAccumulator)
    blacklisted_urls: Set[str] = field(default_factory=set)


def build_matrix(artifacts: Iterable[Artifact], repositories: List[Repository], checker) -> RepositoryMatrix:
    """
    Check each (artifact, repository) pair.

    System scope artifacts are never looked up. Blacklisted repositories
    and repositories whose release/snapshot policy does not cover the
    artifact are reported as unavailable without a lookup.
    """
    matrix = RepositoryMatrix(repositories=list(repositories))
    matrix.found_counts = {repository.id: 0 for repository in repositories}

    for artifact in artifacts:
        matrix.dependency_totals.increment(artifact.scope)
        row = AvailabilityRow(artifact=artifact)
        for repository in repositories:
            cell = AvailabilityCell()
            if (artifact.scope != Scope.SYSTEM and not repository.blacklisted
                    and repository.accepts(artifact)):
                cell.found = checker.exists_in(repository, artifact)
                if cell.found:
                    cell.url = checker.url_for(repository, artifact)
                    matrix.found_counts[repository.id] += 1
            row.cells.append(cell)
        matrix.rows.append(row)

    return matrix


class RepositoryLocations:
    """
    Builds the repository availability matrix.

    Args:
        client: Collaborator with ``reachable``, ``exists_in`` and ``url_for``
        project_lookup: Collaborator with ``project_for``
        max_workers: Number of concurrent reachability probes
    """

    def __init__(self, client, project_lookup, max_workers: int = 1):
        self.client = client
        self.project_lookup = project_lookup
        self.prober = RepositoryProber(client, max_workers=max_workers)

    def build(self, project_repositories: Iterable[Repository], artifacts: List[Artifact]) -> RepositoryMatrix:
        repositories = collect_repositories(project_repositories, artifacts, self.project_lookup)
        logger.info(f"Checking {len(artifacts)} artifacts against {len(repositories)} repositories")
        blacklisted_urls = self.prober.run(repositories.values())
        matrix = build_matrix(artifacts, list(repositories.values()), self.client)
        matrix.blacklisted_urls = blacklisted_urls
        return matrix


def repository_summary_table(matrix: RepositoryMatrix) -> Table:
    """Repository list with release/snapshot policies and, if any, blacklist flags."""
    with_blacklist = bool(matrix.blacklisted_urls)
    header = [
        get_string("report.dependencies.repo.locations.column.repoid"),
        get_string("report.dependencies.repo.locations.column.url"),
        get_string("report.dependencies.repo.locations.column.release"),
        get_string("report.dependencies.repo.locations.column.snapshot"),
    ]
    if with_blacklist:
        header.append(get_string("report.dependencies.repo.locations.column.blacklisted"))

    table = Table(header=header)
    for repository in matrix.repositories:
        cells = [
            repository.id,
            repository.url,
            get_string("report.dependencies.repo.locations.cell.release."
                       + ("enabled" if repository.releases_enabled else "disabled")),
            get_string("report.dependencies.repo.locations.cell.snapshot."
                       + ("enabled" if repository.snapshots_enabled else "disabled")),
        ]
        if with_blacklist:
            cells.append(get_string("report.dependencies.repo.locations.cell.blacklisted."
                                    + ("enabled" if repository.blacklisted else "disabled")))
        links = {} if repository.blacklisted else {1: repository.url}
        table.add_row(cells, links)
    return table


def artifact_matrix_table(matrix: RepositoryMatrix, fmt: FormatConfig = DEFAULT_FORMAT) -> Table:
    """Artifact by repository table with a per-repository found count row."""
    header = [get_string("report.dependencies.repo.locations.column.artifact")]
    header.extend(repository.id for repository in matrix.repositories)
    table = Table(header=header)

    for row in matrix.rows:
        cells = [row.artifact.id]
        links = {}
        for column, (repository, cell) in enumerate(zip(matrix.repositories, row.cells), start=1):
            if cell.found:
                cells.append(get_string("report.dependencies.repo.locations.cell.found", url=repository.url))
                if cell.url:
                    links[column] = cell.url
            else:
                cells.append(get_string("report.dependencies.repo.locations.cell.missing"))
        table.add_row(cells, links)

    table.total_header = [get_string("report.dependencies.file.details.total")] + header[1:]
    table.total_row = [matrix.dependency_totals.render(fmt.format_count)]
    table.total_row.extend(fmt.format_count(matrix.found_counts[repository.id])
                           for repository in matrix.repositories)
    return table
