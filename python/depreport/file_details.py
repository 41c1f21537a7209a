"""Aggregation of archive introspection data into the file details table."""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

from .exceptions import IntrospectionError
from .formatting import FormatConfig, DEFAULT_FORMAT
from .messages import get_string
from .models import Artifact, JarMetadata
from .sections import Table
from .totals import TotalsAccumulator

logger = logging.getLogger(__name__)

# Artifact types inspected as archives
ARCHIVE_TYPES: FrozenSet[str] = frozenset({"jar", "war", "ear", "sar", "rar", "par", "ejb"})

METRICS = ("dependencies", "size", "entries", "classes", "packages", "debug", "sealed")


@dataclass
class FileDetailRow:
    """One artifact of the file details table, kept numeric until rendering."""

    artifact: Artifact
    size: int
    archive: bool = False
    metadata: Optional[JarMetadata] = None
    error: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.artifact.file.name

    @property
    def file_path(self) -> str:
        return str(self.artifact.file.absolute())


@dataclass
class FileDetails:
    """Result of a file details pass."""

    rows: List[FileDetailRow] = field(default_factory=list)
    totals: Dict[str, TotalsAccumulator] = field(
        default_factory=lambda: {metric: TotalsAccumulator() for metric in METRICS}
    )
    highest_jdk: float = 0.0
    has_sealed: bool = False


def parse_jdk_revision(revision: Optional[str]) -> Optional[float]:
    """Parse a JDK revision such as '1.8' or '11', or None when it is not numeric."""
    if revision is None:
        return None
    try:
        return float(revision)
    except ValueError:
        logger.debug(f"Ignoring non numeric JDK revision '{revision}'")
        return None


def _file_length(artifact: Artifact) -> int:
    try:
        return artifact.file.stat().st_size
    except OSError as e:
        logger.warning(f"Unable to read size of {artifact.file} for {artifact.id}: {e}")
        return 0


class FileDetailsAggregator:
    """
    Pulls archive metadata for each artifact and accumulates per-scope totals.

    Args:
        inspector: Collaborator with an ``inspect(artifact) -> JarMetadata`` method
        archive_types: Artifact types treated as archives (case-insensitive)
        max_workers: Number of concurrent inspections; rows keep the input order
    """

    def __init__(self, inspector, archive_types: Iterable[str] = ARCHIVE_TYPES, max_workers: int = 1):
        self.inspector = inspector
        self.archive_types = frozenset(t.lower() for t in archive_types)
        self.max_workers = max(1, max_workers)

    def is_archive(self, artifact: Artifact) -> bool:
        return artifact.type.lower() in self.archive_types

    def aggregate(self, artifacts: List[Artifact]) -> FileDetails:
        """
        Build file details for artifacts already in display order.

        Artifacts without a file are logged and skipped. Inspection failures
        produce a degraded row and never abort the pass.
        """
        resolved = []
        for artifact in artifacts:
            if artifact.file is None:
                logger.error(f"Artifact: {artifact.id} has no file.")
                continue
            resolved.append(artifact)

        inspections = self._inspect_all([a for a in resolved if self.is_archive(a)])

        details = FileDetails()
        details.has_sealed = any(
            metadata is not None and metadata.sealed for metadata, _ in inspections.values()
        )
        totals = details.totals

        for artifact in resolved:
            scope = artifact.scope
            size = _file_length(artifact)
            totals["dependencies"].increment(scope)
            totals["size"].add(size, scope)

            if not self.is_archive(artifact):
                details.rows.append(FileDetailRow(artifact=artifact, size=size))
                continue

            metadata, error = inspections[artifact]
            if metadata is None:
                details.rows.append(FileDetailRow(artifact=artifact, size=size, archive=True, error=error))
                continue

            totals["entries"].add(metadata.num_entries, scope)
            totals["classes"].add(metadata.num_classes, scope)
            totals["packages"].add(metadata.num_packages, scope)
            if metadata.debug_present:
                totals["debug"].increment(scope)
            if details.has_sealed and metadata.sealed:
                totals["sealed"].increment(scope)

            revision = parse_jdk_revision(metadata.jdk_revision)
            if revision is not None:
                details.highest_jdk = max(details.highest_jdk, revision)

            details.rows.append(FileDetailRow(artifact=artifact, size=size, archive=True, metadata=metadata))

        logger.info(f"File details: {len(details.rows)} files, {totals['size'].total} bytes")
        return details

    def _inspect_all(self, artifacts: List[Artifact]) -> Dict[Artifact, Tuple[Optional[JarMetadata], Optional[str]]]:
        if self.max_workers > 1 and len(artifacts) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                results = list(executor.map(self._inspect_one, artifacts))
        else:
            results = [self._inspect_one(artifact) for artifact in artifacts]
        return dict(zip(artifacts, results))

    def _inspect_one(self, artifact: Artifact) -> Tuple[Optional[JarMetadata], Optional[str]]:
        try:
            return self.inspector.inspect(artifact), None
        except (IntrospectionError, OSError) as e:
            logger.warning(f"Unable to inspect {artifact.id} ({artifact.file}): {e}")
            return None, str(e)


def file_details_table(details: FileDetails, fmt: FormatConfig = DEFAULT_FORMAT) -> Table:
    """Render file details into a table with a trailing totals row."""
    header = [
        get_string("report.dependencies.file.details.column.file"),
        get_string("report.dependencies.file.details.column.size"),
        get_string("report.dependencies.file.details.column.entries"),
        get_string("report.dependencies.file.details.column.classes"),
        get_string("report.dependencies.file.details.column.packages"),
        get_string("report.dependencies.file.details.column.jdkrev"),
        get_string("report.dependencies.file.details.column.debug"),
    ]
    if details.has_sealed:
        header.append(get_string("report.dependencies.file.details.column.sealed"))
    width = len(header)
    table = Table(header=header)

    for row in details.rows:
        if row.error is not None:
            cells = [row.artifact.id, row.file_path, row.error]
        elif row.metadata is None:
            cells = [row.file_name, fmt.format_file_size(row.size)]
        else:
            metadata = row.metadata
            cells = [
                row.file_name,
                fmt.format_file_size(row.size),
                fmt.format_count(metadata.num_entries),
                fmt.format_count(metadata.num_classes),
                fmt.format_count(metadata.num_packages),
                metadata.jdk_revision or "",
                get_string("report.dependencies.file.details.cell.debug" if metadata.debug_present
                           else "report.dependencies.file.details.cell.release"),
            ]
            if details.has_sealed:
                cells.append(get_string("report.dependencies.file.details.cell.sealed") if metadata.sealed else "")
        table.add_row(cells + [""] * (width - len(cells)))

    totals = details.totals
    table.total_header = [get_string("report.dependencies.file.details.total")] + header[1:]
    table.total_row = [
        totals["dependencies"].render(fmt.format_count),
        totals["size"].render(fmt.format_file_size),
        totals["entries"].render(fmt.format_count),
        totals["classes"].render(fmt.format_count),
        totals["packages"].render(fmt.format_count),
        fmt.format_revision(details.highest_jdk),
        totals["debug"].render(fmt.format_count),
    ]
    if details.has_sealed:
        table.total_row.append(totals["sealed"].render(fmt.format_count))
    return table
