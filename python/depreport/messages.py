"""Display strings of the dependencies report."""

from typing import Dict

REPORT_STRINGS: Dict[str, str] = {
    "report.dependencies.title": "Project Dependencies",
    "report.dependencies.nolist": "There are no dependencies for this project. It is a standalone application that does not depend on any other project.",
    "report.dependencies.intro.compile": "This is the list of compile dependencies for this project. These dependencies are required to compile and run the application:",
    "report.dependencies.intro.runtime": "This is the list of runtime dependencies for this project. These dependencies are required to run the application:",
    "report.dependencies.intro.test": "This is the list of test dependencies for this project. These dependencies are only required to compile and run unit tests for the application:",
    "report.dependencies.intro.provided": "This is the list of provided dependencies for this project. These dependencies are required to compile the application, but should be provided by default when using the library:",
    "report.dependencies.intro.system": "This is the list of system dependencies for this project. These dependencies are required to compile the application:",
    "report.dependencies.column.groupId": "GroupId",
    "report.dependencies.column.artifactId": "ArtifactId",
    "report.dependencies.column.version": "Version",
    "report.dependencies.column.classifier": "Classifier",
    "report.dependencies.column.type": "Type",
    "report.dependencies.column.optional": "Optional",
    "report.dependencies.column.isOptional": "Yes",
    "report.dependencies.column.isNotOptional": "No",
    "report.dependencies.column.description": "Description",
    "report.dependencies.column.url": "URL",
    "report.transitivedependencies.title": "Project Transitive Dependencies",
    "report.transitivedependencies.intro": "The following is a list of transitive dependencies for this project. Transitive dependencies are the dependencies of the project dependencies.",
    "report.transitivedependencies.nolist": "No transitive dependencies are required for this project.",
    "report.dependencies.graph.title": "Project Dependency Graph",
    "report.dependencies.graph.tree.title": "Dependency Tree",
    "report.dependencies.graph.tables.licenses": "Licenses",
    "report.dependencies.graph.tables.unknown": "Unknown",
    "report.dependencies.unamed": "Unnamed",
    "report.index.nodescription": "There is currently no description associated with this project.",
    "report.license.title": "Project License",
    "report.license.nolicense": "No project license is defined for this project.",
    "report.dependencies.file.details.title": "Dependency File Details",
    "report.dependencies.file.details.column.file": "Filename",
    "report.dependencies.file.details.column.size": "Size",
    "report.dependencies.file.details.column.entries": "Entries",
    "report.dependencies.file.details.column.classes": "Classes",
    "report.dependencies.file.details.column.packages": "Packages",
    "report.dependencies.file.details.column.jdkrev": "JDK Rev",
    "report.dependencies.file.details.column.debug": "Debug",
    "report.dependencies.file.details.column.sealed": "Sealed",
    "report.dependencies.file.details.total": "Total",
    "report.dependencies.file.details.cell.debug": "debug",
    "report.dependencies.file.details.cell.release": "release",
    "report.dependencies.file.details.cell.sealed": "sealed",
    "report.dependencies.repo.locations.title": "Dependency Repository Locations",
    "report.dependencies.repo.locations.column.repoid": "Repo ID",
    "report.dependencies.repo.locations.column.url": "URL",
    "report.dependencies.repo.locations.column.release": "Release",
    "report.dependencies.repo.locations.column.snapshot": "Snapshot",
    "report.dependencies.repo.locations.column.blacklisted": "Blacklisted",
    "report.dependencies.repo.locations.column.artifact": "Artifact",
    "report.dependencies.repo.locations.cell.release.enabled": "Yes",
    "report.dependencies.repo.locations.cell.release.disabled": "-",
    "report.dependencies.repo.locations.cell.snapshot.enabled": "Yes",
    "report.dependencies.repo.locations.cell.snapshot.disabled": "-",
    "report.dependencies.repo.locations.cell.blacklisted.enabled": "Yes",
    "report.dependencies.repo.locations.cell.blacklisted.disabled": "-",
    "report.dependencies.repo.locations.cell.found": "Found at {url}",
    "report.dependencies.repo.locations.cell.missing": "-",
    "report.dependencies.repo.locations.artifact.breakdown": "Repository locations for each of the Dependencies.",
}


def get_string(key: str, **kwargs) -> str:
    """Look up a report string, falling back to the key itself."""
    text = REPORT_STRINGS.get(key, key)
    if kwargs:
        return text.format(**kwargs)
    return text
