"""Exceptions raised by depreport collaborators and section builders."""


class ReportError(Exception):
    """Base exception for all report errors."""


class MissingArtifactFileError(ReportError):
    """Raised when an artifact has no resolved file."""

    def __init__(self, artifact_id: str):
        self.artifact_id = artifact_id
        super().__init__(f"Artifact: {artifact_id} has no file.")


class IntrospectionError(ReportError):
    """Raised when an archive cannot be inspected."""


class ProjectLookupError(ReportError):
    """Raised when the project metadata of an artifact cannot be built."""

    def __init__(self, gav: str, reason: str):
        self.gav = gav
        self.reason = reason
        super().__init__(f"Unable to build project {gav}: {reason}")


class RepositoryUnreachableError(ReportError):
    """Raised when a repository URL is malformed or cannot be opened."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Repository url '{url}' is unreachable: {reason}")


class InputFormatError(ReportError):
    """Raised when an input document cannot be parsed."""
