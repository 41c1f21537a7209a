"""Client for probing remote Maven repositories."""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse, unquote

import requests

from .exceptions import RepositoryUnreachableError
from .http_session import HttpSettings, create_session
from .models import Artifact, Repository

logger = logging.getLogger(__name__)

MAVEN_CENTRAL_URL = "https://repo.maven.apache.org/maven2"

# Artifact types whose files do not use the type as extension
TYPE_EXTENSIONS = {
    "ejb": "jar",
    "ejb-client": "jar",
    "test-jar": "jar",
    "maven-plugin": "jar",
    "java-source": "jar",
    "javadoc": "jar",
    "bundle": "jar",
}


def artifact_path(artifact: Artifact, extension: Optional[str] = None) -> str:
    """
    Path of an artifact in the Maven 2 repository layout.

    Example:
        org.slf4j:slf4j-api:jar:2.0.9 -> org/slf4j/slf4j-api/2.0.9/slf4j-api-2.0.9.jar
    """
    if extension is None:
        extension = TYPE_EXTENSIONS.get(artifact.type, artifact.type)
    group_path = artifact.group_id.replace('.', '/')
    classifier_suffix = f"-{artifact.classifier}" if artifact.classifier else ""
    filename = f"{artifact.artifact_id}-{artifact.version}{classifier_suffix}.{extension}"
    return f"{group_path}/{artifact.artifact_id}/{artifact.version}/{filename}"


def pom_artifact(artifact: Artifact) -> Artifact:
    """The POM artifact describing the project that owns an artifact."""
    return Artifact(
        group_id=artifact.group_id,
        artifact_id=artifact.artifact_id,
        version=artifact.version,
        type="pom"
    )


def maven_central() -> Repository:
    """A fresh definition of the Maven Central repository."""
    return Repository(id="central", url=MAVEN_CENTRAL_URL, snapshots_enabled=False)


def _file_url_path(url: str) -> Path:
    return Path(unquote(urlparse(url).path))


class MavenRepositoryClient:
    """Reachability probes, existence checks and downloads against Maven 2 layout repositories."""

    def __init__(self, session: Optional[requests.Session] = None, settings: Optional[HttpSettings] = None):
        """Initialize the client, creating a configured session unless one is given."""
        self.settings = settings or HttpSettings()
        self.session = session or create_session(self.settings)

    def url_for(self, repository: Repository, artifact: Artifact) -> str:
        """Return the artifact URL in the repository, or an empty string when the repository has no URL."""
        if not repository.url:
            return ""
        return f"{repository.url.rstrip('/')}/{artifact_path(artifact)}"

    def reachable(self, url: str) -> bool:
        """
        Attempt to open a repository URL.

        Returns:
            True if the URL answered, False if it answered with an error status

        Raises:
            RepositoryUnreachableError: If the URL is malformed or the connection fails
        """
        parsed = urlparse(url or "")
        if parsed.scheme == 'file':
            return _file_url_path(url).is_dir()
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise RepositoryUnreachableError(url, "malformed URL")

        logger.debug(f"Probing repository {url}")
        try:
            response = self.session.get(url, timeout=self.settings.timeout, stream=True)
            try:
                return response.status_code < 400
            finally:
                response.close()
        except requests.RequestException as e:
            raise RepositoryUnreachableError(url, str(e)) from e

    def exists_in(self, repository: Repository, artifact: Artifact) -> bool:
        """Check whether the artifact file is present in the repository."""
        url = self.url_for(repository, artifact)
        if not url:
            return False
        if url.startswith('file:'):
            return _file_url_path(url).is_file()

        try:
            response = self.session.head(url, timeout=self.settings.timeout, allow_redirects=True)
            return response.status_code == 200
        except requests.RequestException as e:
            logger.warning(f"Error checking {artifact.id} in repository '{repository.id}': {e}")
            return False

    def fetch(self, repository: Repository, artifact: Artifact) -> Optional[bytes]:
        """Download an artifact file from the repository, or None if it is not there."""
        url = self.url_for(repository, artifact)
        if not url:
            return None
        if url.startswith('file:'):
            path = _file_url_path(url)
            return path.read_bytes() if path.is_file() else None

        logger.debug(f"Fetching {url}")
        try:
            response = self.session.get(url, timeout=self.settings.timeout)
        except requests.RequestException as e:
            logger.warning(f"Error fetching {artifact.id} from repository '{repository.id}': {e}")
            return None
        if response.status_code != 200:
            logger.debug(f"{artifact.id} not in repository '{repository.id}': HTTP {response.status_code}")
            return None
        return response.content

    def close(self):
        """Close the session and clean up resources."""
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
