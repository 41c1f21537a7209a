"""Archive introspection of resolved artifact files."""

import logging
import struct
import zipfile
import zlib
from pathlib import Path
from typing import Dict, List, Optional, Set

from .exceptions import IntrospectionError, MissingArtifactFileError
from .models import Artifact, JarMetadata

logger = logging.getLogger(__name__)

CLASS_MAGIC = b'\xca\xfe\xba\xbe'
MANIFEST_PATH = 'META-INF/MANIFEST.MF'

# Class file major version -> JDK revision label
CLASS_VERSION_REVISIONS: Dict[int, str] = {
    45: "1.1",
    46: "1.2",
    47: "1.3",
    48: "1.4",
    49: "1.5",
    50: "1.6",
    51: "1.7",
    52: "1.8",
}


def revision_for_major_version(major: int) -> str:
    """Map a class file major version to the JDK revision that produced it."""
    if major in CLASS_VERSION_REVISIONS:
        return CLASS_VERSION_REVISIONS[major]
    if major > 52:
        return str(major - 44)
    return "1.0"


def parse_manifest_main_attributes(content: str) -> Dict[str, str]:
    """Parse the main section of a JAR manifest, joining continuation lines."""
    attributes: Dict[str, str] = {}
    lines: List[str] = []
    for raw in content.splitlines():
        if not raw.strip():
            # Blank line ends the main section
            break
        if raw.startswith(' ') and lines:
            lines[-1] += raw[1:]
        else:
            lines.append(raw)

    for line in lines:
        if ':' not in line:
            continue
        key, value = line.split(':', 1)
        attributes[key.strip().lower()] = value.strip()
    return attributes


class ZipJarInspector:
    """Reads entry, class and package counts plus build flags from a JAR-like archive."""

    def inspect(self, artifact: Artifact) -> JarMetadata:
        """
        Inspect the archive of an artifact.

        Raises:
            MissingArtifactFileError: If the artifact has no resolved file
            IntrospectionError: If the archive cannot be read
        """
        if artifact.file is None:
            raise MissingArtifactFileError(artifact.id)
        return self.inspect_file(artifact.file)

    def inspect_file(self, path: Path) -> JarMetadata:
        logger.debug(f"Inspecting archive {path}")
        try:
            with zipfile.ZipFile(path, 'r') as jar:
                return self._analyze(jar)
        except (OSError, EOFError, RuntimeError, NotImplementedError, zipfile.BadZipFile, zlib.error) as e:
            raise IntrospectionError(f"Unable to read archive {path}: {e}") from e

    def _analyze(self, jar: zipfile.ZipFile) -> JarMetadata:
        entries = jar.infolist()
        packages: Set[str] = set()
        num_classes = 0
        highest_major = 0
        debug_present = False

        for entry in entries:
            name = entry.filename
            if entry.is_dir() or not name.endswith('.class'):
                continue
            num_classes += 1
            if '/' in name:
                packages.add(name.rsplit('/', 1)[0].replace('/', '.'))
            else:
                packages.add('')

            data = jar.read(entry)
            major = self._class_major_version(data)
            if major is not None:
                highest_major = max(highest_major, major)
            if not debug_present and b'LocalVariableTable' in data:
                debug_present = True

        jdk_revision = revision_for_major_version(highest_major) if highest_major else None

        return JarMetadata(
            num_entries=len(entries),
            num_classes=num_classes,
            num_packages=len(packages),
            jdk_revision=jdk_revision,
            debug_present=debug_present,
            sealed=self._is_sealed(jar)
        )

    @staticmethod
    def _class_major_version(data: bytes) -> Optional[int]:
        if len(data) < 8 or data[:4] != CLASS_MAGIC:
            return None
        return struct.unpack('>H', data[6:8])[0]

    @staticmethod
    def _is_sealed(jar: zipfile.ZipFile) -> bool:
        try:
            content = jar.read(MANIFEST_PATH).decode('utf-8', errors='replace')
        except KeyError:
            return False
        attributes = parse_manifest_main_attributes(content)
        return attributes.get('sealed', '').lower() == 'true'
