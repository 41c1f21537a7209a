"""Shared fixtures for depreport tests."""

import struct
import zipfile
from pathlib import Path
from typing import Dict, Optional

import pytest

from depreport.exceptions import ProjectLookupError
from depreport.models import Artifact, License, ProjectMetadata


def class_bytes(major: int, debug: bool = False) -> bytes:
    """Minimal class file content: magic, minor and major version, optional debug attribute name."""
    data = b'\xca\xfe\xba\xbe' + struct.pack('>HH', 0, major)
    if debug:
        data += b'\x00\x12LocalVariableTable'
    return data + b'\x00' * 16


@pytest.fixture
def make_artifact():
    """Factory building artifacts from short coordinates."""
    def _make(artifact_id: str, version: str = "1.0", scope: str = "compile",
              group_id: str = "org.example", **kwargs) -> Artifact:
        return Artifact(group_id=group_id, artifact_id=artifact_id, version=version, scope=scope, **kwargs)
    return _make


@pytest.fixture
def make_jar(tmp_path):
    """Factory writing a JAR with the given class files and optional manifest."""
    def _make(name: str, classes: Dict[str, bytes], manifest: Optional[str] = None,
              extra: Optional[Dict[str, bytes]] = None) -> Path:
        path = tmp_path / name
        with zipfile.ZipFile(path, 'w') as jar:
            if manifest is not None:
                jar.writestr('META-INF/MANIFEST.MF', manifest)
            for entry, data in classes.items():
                jar.writestr(entry, data)
            for entry, data in (extra or {}).items():
                jar.writestr(entry, data)
        return path
    return _make


class FakeLookup:
    """Project lookup serving prepared metadata and counting calls."""

    def __init__(self, projects: Optional[Dict[str, ProjectMetadata]] = None):
        self.projects = projects or {}
        self.calls = []

    def project_for(self, artifact):
        self.calls.append(artifact.gav)
        project = self.projects.get(artifact.gav)
        if project is None:
            raise ProjectLookupError(artifact.gav, "not found")
        return project


@pytest.fixture
def fake_lookup():
    return FakeLookup


def project(name: str, *license_names: str, url: Optional[str] = None, repositories=None) -> ProjectMetadata:
    return ProjectMetadata(
        name=name,
        url=url,
        licenses=[License(name=n) for n in license_names],
        repositories=list(repositories or [])
    )


def _local_header_offset(path: Path, entry: str) -> int:
    with zipfile.ZipFile(path) as jar:
        return jar.getinfo(entry).header_offset


def corrupt_entry(path: Path, entry: str) -> None:
    """Overwrite the start of an entry's compressed data with 0xff bytes."""
    data = bytearray(path.read_bytes())
    offset = _local_header_offset(path, entry)
    name_length, extra_length = struct.unpack('<HH', data[offset + 26:offset + 30])
    start = offset + 30 + name_length + extra_length
    data[start:start + 4] = b'\xff' * 4
    path.write_bytes(bytes(data))


def mark_encrypted(path: Path, entry: str) -> None:
    """Set the encryption flag of an entry in both its local and central directory headers."""
    data = bytearray(path.read_bytes())
    data[_local_header_offset(path, entry) + 6] |= 0x01
    name = entry.encode('utf-8')
    position = data.find(b'PK\x01\x02')
    while position != -1:
        name_length = struct.unpack('<H', data[position + 28:position + 30])[0]
        if data[position + 46:position + 46 + name_length] == name:
            data[position + 8] |= 0x01
            break
        position = data.find(b'PK\x01\x02', position + 4)
    path.write_bytes(bytes(data))
