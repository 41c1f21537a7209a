"""Tests for input parsers."""

import json

import pytest

from depreport.exceptions import InputFormatError
from depreport.models import Scope
from depreport.parsers import (
    detect_format, load_input, load_resolved_project, parse_coordinates, parse_maven_tree_text,
    parse_resolved_project
)

TREE_OUTPUT = """[INFO] Scanning for projects...
[INFO]
[INFO] --- maven-dependency-plugin:3.6.0:tree (default-cli) @ demo ---
[INFO] com.example:demo:jar:1.0-SNAPSHOT
[INFO] +- org.springframework:spring-core:jar:5.3.39:compile
[INFO] |  \\- org.springframework:spring-jcl:jar:5.3.39:compile
[INFO] +- com.google.code.findbugs:jsr305:jar:3.0.2:compile (optional)
[INFO] \\- junit:junit:jar:4.13.2:test
[INFO]    +- org.hamcrest:hamcrest-core:jar:1.3:test
[INFO]    \\- org.example:fixtures:jar:tests:1.0:test
[INFO] ------------------------------------------------------------------------
[INFO] BUILD SUCCESS
"""


def _document():
    return {
        "project": {
            "groupId": "com.example",
            "artifactId": "app",
            "version": "1.0",
            "name": "Example App",
            "repositories": [
                {"id": "central", "url": "https://repo.maven.apache.org/maven2", "snapshots": False}
            ],
        },
        "dependencies": [
            {"groupId": "org.slf4j", "artifactId": "slf4j-api", "version": "2.0.9",
             "file": "libs/slf4j-api-2.0.9.jar", "direct": True},
            {"purl": "pkg:maven/junit/junit@4.13.2", "scope": "test", "direct": True},
            {"groupId": "org.hamcrest", "artifactId": "hamcrest-core", "version": "1.3", "scope": "test"},
        ],
        "tree": {
            "groupId": "com.example", "artifactId": "app", "version": "1.0", "type": "pom",
            "children": [
                {"groupId": "org.slf4j", "artifactId": "slf4j-api", "version": "2.0.9"},
                {"purl": "pkg:maven/junit/junit@4.13.2", "children": [
                    {"groupId": "org.hamcrest", "artifactId": "hamcrest-core", "version": "1.3"}
                ]},
            ],
        },
        "projects": {
            "org.slf4j:slf4j-api:2.0.9": {
                "name": "SLF4J API Module",
                "url": "http://www.slf4j.org",
                "licenses": [{"name": "MIT License", "url": "http://www.opensource.org/licenses/mit-license.php"}],
            }
        },
    }


class TestResolvedProjectDocument:
    """Tests for the JSON input document."""

    def test_full_document(self, tmp_path):
        project = parse_resolved_project(_document(), base_dir=tmp_path)

        assert project.artifact.id == "com.example:app:pom:1.0"
        assert project.name == "Example App"
        assert [a.artifact_id for a in project.direct] == ["slf4j-api", "junit"]
        assert [a.artifact_id for a in project.transitive] == ["hamcrest-core"]
        assert project.all[0].file == tmp_path / "libs" / "slf4j-api-2.0.9.jar"
        assert project.all[1].scope is Scope.TEST
        assert project.repositories[0].snapshots_enabled is False
        assert project.projects["org.slf4j:slf4j-api:2.0.9"].licenses[0].name == "MIT License"

    def test_tree_reuses_flat_list_artifacts(self):
        project = parse_resolved_project(_document())
        junit = project.tree.children[1]
        assert junit.artifact.scope is Scope.TEST
        assert junit.children[0].artifact is project.all[2]

    def test_direct_defaults_to_tree_children(self):
        document = _document()
        for entry in document["dependencies"]:
            entry.pop("direct", None)
        project = parse_resolved_project(document)
        assert [a.artifact_id for a in project.direct] == ["slf4j-api", "junit"]

    def test_missing_project_is_rejected(self):
        with pytest.raises(InputFormatError):
            parse_resolved_project({"dependencies": []})

    def test_incomplete_coordinates_are_rejected(self):
        document = _document()
        document["dependencies"].append({"groupId": "org.example"})
        with pytest.raises(InputFormatError, match="artifactId"):
            parse_resolved_project(document)

    def test_unknown_scope_is_rejected(self):
        document = _document()
        document["dependencies"][0]["scope"] = "bogus"
        with pytest.raises(InputFormatError):
            parse_resolved_project(document)

    def test_non_maven_purl_is_rejected(self):
        document = _document()
        document["dependencies"].append({"purl": "pkg:npm/lodash@4.17.21"})
        with pytest.raises(InputFormatError, match="maven"):
            parse_resolved_project(document)

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "resolved.json"
        path.write_text(json.dumps(_document()))

        project = load_resolved_project(str(path))

        assert project.all[0].file == tmp_path / "libs" / "slf4j-api-2.0.9.jar"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "resolved.json"
        path.write_text("{not json")
        with pytest.raises(InputFormatError, match="Invalid JSON"):
            load_resolved_project(str(path))


class TestMavenTreeOutput:
    """Tests for mvn dependency:tree output parsing."""

    def test_tree_structure(self):
        project = parse_maven_tree_text(TREE_OUTPUT)

        assert project.artifact.id == "com.example:demo:jar:1.0-SNAPSHOT"
        assert [a.artifact_id for a in project.direct] == ["spring-core", "jsr305", "junit"]
        assert len(project.all) == 6
        junit = project.tree.children[2]
        assert [c.artifact.artifact_id for c in junit.children] == ["hamcrest-core", "fixtures"]

    def test_scope_optional_and_classifier(self):
        project = parse_maven_tree_text(TREE_OUTPUT)
        by_id = {a.artifact_id: a for a in project.all}

        assert by_id["jsr305"].optional is True
        assert by_id["spring-jcl"].scope is Scope.COMPILE
        assert by_id["hamcrest-core"].scope is Scope.TEST
        assert by_id["fixtures"].classifier == "tests"
        assert by_id["fixtures"].version == "1.0"

    def test_input_without_tree(self):
        with pytest.raises(InputFormatError, match="No dependency tree"):
            parse_maven_tree_text("[INFO] BUILD FAILURE\n")

    def test_bad_coordinates(self):
        with pytest.raises(InputFormatError):
            parse_coordinates("just-a-name")

    def test_load_input_dispatches_on_extension(self, tmp_path):
        path = tmp_path / "tree.txt"
        path.write_text(TREE_OUTPUT)

        assert detect_format(str(path)) == "tree"
        assert detect_format("resolved.JSON") == "json"
        assert load_input(str(path)).artifact.artifact_id == "demo"
