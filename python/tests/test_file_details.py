"""Tests for the file details aggregation."""

from unittest.mock import Mock

import pytest

from depreport.exceptions import IntrospectionError
from depreport.file_details import FileDetailsAggregator, file_details_table, parse_jdk_revision
from depreport.jar_inspector import ZipJarInspector
from depreport.models import JarMetadata

from conftest import class_bytes, mark_encrypted


def _write(tmp_path, name, size):
    path = tmp_path / name
    path.write_bytes(b"\0" * size)
    return path


def _inspector(results):
    """Mock inspector answering by artifact id; exceptions are raised."""
    def inspect(artifact):
        result = results[artifact.artifact_id]
        if isinstance(result, Exception):
            raise result
        return result
    inspector = Mock()
    inspector.inspect.side_effect = inspect
    return inspector


class TestFileDetailsAggregator:
    """Tests for FileDetailsAggregator."""

    def test_totals_per_scope(self, tmp_path, make_artifact):
        a = make_artifact("a", file=_write(tmp_path, "a.jar", 1024))
        b = make_artifact("b", scope="test", file=_write(tmp_path, "b.jar", 2048))
        inspector = _inspector({
            "a": JarMetadata(10, 8, 2, "1.8", debug_present=True),
            "b": JarMetadata(5, 3, 1, "1.6"),
        })

        details = FileDetailsAggregator(inspector).aggregate([a, b])

        assert details.totals["dependencies"].render() == "2 (compile: 1, test: 1)"
        assert details.totals["size"].total == 3072
        assert details.totals["entries"].render() == "15 (compile: 10, test: 5)"
        assert details.totals["debug"].render() == "1 (compile: 1)"
        assert details.highest_jdk == 1.8
        assert details.has_sealed is False

    def test_artifact_without_file_is_skipped(self, tmp_path, make_artifact):
        inspector = _inspector({"a": JarMetadata(1, 1, 1)})
        details = FileDetailsAggregator(inspector).aggregate([
            make_artifact("a", file=_write(tmp_path, "a.jar", 10)),
            make_artifact("nofile"),
        ])
        assert [row.artifact.artifact_id for row in details.rows] == ["a"]
        assert details.totals["dependencies"].total == 1

    def test_inspection_failure_gives_degraded_row(self, tmp_path, make_artifact):
        good = make_artifact("good", file=_write(tmp_path, "good.jar", 10))
        bad = make_artifact("bad", file=_write(tmp_path, "bad.jar", 10))
        inspector = _inspector({"good": JarMetadata(1, 1, 1), "bad": IntrospectionError("corrupt")})

        details = FileDetailsAggregator(inspector).aggregate([bad, good])

        assert details.rows[0].error == "corrupt"
        assert details.rows[1].metadata is not None
        assert details.totals["dependencies"].total == 2
        assert details.totals["entries"].total == 1

    def test_unreadable_archive_entry_gives_degraded_row(self, make_jar, make_artifact):
        bad_path = make_jar("bad.jar", {'com/example/A.class': class_bytes(52)})
        mark_encrypted(bad_path, 'com/example/A.class')
        bad = make_artifact("bad", file=bad_path)
        good = make_artifact("good", file=make_jar("good.jar", {'com/example/B.class': class_bytes(52)}))

        details = FileDetailsAggregator(ZipJarInspector()).aggregate([bad, good])

        assert "bad.jar" in details.rows[0].error
        assert details.rows[0].metadata is None
        assert details.rows[1].error is None
        assert details.rows[1].metadata.num_classes == 1

    def test_entries_summed_across_same_scope(self, tmp_path, make_artifact):
        artifacts = [
            make_artifact("a", file=_write(tmp_path, "a.jar", 10)),
            make_artifact("b", file=_write(tmp_path, "b.jar", 10)),
            make_artifact("c", scope="test", file=_write(tmp_path, "c.jar", 10)),
        ]
        inspector = _inspector({
            "a": JarMetadata(10, 1, 1),
            "b": JarMetadata(20, 1, 1),
            "c": JarMetadata(30, 1, 1),
        })

        details = FileDetailsAggregator(inspector).aggregate(artifacts)

        assert details.totals["entries"].render() == "60 (compile: 30, test: 30)"

    def test_non_archive_is_not_inspected(self, tmp_path, make_artifact):
        pom = make_artifact("parent", type="pom", file=_write(tmp_path, "parent.pom", 100))
        inspector = Mock()

        details = FileDetailsAggregator(inspector).aggregate([pom])

        inspector.inspect.assert_not_called()
        assert details.rows[0].archive is False
        assert details.totals["size"].total == 100

    def test_archive_types_are_case_insensitive(self, make_artifact):
        aggregator = FileDetailsAggregator(Mock())
        assert aggregator.is_archive(make_artifact("web", type="WAR"))
        assert not aggregator.is_archive(make_artifact("parent", type="pom"))

    def test_sealed_counted_only_when_present(self, tmp_path, make_artifact):
        a = make_artifact("a", file=_write(tmp_path, "a.jar", 10))
        b = make_artifact("b", file=_write(tmp_path, "b.jar", 10))
        inspector = _inspector({"a": JarMetadata(1, 1, 1, sealed=True), "b": JarMetadata(1, 1, 1)})

        details = FileDetailsAggregator(inspector).aggregate([a, b])

        assert details.has_sealed is True
        assert details.totals["sealed"].render() == "1 (compile: 1)"

    def test_unparsable_revision_is_ignored(self, tmp_path, make_artifact):
        a = make_artifact("a", file=_write(tmp_path, "a.jar", 10))
        inspector = _inspector({"a": JarMetadata(1, 1, 1, jdk_revision="unknown")})
        details = FileDetailsAggregator(inspector).aggregate([a])
        assert details.highest_jdk == 0.0

    def test_concurrent_inspection_keeps_order(self, tmp_path, make_artifact):
        names = [f"lib{i}" for i in range(6)]
        artifacts = [make_artifact(n, file=_write(tmp_path, f"{n}.jar", 10)) for n in names]
        inspector = _inspector({n: JarMetadata(i, i, 1) for i, n in enumerate(names)})

        details = FileDetailsAggregator(inspector, max_workers=3).aggregate(artifacts)

        assert [row.artifact.artifact_id for row in details.rows] == names
        assert inspector.inspect.call_count == 6


class TestFileDetailsTable:
    """Tests for the rendered file details table."""

    def test_table_layout(self, tmp_path, make_artifact):
        a = make_artifact("a", file=_write(tmp_path, "a.jar", 512))
        bad = make_artifact("bad", file=_write(tmp_path, "bad.jar", 10))
        inspector = _inspector({"a": JarMetadata(12, 10, 3, "1.8"), "bad": IntrospectionError("corrupt")})
        details = FileDetailsAggregator(inspector).aggregate([a, bad])

        table = file_details_table(details)

        assert table.header == ["Filename", "Size", "Entries", "Classes", "Packages", "JDK Rev", "Debug"]
        assert table.rows[0] == ["a.jar", "0.50 KB", "12", "10", "3", "1.8", "release"]
        assert table.rows[1][:3] == ["org.example:bad:jar:1.0", str((tmp_path / "bad.jar").absolute()), "corrupt"]
        assert len(table.rows[1]) == len(table.header)
        assert table.total_header[0] == "Total"
        assert table.total_row[0] == "2 (compile: 2)"
        assert table.total_row[5] == "1.8"

    def test_sealed_column(self, tmp_path, make_artifact):
        a = make_artifact("a", file=_write(tmp_path, "a.jar", 10))
        details = FileDetailsAggregator(_inspector({"a": JarMetadata(1, 1, 1, sealed=True)})).aggregate([a])

        table = file_details_table(details)

        assert table.header[-1] == "Sealed"
        assert table.rows[0][-1] == "sealed"
        assert table.total_row[-1] == "1 (compile: 1)"


@pytest.mark.parametrize("revision,expected", [("1.8", 1.8), ("11", 11.0), (None, None), ("n/a", None)])
def test_parse_jdk_revision(revision, expected):
    assert parse_jdk_revision(revision) == expected
