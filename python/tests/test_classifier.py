"""Tests for scope grouping and ordering."""

from depreport.classifier import group_by_scope, has_classifier, has_optional, sort_artifacts
from depreport.models import Scope


class TestGroupByScope:
    """Tests for scope buckets."""

    def test_buckets_follow_report_order(self, make_artifact):
        a = make_artifact("a")
        b = make_artifact("b", optional=True)
        c = make_artifact("c", scope="test")

        grouped = group_by_scope([c, b, a])

        assert list(grouped) == [Scope.COMPILE, Scope.TEST]
        assert grouped[Scope.COMPILE] == [a, b]
        assert grouped[Scope.TEST] == [c]

    def test_empty_buckets_are_omitted(self, make_artifact):
        grouped = group_by_scope([make_artifact("x", scope="provided")])
        assert list(grouped) == [Scope.PROVIDED]

    def test_runtime_precedes_test(self, make_artifact):
        grouped = group_by_scope([make_artifact("t", scope="test"), make_artifact("r", scope="runtime")])
        assert list(grouped) == [Scope.RUNTIME, Scope.TEST]

    def test_no_artifacts(self):
        assert group_by_scope([]) == {}


class TestSortArtifacts:
    """Tests for display ordering."""

    def test_optional_artifacts_sort_last(self, make_artifact):
        optional = make_artifact("alpha", optional=True)
        required = make_artifact("zeta")
        assert sort_artifacts([optional, required]) == [required, optional]

    def test_coordinate_order_within_group(self, make_artifact):
        artifacts = [make_artifact("b"), make_artifact("a", version="2.0"), make_artifact("a", version="1.0")]
        assert [(a.artifact_id, a.version) for a in sort_artifacts(artifacts)] == [
            ("a", "1.0"), ("a", "2.0"), ("b", "1.0")
        ]


class TestColumnFlags:
    """Tests for optional column detection."""

    def test_has_classifier(self, make_artifact):
        assert not has_classifier([make_artifact("a")])
        assert has_classifier([make_artifact("a"), make_artifact("b", classifier="tests")])

    def test_has_optional(self, make_artifact):
        assert not has_optional([make_artifact("a")])
        assert has_optional([make_artifact("a", optional=True)])
