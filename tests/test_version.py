"""Tests for version validation and ordering."""

import itertools

import pytest

from pkgbuild_parser.core.errors import ConstraintError, ValidationError
from pkgbuild_parser.models.version import (
    CompleteVersion,
    ReleaseOrdering,
    Version,
    is_valid_version,
    vercmp,
)


# ═══════════════════════════════════════════
# Version Validity
# ═══════════════════════════════════════════


class TestVersionValidity:
    @pytest.mark.parametrize("text", ["1.0beta", "1.0.0.0.2", "a.3_4", "A.2", "1+2", "2.0.0.α.r29"])
    def test_valid(self, text):
        assert is_valid_version(text)
        assert str(Version(text)) == text

    @pytest.mark.parametrize("text", ["", "_1.2", ".2", "a.2Ã˜", "1.?", "1.-", "1:2", "1-2"])
    def test_invalid(self, text):
        assert not is_valid_version(text)
        with pytest.raises(ConstraintError):
            Version(text)


# ═══════════════════════════════════════════
# Segment Comparison
# ═══════════════════════════════════════════


class TestVercmp:
    def test_equal_strings(self):
        assert vercmp("1.0", "1.0") == 0

    def test_numeric_beats_alpha(self):
        assert vercmp("1.0.1", "1.0.a") == 1
        assert vercmp("1.0.a", "1.0.1") == -1

    def test_remaining_alpha_segment_is_newer(self):
        assert vercmp("1.0a", "1.0") == 1
        assert vercmp("1.0.a", "1.0") == 1

    def test_leading_zeros_stripped(self):
        assert vercmp("11", "012") == -1
        assert vercmp("012", "11") == 1
        assert vercmp("1.01", "1.1") == 0
        assert vercmp("1.000", "1.0") == 0

    def test_numeric_segment_dominates_length(self):
        assert vercmp("r1000.b481c3c", "r37.e481c3c") == 1
        assert vercmp("r37.e481c3c", "r36.f481c3c") == 1

    def test_separators_only_segment(self):
        assert vercmp("1.0", "1.0.") == 0
        assert vercmp("1.0", "1_0") == 0
        assert vercmp("1..0", "1.0") == 0

    def test_alpha_segments_compare_by_code_point(self):
        assert vercmp("1.0beta", "1.0b") == 1
        assert vercmp("1.0p", "1.0pre") == -1
        assert vercmp("1.0rc", "1.0pre") == 1

    def test_numeric_ordering_list(self):
        ordered = [
            "20141130",
            "012",
            "11",
            "3.0.0",
            "2.011",
            "2.03",
            "2.0",
            "1.2",
            "1.1.1",
            "1.1",
            "1.0.1",
            "1.0.0.0.0.0",
            "1.0",
            "1",
        ]
        for i, newer in enumerate(ordered):
            for older in ordered[i + 1 :]:
                assert vercmp(newer, older) == 1, f"{newer} should be newer than {older}"
                assert vercmp(older, newer) == -1, f"{older} should be older than {newer}"

    def test_big_numbers(self):
        assert vercmp("1.99999999999999999999", "1.99999999999999999998") == 1


# ═══════════════════════════════════════════
# CompleteVersion Parsing & Rendering
# ═══════════════════════════════════════════


class TestCompleteVersionParsing:
    def test_full_form(self):
        version = CompleteVersion.parse("42:3.14-1")
        assert version.epoch == 42
        assert version.version == Version("3.14")
        assert str(version.version) == "3.14"
        assert version.release == "1"
        assert str(version) == "42:3.14-1"

    def test_zero_epoch_omitted(self):
        version = CompleteVersion(version=Version("1.0"), epoch=0, release="1")
        assert str(version) == "1.0-1"
        assert str(CompleteVersion.parse(str(version))) == "1.0-1"

    def test_explicit_zero_epoch_renders_without_prefix(self):
        assert str(CompleteVersion.parse("0:1.2")) == "1.2"

    def test_missing_release(self):
        version = CompleteVersion.parse("1.2.3")
        assert version.epoch == 0
        assert version.release == ""
        assert str(version) == "1.2.3"

    def test_non_integer_release(self):
        assert CompleteVersion.parse("1:2-1.5").release == "1.5"

    def test_unicode_version(self):
        version = CompleteVersion.parse("13:2.0.0.α.r29.g18fc492-1")
        assert version.epoch == 13
        assert str(version.version) == "2.0.0.α.r29.g18fc492"
        assert version.release == "1"

    @pytest.mark.parametrize(
        "text",
        ["1:2:3", "1.0-1-2", "a:1.0", "1:", "-1", "1.0-", "1.0-1?", "", ":1.0"],
    )
    def test_malformed(self, text):
        with pytest.raises(ConstraintError):
            CompleteVersion.parse(text)


# ═══════════════════════════════════════════
# CompleteVersion Ordering
# ═══════════════════════════════════════════


@pytest.fixture
def reference():
    return CompleteVersion(version=Version("2"), epoch=1, release="2")


class TestCompleteVersionOrdering:
    @pytest.mark.parametrize("text", ["0:3-4", "1:2-1", "1:2-1.5", "1:1-1", "1:2"])
    def test_older_versions(self, reference, text):
        other = CompleteVersion.parse(text)
        assert reference.newer(other)
        assert not reference.older(other)
        assert other < reference

    @pytest.mark.parametrize("text", ["2:1-1", "1:3-1", "1:2-3", "1:2-2.1"])
    def test_newer_versions(self, reference, text):
        other = CompleteVersion.parse(text)
        assert reference.older(other)
        assert not reference.newer(other)
        assert other > reference

    def test_equal_versions(self, reference):
        other = CompleteVersion.parse("1:2-2")
        assert reference.equal(other)
        assert reference == other
        assert hash(reference) == hash(other)

    def test_equal_ignores_leading_zeros(self):
        a = CompleteVersion.parse("1.0-1")
        b = CompleteVersion.parse("1.00-01")
        assert a == b
        assert hash(a) == hash(b)

    def test_not_newer_or_older_than_itself(self, reference):
        assert not reference.newer(reference)
        assert not reference.older(reference)
        assert reference.equal(reference)

    def test_exactly_one_relation_holds(self):
        texts = ["1.0", "1.0-1", "1:1.0", "1.0a", "1.0.1", "2", "0.9-3", "1.0-1.5", "r37.e481c3c"]
        versions = [CompleteVersion.parse(t) for t in texts]
        for a, b in itertools.product(versions, repeat=2):
            relations = [a.newer(b), a.older(b), a.equal(b)]
            assert relations.count(True) == 1, f"{a} vs {b}"

    def test_transitive(self):
        texts = ["1.0", "1.0-1", "1:1.0", "1.0a", "1.0.1", "2", "0.9-3", "1.0-1.5"]
        versions = [CompleteVersion.parse(t) for t in texts]
        for a, b, c in itertools.product(versions, repeat=3):
            if a.newer(b) and b.newer(c):
                assert a.newer(c)

    def test_sorting(self):
        versions = [CompleteVersion.parse(t) for t in ["1:1.0", "2.0-1", "1.0-2", "1.0-1"]]
        assert [str(v) for v in sorted(versions)] == ["1.0-1", "1.0-2", "2.0-1", "1:1.0"]


# ═══════════════════════════════════════════
# Release Ordering Modes
# ═══════════════════════════════════════════


class TestReleaseOrdering:
    def test_integer_mode(self):
        a = CompleteVersion.parse("1.0-10")
        b = CompleteVersion.parse("1.0-9")
        assert a.newer(b, ReleaseOrdering.INTEGER)
        assert a.newer(b, ReleaseOrdering.VERSION)

    def test_integer_mode_missing_release_counts_as_zero(self):
        a = CompleteVersion.parse("1.0")
        b = CompleteVersion.parse("1.0-0")
        assert a.equal(b, ReleaseOrdering.INTEGER)
        assert a.older(b, ReleaseOrdering.VERSION)

    def test_integer_mode_rejects_fractional_release(self):
        a = CompleteVersion.parse("1.0-1.5")
        b = CompleteVersion.parse("1.0-1")
        assert a.newer(b, ReleaseOrdering.VERSION)
        with pytest.raises(ValidationError):
            a.compare(b, ReleaseOrdering.INTEGER)
