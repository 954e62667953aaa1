"""
Version Model — Arch-style version ordering.

A package version is ``[epoch:]pkgver[-pkgrel]``. Versions are ordered
segment-wise: each string is split into maximal runs of digits and maximal
runs of other alphanumeric characters, with every non-alphanumeric character
acting purely as a separator. Digit runs compare numerically, other runs
compare by code point, and a digit run always beats a non-digit run.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering

from pkgbuild_parser.core.errors import ConstraintError, ValidationError

LESS = -1
EQUAL = 0
GREATER = 1


class ReleaseOrdering(Enum):
    """How the release (pkgrel) part takes part in ordering."""

    VERSION = "version"  # full segment-wise algorithm, allows "1.5"
    INTEGER = "integer"  # legacy: plain non-negative integer count


def is_valid_version(text: str) -> bool:
    """Check the pkgver charset: alphanumeric start, then alphanumerics, '_', '+' or '.'."""
    if not text or not text[0].isalnum():
        return False
    return all(ch.isalnum() or ch in "_+." for ch in text[1:])


def _segments(text: str) -> list[str]:
    """Split into maximal digit runs and maximal non-digit alphanumeric runs."""
    segments: list[str] = []
    current = ""
    for ch in text:
        if not ch.isalnum():
            if current:
                segments.append(current)
                current = ""
            continue
        if current and current[-1].isdecimal() != ch.isdecimal():
            segments.append(current)
            current = ""
        current += ch
    if current:
        segments.append(current)
    return segments


def _compare_segment(a: str, b: str) -> int:
    a_numeric = a.isdecimal()
    b_numeric = b.isdecimal()
    if a_numeric and b_numeric:
        # int() strips leading zeros; an all-zero run is zero
        a_value, b_value = int(a), int(b)
        return (a_value > b_value) - (a_value < b_value)
    if a_numeric != b_numeric:
        return GREATER if a_numeric else LESS
    return (a > b) - (a < b)


def vercmp(a: str, b: str) -> int:
    """
    Compare two bare version strings.

    Returns:
        -1 if ``a`` is older, 0 if equal, 1 if ``a`` is newer.
    """
    if a == b:
        return EQUAL

    a_segments = _segments(a)
    b_segments = _segments(b)
    for a_segment, b_segment in zip(a_segments, b_segments):
        result = _compare_segment(a_segment, b_segment)
        if result != EQUAL:
            return result

    # whichever side still has an alphanumeric segment left is newer
    if len(a_segments) > len(b_segments):
        return GREATER
    if len(a_segments) < len(b_segments):
        return LESS
    return EQUAL


def _sort_key(text: str) -> tuple:
    return tuple((1, int(s)) if s.isdecimal() else (0, s) for s in _segments(text))


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A validated upstream version string (pkgver)."""

    value: str

    def __post_init__(self):
        if not is_valid_version(self.value):
            raise ConstraintError(f"invalid version string: {self.value!r}")

    def compare(self, other: Version) -> int:
        return vercmp(self.value, other.value)

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == EQUAL

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare(other) == LESS

    def __hash__(self):
        return hash(_sort_key(self.value))

    def __str__(self):
        return self.value


def _release_as_integer(release: str) -> int:
    if not release:
        return 0
    if not release.isdecimal():
        raise ValidationError(f"release {release!r} is not an integer")
    return int(release)


def compare_release(a: str, b: str, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> int:
    """Compare two release strings; an empty release sorts before any present one."""
    if ordering is ReleaseOrdering.INTEGER:
        a_value, b_value = _release_as_integer(a), _release_as_integer(b)
        return (a_value > b_value) - (a_value < b_value)
    if a == b:
        return EQUAL
    if not a:
        return LESS
    if not b:
        return GREATER
    return vercmp(a, b)


@total_ordering
@dataclass(frozen=True, eq=False)
class CompleteVersion:
    """
    A full package version: epoch, upstream version and release.

    ``str()`` renders ``epoch:version-release`` with the epoch omitted when it
    is zero and the release omitted when it is empty, so parsing a rendering
    and rendering again is the identity.
    """

    version: Version
    epoch: int = 0
    release: str = ""

    def __post_init__(self):
        if self.epoch < 0:
            raise ConstraintError(f"invalid epoch: {self.epoch}")
        if self.release and not is_valid_version(self.release):
            raise ConstraintError(f"invalid release: {self.release!r}")

    @classmethod
    def parse(cls, text: str) -> CompleteVersion:
        """
        Parse ``[epoch:]version[-release]``.

        Raises:
            ConstraintError: more than one ':' or '-', a non-numeric epoch,
                or a version/release outside the version charset.
        """
        epoch = 0
        parts = text.split(":")
        if len(parts) > 2:
            raise ConstraintError(f"invalid version format: {text!r}")
        if len(parts) == 2:
            if not parts[0].isdecimal():
                raise ConstraintError(f"invalid epoch in version: {text!r}")
            epoch = int(parts[0])

        parts = parts[-1].split("-")
        if len(parts) > 2:
            raise ConstraintError(f"invalid version format: {text!r}")
        release = parts[1] if len(parts) == 2 else ""
        if len(parts) == 2 and not release:
            raise ConstraintError(f"empty release in version: {text!r}")

        return cls(version=Version(parts[0]), epoch=epoch, release=release)

    def compare(self, other: CompleteVersion, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> int:
        """Epoch first, then version, then release."""
        if self.epoch != other.epoch:
            return GREATER if self.epoch > other.epoch else LESS
        result = self.version.compare(other.version)
        if result != EQUAL:
            return result
        return compare_release(self.release, other.release, ordering)

    def newer(self, other: CompleteVersion, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        return self.compare(other, ordering) == GREATER

    def older(self, other: CompleteVersion, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        return self.compare(other, ordering) == LESS

    def equal(self, other: CompleteVersion, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        return self.compare(other, ordering) == EQUAL

    def __eq__(self, other):
        if not isinstance(other, CompleteVersion):
            return NotImplemented
        return self.compare(other) == EQUAL

    def __lt__(self, other):
        if not isinstance(other, CompleteVersion):
            return NotImplemented
        return self.compare(other) == LESS

    def __hash__(self):
        return hash((self.epoch, _sort_key(self.version.value), self.release and _sort_key(self.release)))

    def __str__(self):
        rendered = str(self.version)
        if self.epoch:
            rendered = f"{self.epoch}:{rendered}"
        if self.release:
            rendered = f"{rendered}-{self.release}"
        return rendered

    def __repr__(self):
        return f"CompleteVersion({str(self)!r})"
