"""
Dependency Model — named version constraints.

A dependency is a package name optionally bounded below and/or above by a
CompleteVersion, each bound either inclusive or strict. Constraints are
written the way PKGBUILDs write them (``foo``, ``foo>=1.2``, ``foo=1:2.0-3``)
and two constraints on the same name can be intersected with ``restrict``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from pkgbuild_parser.core.errors import ConstraintError
from pkgbuild_parser.models.version import EQUAL, GREATER, LESS, CompleteVersion, compare_release

logger = logging.getLogger(__name__)

# Longest operators first so "<=" is not read as "<"
OPERATORS = ("==", "<=", ">=", "=", "<", ">")


def is_valid_name_char(ch: str) -> bool:
    """Package names use lowercase ASCII letters, digits and '@._+-'."""
    return ("a" <= ch <= "z") or ("0" <= ch <= "9") or ch in "@._+-"


def is_valid_name(name: str) -> bool:
    if not name or name[0] == "-":
        return False
    return all(is_valid_name_char(ch) for ch in name)


@dataclass(frozen=True)
class Bound:
    """One side of a version range."""

    version: CompleteVersion
    strict: bool = False


def _compare_to_bound(version: CompleteVersion, bound: CompleteVersion) -> int:
    """Like CompleteVersion.compare, but a release missing on either side is not compared."""
    if version.epoch != bound.epoch:
        return GREATER if version.epoch > bound.epoch else LESS
    result = version.version.compare(bound.version)
    if result != EQUAL or not version.release or not bound.release:
        return result
    return compare_release(version.release, bound.release)


def _tighter_on_tie(a: Bound, b: Bound) -> Bound:
    """
    Pick between two bounds that compare equal once a missing release is ignored.

    A strict bound excludes more than an inclusive one. Between two strict
    bounds the one without a release excludes every release of that version;
    between two inclusive bounds the one with a release excludes the lower
    releases.
    """
    if a.strict != b.strict:
        return a if a.strict else b
    if a.strict:
        return b if a.version.release else a
    return a if a.version.release else b


def _tighter_min(a: Bound | None, b: Bound | None) -> Bound | None:
    if a is None or b is None:
        return a or b
    result = _compare_to_bound(a.version, b.version)
    if result == EQUAL:
        return _tighter_on_tie(a, b)
    return a if result == GREATER else b


def _tighter_max(a: Bound | None, b: Bound | None) -> Bound | None:
    if a is None or b is None:
        return a or b
    result = _compare_to_bound(a.version, b.version)
    if result == EQUAL:
        return _tighter_on_tie(a, b)
    return a if result == LESS else b


@dataclass(frozen=True)
class Dependency:
    """A named constraint with optional minimum and maximum version bounds."""

    name: str
    min: Bound | None = None
    max: Bound | None = None

    @classmethod
    def parse(cls, text: str) -> Dependency:
        return parse_constraint(text)

    def satisfied_by(self, version: CompleteVersion) -> bool:
        """
        Check a concrete version against both bounds.

        A range whose minimum lies above its maximum is satisfied by nothing.
        """
        if self.min is not None:
            result = _compare_to_bound(version, self.min.version)
            if result == LESS or (result == EQUAL and self.min.strict):
                return False
        if self.max is not None:
            result = _compare_to_bound(version, self.max.version)
            if result == GREATER or (result == EQUAL and self.max.strict):
                return False
        return True

    def restrict(self, other: Dependency) -> Dependency:
        """Intersect two constraints on the same name into the tightest range."""
        if other.name != self.name:
            raise ConstraintError(f"cannot restrict {self.name!r} with a constraint on {other.name!r}")
        return Dependency(
            name=self.name,
            min=_tighter_min(self.min, other.min),
            max=_tighter_max(self.max, other.max),
        )

    def is_satisfiable(self) -> bool:
        """False when the bounds describe an empty range."""
        if self.min is None or self.max is None:
            return True
        result = _compare_to_bound(self.min.version, self.max.version)
        if result == EQUAL:
            return not (self.min.strict or self.max.strict)
        return result == LESS

    def constraints(self) -> list[str]:
        """Canonical constraint strings equivalent to this dependency."""
        if self.min is None and self.max is None:
            return [self.name]
        if (
            self.min is not None
            and self.max is not None
            and not self.min.strict
            and not self.max.strict
            and self.min.version == self.max.version
        ):
            return [f"{self.name}={self.min.version}"]
        parts = []
        if self.min is not None:
            parts.append(f"{self.name}{'>' if self.min.strict else '>='}{self.min.version}")
        if self.max is not None:
            parts.append(f"{self.name}{'<' if self.max.strict else '<='}{self.max.version}")
        return parts

    def __str__(self):
        return ", ".join(self.constraints())


def parse_constraint(text: str) -> Dependency:
    """
    Parse ``name[<op><version>]`` where op is one of ==, =, <=, >=, <, >.

    Raises:
        ConstraintError: empty or separator-led name, unknown operator, or a
            malformed version.
    """
    if not text or text[0] == "-":
        raise ConstraintError(f"invalid dependency name in {text!r}")

    end = 0
    while end < len(text) and is_valid_name_char(text[end]):
        end += 1
    name, rest = text[:end], text[end:]
    if not name:
        raise ConstraintError(f"invalid dependency name in {text!r}")
    if not rest:
        return Dependency(name=name)

    operator = next((op for op in OPERATORS if rest.startswith(op)), None)
    if operator is None:
        raise ConstraintError(f"invalid version operator in {text!r}")
    version = CompleteVersion.parse(rest[len(operator):])

    match operator:
        case "==" | "=":
            bound = Bound(version)
            return Dependency(name=name, min=bound, max=bound)
        case "<=":
            return Dependency(name=name, max=Bound(version))
        case ">=":
            return Dependency(name=name, min=Bound(version))
        case "<":
            return Dependency(name=name, max=Bound(version, strict=True))
        case ">":
            return Dependency(name=name, min=Bound(version, strict=True))


def satisfies(version: CompleteVersion, dependency: Dependency) -> bool:
    return dependency.satisfied_by(version)


def restrict(a: Dependency, b: Dependency) -> Dependency:
    return a.restrict(b)


class DependencyList:
    """
    Ordered, name-unique collection of dependencies.

    Adding a constraint on a name that is already present narrows the existing
    entry with ``restrict`` instead of appending a duplicate.
    """

    def __init__(self, dependencies: Iterable[Dependency] = ()):
        self._by_name: dict[str, Dependency] = {}
        for dependency in dependencies:
            self.add(dependency)

    def add(self, dependency: Dependency | str) -> Dependency:
        if isinstance(dependency, str):
            dependency = parse_constraint(dependency)
        existing = self._by_name.get(dependency.name)
        if existing is not None:
            dependency = existing.restrict(dependency)
            logger.debug(f"[DEPS] Merged constraint on {dependency.name}: {dependency}")
        self._by_name[dependency.name] = dependency
        return dependency

    def get(self, name: str) -> Dependency | None:
        return self._by_name.get(name)

    def copy(self) -> DependencyList:
        return DependencyList(self._by_name.values())

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[Dependency]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    def __repr__(self):
        return f"DependencyList({list(self._by_name.values())!r})"


def parse_dependencies(texts: Iterable[str]) -> DependencyList:
    """Parse constraint strings into a DependencyList, merging repeated names."""
    dependencies = DependencyList()
    for text in texts:
        dependencies.add(text)
    return dependencies
