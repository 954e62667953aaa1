"""
Package Record Model.

Defines the structured record produced for every binary package described by
a SRCINFO (or flattened PKGBUILD) blob. Records built from the same pkgbase
share epoch, pkgver and pkgrel; everything else may be overridden per package.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pkgbuild_parser.core.errors import ValidationError
from pkgbuild_parser.models.dependency import Dependency
from pkgbuild_parser.models.version import CompleteVersion, ReleaseOrdering, Version


class Arch(Enum):
    """Supported build architectures."""

    ANY = "any"
    I686 = "i686"
    X86_64 = "x86_64"
    ARMV5 = "armv5"
    ARMV6H = "armv6h"
    ARMV7H = "armv7h"

    @classmethod
    def parse(cls, literal: str) -> Arch:
        try:
            return cls(literal)
        except ValueError:
            raise ValidationError(f"invalid arch: {literal!r}") from None

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class PackageRecord:
    """
    One binary package built from a pkgbase.

    List-valued fields are tuples; a record is never mutated after parsing.
    Dependency-bearing fields (depends, makedepends, checkdepends) hold
    Dependency objects with same-name constraints already merged.
    """

    pkgname: str
    pkgbase: str
    pkgver: Version
    pkgrel: str = ""
    epoch: int = 0
    pkgdir: str = ""
    pkgdesc: str = ""
    arch: tuple[Arch, ...] = ()
    url: str = ""
    license: tuple[str, ...] = ()
    groups: tuple[str, ...] = ()
    depends: tuple[Dependency, ...] = ()
    optdepends: tuple[str, ...] = ()
    makedepends: tuple[Dependency, ...] = ()
    checkdepends: tuple[Dependency, ...] = ()
    provides: tuple[str, ...] = ()
    conflicts: tuple[str, ...] = ()
    replaces: tuple[str, ...] = ()
    backup: tuple[str, ...] = ()
    options: tuple[str, ...] = ()
    install: str = ""
    changelog: str = ""
    source: tuple[str, ...] = ()  # includes arch-scoped source_<arch> entries
    noextract: tuple[str, ...] = ()
    md5sums: tuple[str, ...] = ()
    sha1sums: tuple[str, ...] = ()
    sha224sums: tuple[str, ...] = ()
    sha256sums: tuple[str, ...] = ()
    sha384sums: tuple[str, ...] = ()
    sha512sums: tuple[str, ...] = ()
    validpgpkeys: tuple[str, ...] = ()

    @property
    def full_version(self) -> CompleteVersion:
        return CompleteVersion(version=self.pkgver, epoch=self.epoch, release=self.pkgrel)

    def version_string(self) -> str:
        """Render as ``epoch:pkgver-pkgrel``, epoch omitted when zero."""
        return str(self.full_version)

    def newer(self, other: PackageRecord, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        """True if this record has a higher epoch, then pkgver, then pkgrel."""
        return self.full_version.newer(other.full_version, ordering)

    def older(self, other: PackageRecord, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        return self.full_version.older(other.full_version, ordering)

    def equal(self, other: PackageRecord, ordering: ReleaseOrdering = ReleaseOrdering.VERSION) -> bool:
        return self.full_version.equal(other.full_version, ordering)

    def satisfies(self, dependency: Dependency) -> bool:
        """Check whether this package's version meets a constraint on it."""
        return dependency.satisfied_by(self.full_version)

    def to_dict(self) -> dict:
        """Serialize to JSON-compatible dictionary."""
        return {
            "pkgname": self.pkgname,
            "pkgbase": self.pkgbase,
            "version": self.version_string(),
            "pkgver": str(self.pkgver),
            "pkgrel": self.pkgrel,
            "epoch": self.epoch,
            "pkgdir": self.pkgdir,
            "pkgdesc": self.pkgdesc,
            "arch": [str(arch) for arch in self.arch],
            "url": self.url,
            "license": list(self.license),
            "groups": list(self.groups),
            "depends": [str(dep) for dep in self.depends],
            "optdepends": list(self.optdepends),
            "makedepends": [str(dep) for dep in self.makedepends],
            "checkdepends": [str(dep) for dep in self.checkdepends],
            "provides": list(self.provides),
            "conflicts": list(self.conflicts),
            "replaces": list(self.replaces),
            "backup": list(self.backup),
            "options": list(self.options),
            "install": self.install,
            "changelog": self.changelog,
            "source": list(self.source),
            "noextract": list(self.noextract),
            "md5sums": list(self.md5sums),
            "sha1sums": list(self.sha1sums),
            "sha224sums": list(self.sha224sums),
            "sha256sums": list(self.sha256sums),
            "sha384sums": list(self.sha384sums),
            "sha512sums": list(self.sha512sums),
            "validpgpkeys": list(self.validpgpkeys),
        }
