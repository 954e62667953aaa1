"""
SRCINFO Record Builder.

Consumes the lexer's token stream and builds one PackageRecord per pkgname
section. A pkgbase section accumulates the shared fields; each pkgname
section starts from a copy of the base fields assigned so far and may
override any of them except epoch, pkgver and pkgrel. Those three always
belong to the base and are read from its final state, so every package of a
base shares one version whatever the line order.

Architecture-scoped keys (``source_x86_64``, ``sha256sums_i686``, ...) are
appended to their unscoped field: the record does not keep the scoping.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

from pkgbuild_parser.core.errors import TokenizeError, ValidationError
from pkgbuild_parser.models.dependency import DependencyList, is_valid_name
from pkgbuild_parser.models.package import Arch, PackageRecord
from pkgbuild_parser.models.version import Version, is_valid_version
from pkgbuild_parser.parsers.lexer import Token, TokenKind, TokenStream, tokenize

logger = logging.getLogger(__name__)


class FieldType(Enum):
    SCALAR = "scalar"
    LIST = "list"
    DEPENDENCIES = "dependencies"


# Fields that always apply to the pkgbase accumulator
BASE_ONLY = frozenset({TokenKind.PKGVER, TokenKind.PKGREL, TokenKind.EPOCH})

SCALAR_FIELDS = frozenset(
    {
        TokenKind.PKGVER,
        TokenKind.PKGREL,
        TokenKind.EPOCH,
        TokenKind.PKGDIR,
        TokenKind.PKGDESC,
        TokenKind.URL,
        TokenKind.INSTALL,
        TokenKind.CHANGELOG,
    }
)

DEPENDENCY_FIELDS = frozenset({TokenKind.DEPENDS, TokenKind.MAKEDEPENDS, TokenKind.CHECKDEPENDS})


def field_type(kind: TokenKind) -> FieldType:
    if kind in SCALAR_FIELDS:
        return FieldType.SCALAR
    if kind in DEPENDENCY_FIELDS:
        return FieldType.DEPENDENCIES
    return FieldType.LIST


@dataclass
class Section:
    """Field accumulator for a pkgbase or a pkgname section."""

    fields: dict[TokenKind, str | list[str] | DependencyList] = field(default_factory=dict)

    def assign(self, kind: TokenKind, stream: TokenStream) -> None:
        """
        Read the value for ``kind`` from the stream into this section.

        Scalars are replaced. Lists and dependency lists are created on the
        first assignment in this section and extended by later ones.
        """
        match field_type(kind):
            case FieldType.SCALAR:
                self.fields[kind] = stream.scalar()
            case FieldType.LIST:
                self.fields.setdefault(kind, []).extend(stream.values())
            case FieldType.DEPENDENCIES:
                dependencies = self.fields.setdefault(kind, DependencyList())
                for value in stream.values():
                    dependencies.add(value)

    def snapshot(self) -> dict[TokenKind, str | list[str] | DependencyList]:
        """Copy of the fields; later assignments to this section do not show through."""
        copied = {}
        for kind, value in self.fields.items():
            if isinstance(value, DependencyList):
                copied[kind] = value.copy()
            elif isinstance(value, list):
                copied[kind] = list(value)
            else:
                copied[kind] = value
        return copied


@dataclass
class PendingPackage:
    """
    A pkgname section: the base fields inherited when it opened plus its
    own overrides. ``base`` is kept to read the shared version fields once
    the stream ends.
    """

    name: str
    base: Section
    inherited: dict = field(default_factory=dict)
    overrides: Section = field(default_factory=Section)

    def assign(self, token: Token, stream: TokenStream) -> None:
        kind = token.kind
        if token.arch_scoped and kind not in self.overrides.fields and kind in self.inherited:
            # scoped values extend the inherited list instead of replacing it
            self.overrides.fields[kind] = self.inherited[kind]
        self.overrides.assign(kind, stream)

    def fields(self) -> dict:
        merged = dict(self.inherited)
        merged.update(self.overrides.fields)
        for kind in BASE_ONLY:
            if kind in self.base.fields:
                merged[kind] = self.base.fields[kind]
            else:
                merged.pop(kind, None)
        return merged


class RecordBuilder:
    """
    Builds package records from a token stream.

    Usage:
        records = RecordBuilder().build(tokenize(text))
    """

    def __init__(self):
        self.base = Section()
        self.current: PendingPackage | None = None
        self.pending: list[PendingPackage] = []

    def build(self, tokens: Iterator[Token]) -> list[PackageRecord]:
        """
        Consume the whole stream and return the validated records.

        Raises:
            TokenizeError: the lexer reported an error.
            ConstraintError: a dependency field holds a malformed constraint.
            ValidationError: a finished record is missing required data.
        """
        stream = TokenStream(tokens)
        for token in stream:
            self._apply(token, stream)

        if not self.pending:
            raise ValidationError("missing pkgname: no packages found")

        records = [self._finish(package) for package in self.pending]
        logger.info(f"[SRCINFO] Parsed {len(records)} package(s) from pkgbase {records[0].pkgbase!r}")
        return records

    def _apply(self, token: Token, stream: TokenStream) -> None:
        match token.kind:
            case TokenKind.EOF:
                return
            case TokenKind.END_SPLIT:
                if self.current is not None:
                    logger.debug(f"[SRCINFO] End of section for {self.current.name!r}")
                    self.current = None
            case TokenKind.PKGBASE:
                self.base = Section()
                self.base.fields[TokenKind.PKGBASE] = stream.scalar()
                self.current = None
            case TokenKind.PKGNAME:
                self.current = PendingPackage(
                    name=stream.scalar(),
                    base=self.base,
                    inherited=self.base.snapshot(),
                )
                self.pending.append(self.current)
            case kind if kind.is_variable:
                if self.current is None or kind in BASE_ONLY:
                    self.base.assign(kind, stream)
                else:
                    self.current.assign(token, stream)
            case _:
                raise TokenizeError(f"unexpected {token.kind.name} token", token.position)

    def _finish(self, package: PendingPackage) -> PackageRecord:
        pkgbase = package.base.fields.get(TokenKind.PKGBASE) or self._first_name(package.base)
        return validate(package.name, pkgbase, package.fields())

    def _first_name(self, base: Section) -> str:
        return next(package.name for package in self.pending if package.base is base)


def _as_tuple(value) -> tuple:
    return tuple(value) if value is not None else ()


def validate(name: str, pkgbase: str, fields: dict) -> PackageRecord:
    """Check the required fields of one package and freeze it into a record."""
    if not is_valid_name(name):
        raise ValidationError(f"invalid pkgname: {name!r}")

    pkgver = fields.get(TokenKind.PKGVER, "")
    if not pkgver:
        raise ValidationError(f"missing pkgver for {name!r}")
    if not is_valid_version(pkgver):
        raise ValidationError(f"invalid pkgver: {pkgver!r}")

    pkgrel = fields.get(TokenKind.PKGREL, "")
    if pkgrel and not is_valid_version(pkgrel):
        raise ValidationError(f"invalid pkgrel: {pkgrel!r}")

    raw_epoch = fields.get(TokenKind.EPOCH, "") or "0"
    if not raw_epoch.isdecimal():
        raise ValidationError(f"invalid epoch: {raw_epoch!r}")

    arch_literals = fields.get(TokenKind.ARCH, [])
    if not arch_literals:
        raise ValidationError(f"arch missing for {name!r}")
    arch = tuple(Arch.parse(literal) for literal in arch_literals)

    def strings(kind: TokenKind) -> tuple[str, ...]:
        return _as_tuple(fields.get(kind))

    return PackageRecord(
        pkgname=name,
        pkgbase=pkgbase,
        pkgver=Version(pkgver),
        pkgrel=pkgrel,
        epoch=int(raw_epoch),
        pkgdir=fields.get(TokenKind.PKGDIR, ""),
        pkgdesc=fields.get(TokenKind.PKGDESC, ""),
        arch=arch,
        url=fields.get(TokenKind.URL, ""),
        license=strings(TokenKind.LICENSE),
        groups=strings(TokenKind.GROUPS),
        depends=strings(TokenKind.DEPENDS),
        optdepends=strings(TokenKind.OPTDEPENDS),
        makedepends=strings(TokenKind.MAKEDEPENDS),
        checkdepends=strings(TokenKind.CHECKDEPENDS),
        provides=strings(TokenKind.PROVIDES),
        conflicts=strings(TokenKind.CONFLICTS),
        replaces=strings(TokenKind.REPLACES),
        backup=strings(TokenKind.BACKUP),
        options=strings(TokenKind.OPTIONS),
        install=fields.get(TokenKind.INSTALL, ""),
        changelog=fields.get(TokenKind.CHANGELOG, ""),
        source=strings(TokenKind.SOURCE),
        noextract=strings(TokenKind.NOEXTRACT),
        md5sums=strings(TokenKind.MD5SUMS),
        sha1sums=strings(TokenKind.SHA1SUMS),
        sha224sums=strings(TokenKind.SHA224SUMS),
        sha256sums=strings(TokenKind.SHA256SUMS),
        sha384sums=strings(TokenKind.SHA384SUMS),
        sha512sums=strings(TokenKind.SHA512SUMS),
        validpgpkeys=strings(TokenKind.VALIDPGPKEYS),
    )


def parse_srcinfo(text: str) -> list[PackageRecord]:
    """
    Parse a SRCINFO or flattened PKGBUILD blob into package records.

    Args:
        text: UTF-8 decoded metadata text.

    Returns:
        One PackageRecord per pkgname section, in input order. Nothing is
        returned on failure: any error aborts the whole parse.
    """
    return RecordBuilder().build(tokenize(text))
