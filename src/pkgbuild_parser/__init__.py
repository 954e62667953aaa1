"""
pkgbuild-parser - Arch Linux package metadata parser.

Turns SRCINFO text (or the flattened form of a PKGBUILD) into structured
package records, and implements Arch-style version ordering and dependency
constraint satisfaction.
"""

__version__ = "1.0.0"

_EXPORTS = {
    "parse_srcinfo": "pkgbuild_parser.parsers.srcinfo",
    "tokenize": "pkgbuild_parser.parsers.lexer",
    "PackageRecord": "pkgbuild_parser.models.package",
    "Arch": "pkgbuild_parser.models.package",
    "Version": "pkgbuild_parser.models.version",
    "CompleteVersion": "pkgbuild_parser.models.version",
    "ReleaseOrdering": "pkgbuild_parser.models.version",
    "vercmp": "pkgbuild_parser.models.version",
    "Dependency": "pkgbuild_parser.models.dependency",
    "DependencyList": "pkgbuild_parser.models.dependency",
    "parse_constraint": "pkgbuild_parser.models.dependency",
    "parse_dependencies": "pkgbuild_parser.models.dependency",
    "satisfies": "pkgbuild_parser.models.dependency",
    "restrict": "pkgbuild_parser.models.dependency",
    "PkgbuildError": "pkgbuild_parser.core.errors",
    "TokenizeError": "pkgbuild_parser.core.errors",
    "ValidationError": "pkgbuild_parser.core.errors",
    "ConstraintError": "pkgbuild_parser.core.errors",
}


def __getattr__(name: str):
    """Lazy import of the public API."""
    if name in _EXPORTS:
        from importlib import import_module

        return getattr(import_module(_EXPORTS[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [*_EXPORTS, "__version__"]
