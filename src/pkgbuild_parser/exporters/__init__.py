"""Export backends for parsed package records."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

from pkgbuild_parser.exporters.json_export import JSONExporter
from pkgbuild_parser.models.package import PackageRecord


@runtime_checkable
class Exporter(Protocol):
    """Anything that can persist a run of PackageRecords."""

    async def export(self, record: PackageRecord) -> None: ...

    async def finalize(self) -> None:
        """Flush whatever summarizes the run; called once after the last record."""
        ...


def get_exporter(format_name: str, output_dir: str | Path) -> Exporter:
    match format_name:
        case "json":
            return JSONExporter(output_dir=Path(output_dir))
        case _:
            raise ValueError(f"Unknown export format: {format_name!r}. Use 'json'.")


__all__ = ["Exporter", "JSONExporter", "get_exporter"]
