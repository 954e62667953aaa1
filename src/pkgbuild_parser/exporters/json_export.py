"""
JSON Exporter — One document per package plus an index grouped by pkgbase.
"""

import json
import logging
from pathlib import Path

import aiofiles

from pkgbuild_parser.models.package import PackageRecord

logger = logging.getLogger(__name__)


class JSONExporter:
    """
    Writes every PackageRecord to ``packages/<pkgname>.json`` and, on
    finalize, ``index.json`` mapping each pkgbase to its packages' versions.

    Output structure:
        output_dir/
        ├── index.json        {"linux": {"linux": "6.1-1", "linux-headers": "6.1-1"}}
        └── packages/
            ├── linux.json
            └── linux-headers.json

    Exporting the same pkgname twice overwrites the earlier document.
    """

    INDEX_FILE = "index.json"
    PACKAGES_DIR = "packages"

    def __init__(self, output_dir: Path, indent: int = 2):
        self.output_dir = output_dir
        self.packages_dir = output_dir / self.PACKAGES_DIR
        self.packages_dir.mkdir(parents=True, exist_ok=True)
        self.indent = indent
        self.index: dict[str, dict[str, str]] = {}

    @property
    def count(self) -> int:
        return sum(len(packages) for packages in self.index.values())

    async def _write(self, path: Path, payload) -> None:
        async with aiofiles.open(path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(payload, indent=self.indent, ensure_ascii=False))

    async def export(self, record: PackageRecord) -> None:
        await self._write(self.packages_dir / f"{record.pkgname}.json", record.to_dict())
        self.index.setdefault(record.pkgbase, {})[record.pkgname] = record.version_string()
        logger.debug(f"[EXPORT] Wrote {record.pkgname} ({record.version_string()})")

    async def finalize(self) -> None:
        await self._write(self.output_dir / self.INDEX_FILE, self.index)
        logger.info(
            f"[EXPORT] Export complete: {self.count} package(s) from "
            f"{len(self.index)} pkgbase(s) in {self.output_dir}"
        )
