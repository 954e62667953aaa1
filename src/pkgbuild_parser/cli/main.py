"""
pkgbuild-parser CLI — Inspect SRCINFO files and compare package versions.

Usage:
    pkgbuild-parser parse .SRCINFO
    pkgbuild-parser parse --json - < .SRCINFO
    pkgbuild-parser export .SRCINFO --output-dir ./records
    pkgbuild-parser vercmp 1:2.0-1 2.1-1
    pkgbuild-parser satisfies 1.5 'foo>1' 'foo<2'
"""

import asyncio
import json
import logging

import click
from rich.console import Console
from rich.table import Table

from pkgbuild_parser.core.errors import PkgbuildError
from pkgbuild_parser.models.dependency import parse_dependencies
from pkgbuild_parser.models.package import PackageRecord
from pkgbuild_parser.models.version import CompleteVersion, ReleaseOrdering


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _parse_records(text: str) -> list[PackageRecord]:
    from pkgbuild_parser.parsers.srcinfo import parse_srcinfo

    try:
        return parse_srcinfo(text)
    except PkgbuildError as e:
        raise click.ClickException(str(e)) from e


def _record_table(record: PackageRecord) -> Table:
    table = Table(title=f"{record.pkgname} {record.version_string()}", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("pkgbase", record.pkgbase)
    table.add_row("pkgdesc", record.pkgdesc)
    table.add_row("arch", " ".join(str(arch) for arch in record.arch))
    table.add_row("url", record.url)
    table.add_row("license", " ".join(record.license))
    for name in ("depends", "makedepends", "checkdepends"):
        dependencies = getattr(record, name)
        if dependencies:
            table.add_row(name, "\n".join(str(dep) for dep in dependencies))
    for name in ("optdepends", "provides", "conflicts", "replaces"):
        values = getattr(record, name)
        if values:
            table.add_row(name, "\n".join(values))
    return table


@click.group()
@click.version_option(package_name="pkgbuild-parser")
def cli():
    """pkgbuild-parser — Arch Linux package metadata tools."""
    pass


@cli.command()
@click.argument("srcinfo", type=click.File("r", encoding="utf-8"))
@click.option("--json", "as_json", is_flag=True, help="Print records as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def parse(srcinfo, as_json, verbose):
    """Parse a SRCINFO (or flattened PKGBUILD) file and show its packages."""
    _configure_logging(verbose)
    records = _parse_records(srcinfo.read())

    if as_json:
        click.echo(json.dumps([record.to_dict() for record in records], indent=2))
        return

    console = Console()
    for record in records:
        console.print(_record_table(record))


@cli.command()
@click.argument("srcinfo", type=click.File("r", encoding="utf-8"))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(),
    default="./records",
    help="Output directory for exported records.",
)
@click.option(
    "--format",
    "-f",
    "fmt",
    type=click.Choice(["json"]),
    default="json",
    help="Export format.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def export(srcinfo, output_dir, fmt, verbose):
    """Parse a SRCINFO file and write one file per package."""
    from pkgbuild_parser.exporters import get_exporter

    _configure_logging(verbose)
    records = _parse_records(srcinfo.read())
    exporter = get_exporter(fmt, output_dir)

    async def run():
        for record in records:
            await exporter.export(record)
        await exporter.finalize()

    asyncio.run(run())
    click.echo(f"Exported {len(records)} package(s) to {output_dir}")


@cli.command()
@click.argument("version_a")
@click.argument("version_b")
@click.option("--legacy-release", is_flag=True, help="Compare pkgrel as a plain integer.")
def vercmp(version_a, version_b, legacy_release):
    """Print -1, 0 or 1 as VERSION_A is older than, equal to or newer than VERSION_B."""
    ordering = ReleaseOrdering.INTEGER if legacy_release else ReleaseOrdering.VERSION
    try:
        result = CompleteVersion.parse(version_a).compare(CompleteVersion.parse(version_b), ordering)
    except PkgbuildError as e:
        raise click.ClickException(str(e)) from e
    click.echo(str(result))


@cli.command()
@click.argument("version")
@click.argument("constraints", nargs=-1, required=True)
@click.pass_context
def satisfies(ctx, version, constraints):
    """Exit 0 if VERSION satisfies every CONSTRAINT (merged per name), 1 otherwise."""
    try:
        candidate = CompleteVersion.parse(version)
        dependencies = parse_dependencies(constraints)
    except PkgbuildError as e:
        raise click.ClickException(str(e)) from e

    console = Console()
    ok = True
    for dependency in dependencies:
        if dependency.satisfied_by(candidate):
            console.print(f"[green]✓[/green] {candidate} satisfies {dependency}")
        else:
            console.print(f"[red]✗[/red] {candidate} does not satisfy {dependency}")
            ok = False
    ctx.exit(0 if ok else 1)


if __name__ == "__main__":
    cli()
