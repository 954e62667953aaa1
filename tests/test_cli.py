"""Tests for the CLI entry points."""

import json
import tempfile
from pathlib import Path

import pytest
from click.testing import CliRunner

from pkgbuild_parser.cli.main import cli


SRCINFO = """\
pkgbase=hello
pkgver=2.12
pkgrel=1
arch=(x86_64)
license=(GPL3)
depends=(glibc)

pkgname=hello
pkgdesc='GNU Hello'

pkgname=hello-docs
pkgdesc='GNU Hello documentation'
arch=(any)
"""


@pytest.fixture
def srcinfo_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / ".SRCINFO"
        path.write_text(SRCINFO)
        yield path


class TestCLI:
    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Arch Linux package metadata" in result.output

    def test_parse_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "--help"])
        assert result.exit_code == 0
        assert "--json" in result.output
        assert "--verbose" in result.output

    def test_export_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["export", "--help"])
        assert result.exit_code == 0
        assert "--output-dir" in result.output
        assert "--format" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output


# ═══════════════════════════════════════════
# parse
# ═══════════════════════════════════════════


class TestParseCommand:
    def test_json_output(self, srcinfo_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "--json", str(srcinfo_file)])
        assert result.exit_code == 0

        data = json.loads(result.stdout)
        assert [r["pkgname"] for r in data] == ["hello", "hello-docs"]
        assert data[0]["version"] == "2.12-1"
        assert data[1]["arch"] == ["any"]
        assert data[1]["depends"] == ["glibc"]

    def test_stdin(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "--json", "-"], input=SRCINFO)
        assert result.exit_code == 0
        assert len(json.loads(result.stdout)) == 2

    def test_table_output(self, srcinfo_file):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", str(srcinfo_file)])
        assert result.exit_code == 0
        assert "hello-docs" in result.output
        assert "glibc" in result.output

    def test_invalid_input(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["parse", "-"], input="pkgname=foo\npkgver=1\n")
        assert result.exit_code == 1
        assert "arch missing" in result.output


# ═══════════════════════════════════════════
# export
# ═══════════════════════════════════════════


class TestExportCommand:
    def test_writes_records(self, srcinfo_file):
        runner = CliRunner()
        with tempfile.TemporaryDirectory() as tmpdir:
            result = runner.invoke(cli, ["export", str(srcinfo_file), "--output-dir", tmpdir])
            assert result.exit_code == 0
            assert "Exported 2 package(s)" in result.output
            assert (Path(tmpdir) / "packages" / "hello.json").exists()
            assert (Path(tmpdir) / "packages" / "hello-docs.json").exists()
            assert json.loads((Path(tmpdir) / "index.json").read_text()) == {
                "hello": {"hello": "2.12-1", "hello-docs": "2.12-1"}
            }


# ═══════════════════════════════════════════
# vercmp / satisfies
# ═══════════════════════════════════════════


class TestVersionCommands:
    @pytest.mark.parametrize(
        "a, b, expected",
        [
            ("1.0", "1.0", "0"),
            ("1.0.1", "1.0.a", "1"),
            ("11", "012", "-1"),
            ("1:1.0", "2.0", "1"),
            ("1.0-1", "1.0", "1"),
        ],
    )
    def test_vercmp(self, a, b, expected):
        runner = CliRunner()
        result = runner.invoke(cli, ["vercmp", a, b])
        assert result.exit_code == 0
        assert result.output.strip() == expected

    def test_vercmp_legacy_release(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["vercmp", "--legacy-release", "1.0-1.5", "1.0-1"])
        assert result.exit_code == 1
        assert "not an integer" in result.output

    def test_vercmp_invalid(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["vercmp", "1:2:3", "1"])
        assert result.exit_code == 1

    def test_satisfies(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["satisfies", "1.5", "foo>1", "foo<2"])
        assert result.exit_code == 0
        assert "foo>1, foo<2" in result.output

    def test_not_satisfied(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["satisfies", "2", "foo>1", "foo<2"])
        assert result.exit_code == 1
