"""Tests for the command line interface."""

import json
from io import BytesIO
from pathlib import Path

import pytest
from click.testing import CliRunner
from pypdf import PdfReader

from docbrand.cli import main, parse_pages, parse_variables

from conftest import make_pdf


@pytest.fixture
def workspace(tmp_path: Path, placeholder_dir: Path, png_logo: Path) -> Path:
    """Directory with a source PDF, a template and a docbrand.toml."""
    (tmp_path / "source.pdf").write_bytes(make_pdf(3))
    (tmp_path / "template.json").write_text(
        json.dumps({"elements": {"text": [{"content": "For {{user.email}} ({{filename}})"}]}}),
        encoding="utf-8",
    )
    (tmp_path / "docbrand.toml").write_text(
        f'placeholder_dir = "{placeholder_dir.as_posix()}"\n'
        f'logo_path = "{png_logo.as_posix()}"\n'
        'fonts_dir = "fonts"\n',
        encoding="utf-8",
    )
    return tmp_path


def run(args: list[str]):
    return CliRunner().invoke(main, args, catch_exceptions=False)


class TestParsing:
    def test_pages(self):
        assert parse_pages("2,4") == [2, 4]
        assert parse_pages("1-3, 7") == [1, 2, 3, 7]
        assert parse_pages("") == []

    def test_variables(self):
        assert parse_variables(("course=Algebra", "empty=")) == {"course": "Algebra", "empty": ""}


class TestCompose:
    def test_compose(self, workspace: Path):
        output = workspace / "out.pdf"
        result = run([
            "compose", str(workspace / "source.pdf"), str(workspace / "template.json"),
            "-o", str(output), "--user-email", "dana@example.com",
            "--config", str(workspace / "docbrand.toml"),
        ])

        assert result.exit_code == 0, result.output
        reader = PdfReader(BytesIO(output.read_bytes()))
        assert len(reader.pages) == 3
        assert "For dana@example.com (source.pdf)" in reader.pages[0].extract_text()

    def test_compose_with_accessible_pages(self, workspace: Path):
        output = workspace / "out.pdf"
        result = run([
            "compose", str(workspace / "source.pdf"), str(workspace / "template.json"),
            "-o", str(output), "--accessible", "2",
            "--config", str(workspace / "docbrand.toml"),
        ])

        assert result.exit_code == 0, result.output
        assert "page 1: placeholder" in result.output
        assert "page 2: accessible" in result.output
        assert len(PdfReader(BytesIO(output.read_bytes())).pages) == 3

    def test_legacy_template_is_an_error(self, workspace: Path):
        (workspace / "legacy.json").write_text('{"logo": {"enabled": true}}', encoding="utf-8")
        result = run([
            "compose", str(workspace / "source.pdf"), str(workspace / "legacy.json"),
            "-o", str(workspace / "out.pdf"), "--config", str(workspace / "docbrand.toml"),
        ])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_bad_var(self, workspace: Path):
        result = CliRunner().invoke(main, [
            "compose", str(workspace / "source.pdf"), str(workspace / "template.json"),
            "-o", str(workspace / "out.pdf"), "--var", "novalue",
        ])
        assert result.exit_code == 2


class TestOtherCommands:
    def test_placeholders(self, workspace: Path):
        out_dir = workspace / "generated"
        result = run(["placeholders", str(out_dir), "--config", str(workspace / "docbrand.toml")])
        assert result.exit_code == 0, result.output
        assert sorted(p.name for p in out_dir.iterdir()) == [
            "preview-not-available-landscape.pdf",
            "preview-not-available-portrait.pdf",
            "preview-not-available-slide.pdf",
        ]

    def test_inspect(self, workspace: Path):
        result = run(["inspect", str(workspace / "source.pdf")])
        assert result.exit_code == 0
        assert "Pages:  3" in result.output
        assert "Format: portrait" in result.output
        assert "595 x 842 pt" in result.output

    def test_version(self):
        result = run(["--version"])
        assert "0.1.0" in result.output
