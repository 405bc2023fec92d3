"""CLI interface for docbrand."""

import json
import logging
from pathlib import Path

import click

from docbrand import __version__
from docbrand.api.builder import compose_pdf, generate_placeholders, inspect_pdf, redact_pdf
from docbrand.config import load_config
from docbrand.errors import DocbrandError
from docbrand.render.placeholders import DocumentFormat


def parse_variables(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated key=value options into a dict."""
    variables = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise click.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--var")
        variables[key.strip()] = value
    return variables


def parse_pages(value: str) -> list[int]:
    """Parse a page list like '2,4' or '1-3,7'."""
    pages: list[int] = []
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            if "-" in part:
                start, end = (int(p) for p in part.split("-", 1))
                pages.extend(range(start, end + 1))
            else:
                pages.append(int(part))
        except ValueError:
            raise click.BadParameter(f"Invalid page '{part}'", param_hint="--accessible")
    return pages


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Log progress and rendering warnings.")
def main(verbose: bool) -> None:
    """Brand PDFs with positioned templates and restrict pages to placeholders."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("template", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help="Output PDF file path.",
)
@click.option(
    "--var",
    "var_pairs",
    multiple=True,
    help="Template variable as key=value (repeatable).",
)
@click.option("--user-email", type=str, help="Email shown by {{user.email}}.")
@click.option("--user-name", type=str, help="Name shown by {{user.name}}.")
@click.option(
    "--accessible",
    type=str,
    help="Accessible pages, e.g. '2,4' or '1-3'. Other pages become placeholders.",
)
@click.option(
    "--format",
    "format_hint",
    type=click.Choice([f.value for f in DocumentFormat], case_sensitive=False),
    help="Placeholder format. Detected from the first page if not specified.",
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to docbrand.toml. Defaults to ./docbrand.toml",
)
def compose(
    source: Path,
    template: Path,
    output: Path,
    var_pairs: tuple[str, ...],
    user_email: str | None,
    user_name: str | None,
    accessible: str | None,
    format_hint: str | None,
    config: Path | None,
) -> None:
    """
    Apply TEMPLATE (JSON) to SOURCE (PDF).

    With --accessible, only the listed pages keep their content; the rest are
    replaced by the placeholder page for the document's format.
    """
    try:
        cfg = load_config(config)
        payload = json.loads(template.read_text(encoding="utf-8"))

        variables: dict[str, object] = parse_variables(var_pairs)
        variables.setdefault("filename", source.name)
        if user_email or user_name:
            variables["user"] = {"email": user_email, "name": user_name}

        if accessible is None:
            data = compose_pdf(source, payload, variables, config=cfg)
            click.echo(f"Composed {source.name}")
        else:
            pages = parse_pages(accessible)
            result = redact_pdf(source, pages, payload, variables, format_hint=format_hint, config=cfg)
            data = result.data
            for outcome in result.pages:
                click.echo(f"  page {outcome.number}: {outcome.state}")

        output.write_bytes(data)
        click.echo(f"✓ Saved to: {output}")

    except json.JSONDecodeError as e:
        click.echo(f"Error: Template is not valid JSON: {e}", err=True)
        raise SystemExit(1)
    except (DocbrandError, FileNotFoundError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("output_dir", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--logo",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Logo image (PNG, JPEG or SVG). Uses the configured logo if not specified.",
)
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to docbrand.toml. Defaults to ./docbrand.toml",
)
def placeholders(output_dir: Path, logo: Path | None, config: Path | None) -> None:
    """Generate the portrait, landscape and slide placeholder PDFs into OUTPUT_DIR."""
    try:
        cfg = load_config(config)
        for path in generate_placeholders(output_dir, cfg, logo_path=logo):
            click.echo(f"✓ {path}")
    except (DocbrandError, FileNotFoundError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inspect(source: Path) -> None:
    """Show page count, page sizes and detected format of SOURCE."""
    try:
        info = inspect_pdf(source)
    except DocbrandError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)

    click.echo(f"Pages:  {info['page_count']}")
    click.echo(f"Format: {info['format'] or 'unknown'}")
    for number, (width, height) in enumerate(info["page_sizes"], start=1):
        click.echo(f"  {number}: {width:.0f} x {height:.0f} pt")


if __name__ == "__main__":
    main()
