"""
storegen — CLI entrypoint.

Usage:
    python -m storegen.main --help
    python -m storegen.main generate app
    python -m storegen.main domains
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from storegen import __version__
from storegen.core.observability.logging_config import resolve_level, setup_from_environment


@click.group()
@click.version_option(version=__version__, prog_name="storegen")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to storegen.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """storegen — generate persistence resolvers from marked Python types."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_environment(resolve_level(debug=debug, verbose=verbose, quiet=quiet))


@cli.command()
@click.argument("sources", nargs=-1)
@click.option("--output", "-o", default=None, help="Output directory (default: from config, else .).")
@click.option("--domain", "-d", default=None, help="Mapping domain (default: from config, else sqlite).")
@click.option("--dry-run", is_flag=True, help="Validate and render, but write nothing.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def generate(
    ctx: click.Context,
    sources: tuple[str, ...],
    output: str | None,
    domain: str | None,
    dry_run: bool,
    as_json: bool,
) -> None:
    """Run one generation round over SOURCES (files or directories)."""
    from storegen.core.use_cases.generate import run_generate

    result = run_generate(
        config_path=ctx.obj.get("config_path"),
        sources=list(sources) or None,
        output=output,
        domain=domain,
        dry_run=dry_run,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(1 if result.failed else 0)

    if result.errors:
        for err in result.errors:
            click.secho(f"❌ {err}", fg="red")
        sys.exit(1)

    quiet = ctx.obj.get("quiet", False)
    report = result.report
    if report is None:
        click.secho("❌ No processing round was run", fg="red")
        sys.exit(1)

    for path, err in result.scan_errors.items():
        click.secho(f"⚠️  Skipped {path}: {err}", fg="yellow", err=True)

    for diagnostic in report.diagnostics:
        click.secho(f"error: {diagnostic}", fg="red", err=True)

    if not quiet:
        verb = "Would write" if dry_run else "Wrote"
        click.echo(
            f"{verb} {len(result.written)} file(s) for {len(report.generated)} of "
            f"{len(report.types)} type(s) [{report.domain}]"
        )
        for path in result.written:
            click.echo(f"   • {path}")
        if result.unchanged:
            click.echo(f"   ({len(result.unchanged)} unchanged)")

    if report.diagnostics:
        click.secho(f"{len(report.diagnostics)} diagnostic(s)", fg="red", bold=True, err=True)

    sys.exit(1 if result.failed else 0)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def domains(as_json: bool) -> None:
    """List available mapping domains and their markers."""
    from storegen.domains.registry import default_registry

    described = default_registry().describe()

    if as_json:
        click.echo(json.dumps(described, indent=2))
        return

    for name, info in described.items():
        click.secho(name, fg="cyan", bold=True)
        click.echo(f"   type marker:   {info['type_marker']}")
        click.echo(f"   column marker: {info['column_marker']}")
        click.echo(f"   artifacts:     {', '.join(info['roles'])}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
