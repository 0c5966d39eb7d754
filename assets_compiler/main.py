"""
Assets Compiler — CLI entrypoint.

Usage:
    python -m assets_compiler.main --help
    python -m assets_compiler.main compile-assets
    python -m assets_compiler.main compile-assets --no-dev --env production
    python -m assets_compiler.main packages
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from assets_compiler.core.observability.logging_config import (
    FILE_ENV,
    FILE_LEVEL_ENV,
    resolve_level,
    setup_logging,
)

from assets_compiler import __version__


@click.group()
@click.version_option(version=__version__, prog_name="assets-compiler")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--root",
    "-r",
    "root",
    type=click.Path(exists=True, file_okay=False),
    default=None,
    help="Project root holding composer.json (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    root: str | None,
) -> None:
    """Assets Compiler — build frontend assets of Composer packages."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["root"] = Path(root) if root else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(debug, verbose, quiet),
        log_file=os.environ.get(FILE_ENV),
        log_file_level=os.environ.get(FILE_LEVEL_ENV),
    )


@cli.command("compile-assets")
@click.option("--no-dev", is_flag=True, help="Use production settings ($default-no-dev).")
@click.option("--env", "environment", default=None, help="Environment name (default: $COMPOSER_ASSETS_COMPILER).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def compile_assets_cmd(
    ctx: click.Context,
    no_dev: bool,
    environment: str | None,
    as_json: bool,
) -> None:
    """Install dependencies and run build scripts of every package.

    Examples:

        assets-compiler compile-assets

        assets-compiler compile-assets --no-dev --env production

        assets-compiler -v compile-assets --json
    """
    from assets_compiler.core.use_cases.compile import compile_assets

    quiet = ctx.obj.get("quiet", False) or as_json

    def status(message: str) -> None:
        if not quiet:
            click.echo(message)

    if not quiet:
        click.secho("Starting assets compilation...", fg="cyan")

    report = compile_assets(
        project_root=ctx.obj.get("root"),
        env=environment,
        is_dev=not no_dev,
        status_sink=status,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(0 if report.all_ok else 1)
        return

    if not quiet and report.packages:
        click.echo()
        for pkg in report.packages:
            color = {"skipped": "white", "precompiled": "cyan", "success": "green", "failed": "red"}[pkg.state]
            click.secho(f"   {pkg.state:<12}", fg=color, nl=False)
            click.echo(f"{pkg.name}")
            for note in pkg.diagnostics:
                click.secho(f"{'':15}! {note}", fg="yellow")
        click.echo()

    if report.error:
        click.secho(report.error, fg="red", bold=True, err=True)
        sys.exit(1)

    if not quiet:
        if report.total:
            click.secho(
                f"Done: {report.total} package(s), {report.skipped} already compiled.",
                fg="green",
                bold=True,
            )
        else:
            click.secho("Nothing to compile.", fg="green")


@cli.command()
@click.option("--no-dev", is_flag=True, help="Use production settings ($default-no-dev).")
@click.option("--env", "environment", default=None, help="Environment name (default: $COMPOSER_ASSETS_COMPILER).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def packages(ctx: click.Context, no_dev: bool, environment: str | None, as_json: bool) -> None:
    """List the packages a compile run would process."""
    from assets_compiler.core.config.loader import ConfigError
    from assets_compiler.core.use_cases.compile import discover_packages

    try:
        discovery = discover_packages(
            project_root=ctx.obj.get("root"),
            env=environment,
            is_dev=not no_dev,
        )
    except ConfigError as e:
        if as_json:
            click.echo(json.dumps({"error": str(e)}, indent=2))
        else:
            click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(discovery.to_dict(), indent=2))
        return

    env_label = discovery.env_resolver.env() or "(none)"
    mode = "dev" if discovery.env_resolver.is_dev() else "no-dev"
    click.secho(f"\n📦 Packages: {len(discovery.packages)}", fg="cyan", bold=True)
    click.echo(f"   Environment: {env_label} ({mode})")
    click.echo()

    for package in discovery.packages.values():
        steps = []
        if package.config.dependencies != "none":
            steps.append(package.config.dependencies)
        steps.extend(f"script:{s}" for s in package.script)
        if package.precompilation:
            steps.insert(0, "precompiled:" + ",".join(c.adapter for c in package.precompilation))
        click.secho(f"   • {package.name} ", fg="green", nl=False)
        click.echo(f"[{' '.join(steps)}]  → {package.path}")

    click.echo()


if __name__ == "__main__":
    cli()
