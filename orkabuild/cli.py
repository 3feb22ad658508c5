"""Command line interface for running orkabuild image builds."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from orkabuild.client import OrkaClient
from orkabuild.config import load_config
from orkabuild.errors import ConfigError
from orkabuild.reporting import ConsoleReporter
from orkabuild.runner import build_workflow
from orkabuild.store import InMemoryStore

app = typer.Typer(help="Build Orka VM images from a source image")


@app.callback()
def main() -> None:
    """orkabuild CLI entry point."""
    pass


def _load(config_path: Optional[Path]):
    try:
        return load_config(str(config_path) if config_path else None)
    except ConfigError as e:
        typer.secho(str(e), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)


@app.command("build")
def build(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to the build config YAML"
    ),
    log_level: str = typer.Option("WARNING", help="Python logging level"),
) -> None:
    """
    Run a full image build.

    Logs into Orka, deploys the builder VM, creates the image and removes the
    builder VM afterwards (unless no_delete_vm is set).

    The provision step is skipped here: the CLI has no provisioner to hand
    the SSH endpoint to. Embed the workflow with build_workflow(...,
    provisioner=...) to run provisioning between deploy and image creation.

    Example:
        orkabuild build --config orkabuild.yaml
        ORKA_PASSWORD=secret orkabuild build -c ci.yaml --log-level INFO
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = _load(config_path)
    reporter = ConsoleReporter()
    store = InMemoryStore()

    with OrkaClient.from_config(config) as client:
        runner = build_workflow(config, client, reporter, store=store)
        state = runner.run()

    if state.failed:
        typer.secho(f"Build failed: {state.error}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if state.cancelled:
        raise typer.Exit(code=1)
    typer.echo("Build finished")


@app.command("validate")
def validate(
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to the build config YAML"
    ),
) -> None:
    """Validate configuration and print the effective settings."""
    config = _load(config_path)
    for key, value in config.redacted().items():
        typer.echo(f"{key}: {value}")
    typer.echo("Configuration is valid")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
