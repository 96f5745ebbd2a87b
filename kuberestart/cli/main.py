"""``kuberestart`` command.

Every option falls back to its ``KUBERESTART_*`` environment variable.
"""

from __future__ import annotations

import asyncio

import click

from kuberestart.config import load_config


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--master", default=None, help="Kubernetes API server URL (overrides kubeconfig).")
@click.option("--kubeconfig", default=None, type=click.Path(dir_okay=False), help="Path to a kubeconfig file.")
@click.option("--event-reason", default=None, help="Reason set on emitted events [default: ContainerRestart].")
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
)
@click.option("--log-format", default=None, type=click.Choice(["json", "console"], case_sensitive=False))
@click.option("--status-port", default=None, type=int, help="Status/metrics port; 0 disables [default: 8080].")
@click.version_option(package_name="kuberestart")
def cli(
    master: str | None,
    kubeconfig: str | None,
    event_reason: str | None,
    log_level: str | None,
    log_format: str | None,
    status_port: int | None,
) -> None:
    """Watch all pods and record a Warning event for every container restart."""
    try:
        config = load_config(
            {
                "master": master,
                "kubeconfig": kubeconfig,
                "event_reason": event_reason,
                "log_level": log_level,
                "log_format": log_format,
                "status_port": status_port,
            }
        )
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc

    from kuberestart.app import main

    raise SystemExit(asyncio.run(main(config)))
