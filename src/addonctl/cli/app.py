# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/addonctl/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from addonctl.addons.assets import AssetBundle
from addonctl.addons.registry import build_addons
from addonctl.config.loader import load_config
from addonctl.deploy.executor import AddonInstallError, InstallOptions, install_all
from addonctl.deploy.planner import CyclicDependencyError, resolve
from addonctl.execution import InstallCancelled
from addonctl.helm.cli_runner import HelmTemplateRenderer
from addonctl.kube.kubectl import KubectlClient
from addonctl.logging.log import init_logging
from addonctl.observers.console import ConsoleObserver
from addonctl.observers.jsonfile import JsonFileObserver
from addonctl.observers.logger import LoggerObserver


# ------------------------------------------------------------------------------
# CLI setup
# ------------------------------------------------------------------------------

app = typer.Typer(help="Cluster addon installer")


@app.command()
def plan(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Addons config YAML"),
) -> None:
    """Print the resolved install order without touching the cluster."""
    cfg = load_config(config)
    addons = build_addons(cfg)
    try:
        ordered = resolve(addons)
    except CyclicDependencyError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=1)

    for i, addon in enumerate(ordered, start=1):
        deps = ", ".join(addon.dependencies) or "-"
        typer.echo(f"{i:>2}. {addon.name}  (after: {deps})")


@app.command()
def install(
    config: Path = typer.Argument(..., exists=True, dir_okay=False, help="Addons config YAML"),
    dry_run: Optional[bool] = typer.Option(None, "--dry-run/--apply", help="Render and patch only"),
    continue_on_error: Optional[bool] = typer.Option(
        None, "--continue-on-error/--fail-fast", help="Keep going after a failed addon"
    ),
    verify: Optional[bool] = typer.Option(None, "--verify/--no-verify", help="Wait for workloads after apply"),
    events_file: Optional[Path] = typer.Option(None, help="Append lifecycle events as JSON lines"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Install every enabled addon in dependency order."""
    logger, run_id, log_path = init_logging(verbose=verbose)
    cfg = load_config(config)
    settings = cfg.install

    options = InstallOptions(
        timeout_seconds=settings.timeout_seconds,
        verify=settings.verify if verify is None else verify,
        continue_on_error=settings.continue_on_error if continue_on_error is None else continue_on_error,
        dry_run=settings.dry_run if dry_run is None else dry_run,
    )

    assets = AssetBundle(cfg.assets_dir) if cfg.assets_dir else None
    renderer = HelmTemplateRenderer(assets=assets)
    client = KubectlClient(
        kubeconfig=cfg.kubeconfig,
        context=cfg.context,
        field_manager=settings.field_manager,
        apply_retries=settings.apply_retries,
    )

    observers = [LoggerObserver(logger)]
    if verbose:
        observers.append(ConsoleObserver())
    if events_file:
        observers.append(JsonFileObserver(events_file))

    addons = build_addons(cfg, renderer=renderer, assets=assets)
    try:
        report = install_all(
            addons,
            client,
            options=options,
            observers=observers,
            env=cfg.environment,
            kube_context=cfg.context,
            run_id=run_id,
        )
    except (CyclicDependencyError, AddonInstallError, InstallCancelled) as e:
        logger.error(str(e))
        typer.echo(f"error: {e} (log: {log_path})", err=True)
        raise typer.Exit(code=1)

    typer.echo(report.summary())
    if report.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
