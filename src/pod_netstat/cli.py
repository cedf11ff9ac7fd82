"""CLI for pod-netstat.

Provides a command-line interface using Typer for:
- Serving per-pod network metrics to Prometheus
- Running one collection cycle and printing the result
- Resolving a container id to its host PID
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pod_netstat.core.config import apply_overrides, load_config
from pod_netstat.core.constants import DEFAULT_HOST_MOUNT_PATH
from pod_netstat.core.errors import ContainerNotFound, NetstatError
from pod_netstat.core.schemas import ExporterConfig
from pod_netstat.exposition.metrics import render_metrics
from pod_netstat.kubelet.client import KubeletClient
from pod_netstat.netstat.base import PodStats
from pod_netstat.netstat.collector import PodStatsCollector
from pod_netstat.netstat.resolver import CgroupResolver, read_task_pid
from pod_netstat.utils.logging import setup_logging

app = typer.Typer(
    name="pod-netstat",
    help="Per-pod network statistics exporter",
    add_completion=False,
)

console = Console()

_CONFIG_OPTION = typer.Option(
    None, "--config", "-c", envvar="POD_NETSTAT_CONFIG", help="Configuration file (YAML/JSON)"
)
_HOST_MOUNT_OPTION = typer.Option(
    None,
    "--host-mount-path",
    envvar="HOST_MOUNT_PATH",
    help="The path where the host filesystem is mounted (default /host)",
)
_KUBELET_API_OPTION = typer.Option(
    None, "--kubelet-api", envvar="KUBELET_API", help="kubelet API endpoint"
)
_KUBELET_INSECURE_OPTION = typer.Option(
    None,
    "--kubelet-api-insecure-skip-verify/--kubelet-api-verify",
    envvar="KUBELET_API_INSECURE_SKIP_VERIFY",
    help="Skip verification of TLS certificate from kubelet API",
)
_LOG_LEVEL_OPTION = typer.Option(None, "--log-level", "-l", envvar="LOG_LEVEL", help="Log level")


def _load(config: Path | None, **overrides: object) -> ExporterConfig:
    """Load the config file (if any) and apply command line overrides."""
    try:
        base = load_config(config) if config is not None else ExporterConfig()
        return apply_overrides(base, **overrides)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[bold red]Error loading config: {escape(str(e))}[/]")
        raise typer.Exit(1) from e


@app.command()
def serve(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
    json_logs: bool = typer.Option(False, "--json-logs", help="Output logs in JSON format"),
    rate_limit: float | None = typer.Option(
        None,
        "--rate-limit",
        envvar="RATE_LIMIT",
        help="The number of /metrics requests served per second (default 3)",
    ),
    bind_address: str | None = typer.Option(
        None,
        "--bind-address",
        "-p",
        envvar="BIND_ADDRESS",
        help="Address for binding the metrics listener (default :9657)",
    ),
    host_mount_path: Path | None = _HOST_MOUNT_OPTION,
    kubelet_api: str | None = _KUBELET_API_OPTION,
    kubelet_insecure: bool | None = _KUBELET_INSECURE_OPTION,
) -> None:
    """Serve per-pod network metrics for Prometheus."""
    from pod_netstat.exposition.server import serve as run_server

    exporter_config = _load(
        config,
        log_level=log_level,
        rate_limit=rate_limit,
        bind_address=bind_address,
        host_mount_path=host_mount_path,
        kubelet_api_endpoint=kubelet_api,
        kubelet_insecure_skip_verify=kubelet_insecure,
    )
    setup_logging(
        level=exporter_config.log_level, json_format=json_logs, rich_console=not json_logs
    )

    client = KubeletClient(exporter_config.kubelet)
    try:
        run_server(exporter_config, client)
    finally:
        client.close()


@app.command()
def collect(
    config: Path | None = _CONFIG_OPTION,
    log_level: str | None = _LOG_LEVEL_OPTION,
    host_mount_path: Path | None = _HOST_MOUNT_OPTION,
    kubelet_api: str | None = _KUBELET_API_OPTION,
    kubelet_insecure: bool | None = _KUBELET_INSECURE_OPTION,
    output_format: str = typer.Option(
        "table", "--format", "-f", help="Output format: table, json, prometheus"
    ),
) -> None:
    """Run one collection cycle and print the per-pod statistics."""
    exporter_config = _load(
        config,
        log_level=log_level,
        host_mount_path=host_mount_path,
        kubelet_api_endpoint=kubelet_api,
        kubelet_insecure_skip_verify=kubelet_insecure,
    )
    setup_logging(level=exporter_config.log_level)

    client = KubeletClient(exporter_config.kubelet)
    try:
        pods = client.get_pod_list()
    except NetstatError as e:
        console.print(f"[bold red]{escape(str(e))}[/]")
        raise typer.Exit(1) from e
    finally:
        client.close()

    stats = PodStatsCollector(exporter_config.host_mount_path).collect_all(pods)

    if output_format == "table":
        _show_stats_table(stats)
    elif output_format == "json":
        print(json.dumps([s.to_dict() for s in stats], indent=2, sort_keys=True))
    elif output_format == "prometheus":
        body, _ = render_metrics(stats)
        print(body.decode("utf-8"), end="")
    else:
        console.print(f"[bold red]Unknown output format: {output_format}[/]")
        raise typer.Exit(1)


@app.command()
def resolve(
    container_id: str = typer.Argument(..., help="Container id, e.g. docker://<hash>"),
    host_mount_path: Path = typer.Option(
        Path(DEFAULT_HOST_MOUNT_PATH), "--host-mount-path", envvar="HOST_MOUNT_PATH"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show probed cgroup layouts"),
) -> None:
    """Resolve a container id to the host PID of its first process."""
    setup_logging(level="DEBUG" if verbose else "WARNING")
    resolver = CgroupResolver()

    try:
        result = resolver.probe(host_mount_path, container_id)
        if result.matched is None:
            raise ContainerNotFound(container_id, result.candidates)
        pid = read_task_pid(result.matched)
    except NetstatError as e:
        console.print(f"[bold red]{escape(str(e))}[/]")
        raise typer.Exit(1) from e

    if verbose:
        for candidate in result.candidates[:-1]:
            console.print(f"[dim]miss[/]  {candidate}")
        console.print(f"[green]match[/] {result.candidates[-1]}")
        console.print(f"[dim]task file: {result.matched}[/]")
    console.print(str(pid))


def _show_stats_table(stats: list[PodStats]) -> None:
    """Display per-pod statistics in a table."""
    if not stats:
        console.print("[bold yellow]No pod statistics collected[/]")
        return

    table = Table(title="Pod Network Statistics")
    table.add_column("Namespace", style="cyan")
    table.add_column("Pod", style="cyan")
    table.add_column("Metric")
    table.add_column("Value", justify="right")

    for pod in stats:
        for key in sorted(pod.stats):
            table.add_row(pod.namespace, pod.name, key, str(pod.stats[key]))

    console.print(table)


if __name__ == "__main__":
    app()
